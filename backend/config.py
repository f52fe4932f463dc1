import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Sorted-set store connection
    REDIS_URL = os.environ.get('REDIS_URL') or 'redis://localhost:6379/0'
    REDIS_SOCKET_TIMEOUT_SEC = float(os.environ.get('REDIS_SOCKET_TIMEOUT_SEC', '5'))
    # Key namespaces; must not collide with unrelated keys in the same store
    LEADERBOARD_QUEUE_PREFIX = os.environ.get('LEADERBOARD_QUEUE_PREFIX', 'LEADERBOARD QUEUE:')
    LEADERBOARD_PREFIX = os.environ.get('LEADERBOARD_PREFIX', 'LEADERBOARD:')
    # push | store | both
    LEADERBOARD_PROJECTION_MODE = os.environ.get('LEADERBOARD_PROJECTION_MODE', 'push')
    # Per-subscriber buffered messages before the oldest is discarded
    FANOUT_BUFFER_SIZE = int(os.environ.get('FANOUT_BUFFER_SIZE', '256'))
    # Idle seconds before an SSE keep-alive comment is sent
    SSE_KEEPALIVE_SEC = float(os.environ.get('SSE_KEEPALIVE_SEC', '15'))
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'
        ).split(',') if o.strip()
    ]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
