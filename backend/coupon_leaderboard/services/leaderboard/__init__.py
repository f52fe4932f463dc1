"""Leaderboard domain services: winner queue, projection and fan-out.

Transport code (SSE stream, Socket.IO handlers, CLI) reaches these through
``current_app.extensions['leaderboard']``; nothing here is a module-level
singleton.
"""

from dataclasses import dataclass
from typing import Optional

from .broadcaster import LeaderboardBroadcaster, Subscription
from .projection import LeaderboardProjection, LeaderboardSnapshot
from .queue_service import LeaderboardQueueService, QueueResult
from .store import RedisSortedSetStore, SortedSetStore, SortedSetStoreError


@dataclass
class LeaderboardComponents:
    store: SortedSetStore
    broadcaster: LeaderboardBroadcaster
    projection: LeaderboardProjection
    queue: LeaderboardQueueService


def build_leaderboard(config, store: Optional[SortedSetStore] = None, socketio=None) -> LeaderboardComponents:
    """Wire store -> projection -> queue service from a Flask config mapping."""
    if store is None:
        store = RedisSortedSetStore.from_url(
            config.get('REDIS_URL', 'redis://localhost:6379/0'),
            socket_timeout=float(config.get('REDIS_SOCKET_TIMEOUT_SEC', 5)),
        )
    broadcaster = LeaderboardBroadcaster(
        buffer_size=int(config.get('FANOUT_BUFFER_SIZE', 256)),
        socketio=socketio,
    )
    projection = LeaderboardProjection(
        store,
        broadcaster,
        mode=config.get('LEADERBOARD_PROJECTION_MODE', 'push'),
        key_prefix=config.get('LEADERBOARD_PREFIX', 'LEADERBOARD:'),
    )
    queue = LeaderboardQueueService(
        store,
        projection,
        key_prefix=config.get('LEADERBOARD_QUEUE_PREFIX', 'LEADERBOARD QUEUE:'),
    )
    return LeaderboardComponents(store, broadcaster, projection, queue)


__all__ = [
    'LeaderboardBroadcaster',
    'LeaderboardComponents',
    'LeaderboardProjection',
    'LeaderboardQueueService',
    'LeaderboardSnapshot',
    'QueueResult',
    'RedisSortedSetStore',
    'SortedSetStore',
    'SortedSetStoreError',
    'Subscription',
    'build_leaderboard',
]
