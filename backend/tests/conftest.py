import os
import sys
import pytest

# Ensure the backend root (containing the `coupon_leaderboard` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from coupon_leaderboard import create_app, socketio
from coupon_leaderboard.services.leaderboard import SortedSetStoreError


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    REDIS_URL = 'redis://localhost:6379/15'
    LEADERBOARD_QUEUE_PREFIX = 'LEADERBOARD QUEUE:'
    LEADERBOARD_PREFIX = 'LEADERBOARD:'
    LEADERBOARD_PROJECTION_MODE = 'push'
    FANOUT_BUFFER_SIZE = 8
    SSE_KEEPALIVE_SEC = 0.05
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'


class InMemorySortedSetStore:
    """Sorted-set test double: ascending score, ties ordered by member like Redis."""

    def __init__(self):
        self.data = {}
        self.failing = set()

    def _check(self, op):
        if op in self.failing:
            raise SortedSetStoreError(f"{op} failed: simulated outage")

    def _ordered(self, key):
        members = self.data.get(key, {})
        return sorted(members.items(), key=lambda kv: (kv[1], kv[0]))

    @staticmethod
    def _slice(items, start, end):
        n = len(items)
        if start < 0:
            start = max(n + start, 0)
        if end < 0:
            end = n + end
        if start >= n or start > end:
            return []
        return items[start:end + 1]

    def add(self, key, member, score):
        self._check('add')
        members = self.data.setdefault(key, {})
        is_new = member not in members
        members[member] = float(score)
        return is_new

    def range(self, key, start, end):
        self._check('range')
        return [m for m, _ in self._slice(self._ordered(key), start, end)]

    def range_with_scores(self, key, start, end):
        self._check('range_with_scores')
        return list(self._slice(self._ordered(key), start, end))

    def remove(self, key, member):
        self._check('remove')
        members = self.data.get(key, {})
        return 1 if members.pop(member, None) is not None else 0

    def remove_range(self, key, start, end):
        self._check('remove_range')
        doomed = self._slice(self._ordered(key), start, end)
        for member, _ in doomed:
            del self.data[key][member]
        if key in self.data and not self.data[key]:
            del self.data[key]
        return len(doomed)

    def replace(self, key, mapping):
        self._check('replace')
        self.data.pop(key, None)
        if mapping:
            self.data[key] = {m: float(s) for m, s in mapping.items()}
        return len(mapping)

    def rank(self, key, member):
        self._check('rank')
        for idx, (m, _) in enumerate(self._ordered(key)):
            if m == member:
                return idx
        return None


@pytest.fixture()
def store():
    return InMemorySortedSetStore()


@pytest.fixture()
def flask_app(store):
    application = create_app(TestConfig, store=store)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def leaderboard(flask_app):
    return flask_app.extensions['leaderboard']


@pytest.fixture()
def queue_service(leaderboard):
    return leaderboard.queue


@pytest.fixture()
def broadcaster(leaderboard):
    return leaderboard.broadcaster


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
