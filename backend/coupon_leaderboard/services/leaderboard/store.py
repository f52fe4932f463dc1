"""Sorted-set store interface and its Redis adapter.

The queue and the projection only talk to ``SortedSetStore``; ordering,
uniqueness and per-call atomicity are the store's job.
"""

import logging
from typing import Dict, List, Optional, Protocol, Tuple

import redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class SortedSetStoreError(Exception):
    """Raised when a store command fails (connectivity, timeout, bad data)."""


class SortedSetStore(Protocol):
    def add(self, key: str, member: str, score: float) -> bool: ...

    def range(self, key: str, start: int, end: int) -> List[str]: ...

    def range_with_scores(self, key: str, start: int, end: int) -> List[Tuple[str, float]]: ...

    def remove(self, key: str, member: str) -> int: ...

    def remove_range(self, key: str, start: int, end: int) -> int: ...

    def rank(self, key: str, member: str) -> Optional[int]: ...

    def replace(self, key: str, mapping: Dict[str, float]) -> int: ...


class RedisSortedSetStore:
    """``SortedSetStore`` over a redis-py client (ZADD/ZRANGE/ZREM/ZRANK)."""

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 5.0) -> 'RedisSortedSetStore':
        # Connections are opened lazily on the first command
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )
        return cls(client)

    def add(self, key: str, member: str, score: float) -> bool:
        added = self._call('ZADD', key, self.client.zadd, key, {member: score})
        return int(added or 0) > 0

    def range(self, key: str, start: int, end: int) -> List[str]:
        return list(self._call('ZRANGE', key, self.client.zrange, key, start, end) or [])

    def range_with_scores(self, key: str, start: int, end: int) -> List[Tuple[str, float]]:
        rows = self._call('ZRANGE', key, self.client.zrange, key, start, end, withscores=True) or []
        return [(member, float(score)) for member, score in rows]

    def remove(self, key: str, member: str) -> int:
        return int(self._call('ZREM', key, self.client.zrem, key, member) or 0)

    def remove_range(self, key: str, start: int, end: int) -> int:
        return int(self._call('ZREMRANGEBYRANK', key, self.client.zremrangebyrank, key, start, end) or 0)

    def rank(self, key: str, member: str) -> Optional[int]:
        rank = self._call('ZRANK', key, self.client.zrank, key, member)
        return None if rank is None else int(rank)

    def replace(self, key: str, mapping: Dict[str, float]) -> int:
        """Swap the whole set for ``mapping`` in one MULTI/EXEC."""
        def _replace():
            pipe = self.client.pipeline(transaction=True)
            pipe.delete(key)
            if mapping:
                pipe.zadd(key, mapping)
            pipe.execute()
            return len(mapping)

        return self._call('MULTI', key, _replace)

    def _call(self, command: str, key: str, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except RedisError as exc:
            logger.error(f"[store-error] command={command} key='{key}': {exc}")
            raise SortedSetStoreError(f"{command} failed for key '{key}': {exc}") from exc
