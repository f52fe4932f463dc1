import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from .projection import LeaderboardProjection
from .store import SortedSetStore, SortedSetStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueResult:
    """Outcome of a queue operation.

    ``ok`` is False only when the operation failed, with ``error`` giving the
    reason; an empty or false ``value`` with ``ok`` True means nothing was found.
    """

    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> 'QueueResult':
        return cls(True, value)

    @classmethod
    def failure(cls, error: str) -> 'QueueResult':
        return cls(False, None, error)


class LeaderboardQueueService:
    """Per-category winner queues kept in a sorted set, scored by attempt time.

    Every successful write is followed by one synchronisation of the
    category's leaderboard projection. Store failures come back as failed
    ``QueueResult`` values and are never raised to the caller.
    """

    def __init__(self, store: SortedSetStore, projection: LeaderboardProjection, key_prefix: str = 'LEADERBOARD QUEUE:'):
        self.store = store
        self.projection = projection
        self.key_prefix = key_prefix

    def queue_key(self, category: str) -> str:
        return f"{self.key_prefix}{category}"

    def add_to_zset(self, category: str, member_id: str, score: Optional[float] = None) -> QueueResult:
        invalid = _check_args(category, member_id)
        if invalid:
            return invalid
        if score is None:
            score = time.time()
        logger.info(f"[queue-add] category={category} member={member_id} score={score}")
        try:
            added = self.store.add(self.queue_key(category), member_id, float(score))
        except SortedSetStoreError as exc:
            logger.error(f"[queue-add] failed category={category} member={member_id}: {exc}", exc_info=True)
            return QueueResult.failure(str(exc))
        # Score updates resync too: a retry at a new timestamp changes the order
        self._synchronize(category, float(score))
        return QueueResult.success(added)

    def get_zset(self, category: str) -> QueueResult:
        return self._read(category, 'queue-members', lambda key: self.store.range(key, 0, -1))

    def get_top_rank_set_with_score(self, category: str, limit: int) -> QueueResult:
        if limit < 1:
            return QueueResult.success([])
        return self._read(category, 'queue-top', lambda key: self.store.range_with_scores(key, 0, limit - 1))

    def get_top_rank_set(self, category: str, limit: int) -> QueueResult:
        if limit < 1:
            return QueueResult.success([])
        return self._read(category, 'queue-top', lambda key: self.store.range(key, 0, limit - 1))

    def remove_item_from_zset(self, category: str, member_id: str) -> QueueResult:
        invalid = _check_args(category, member_id)
        if invalid:
            return invalid
        logger.info(f"[queue-remove] category={category} member={member_id}")
        try:
            removed = self.store.remove(self.queue_key(category), member_id)
        except SortedSetStoreError as exc:
            logger.error(f"[queue-remove] failed category={category} member={member_id}: {exc}", exc_info=True)
            return QueueResult.failure(str(exc))
        return QueueResult.success(removed > 0)

    def clear_queue(self, category: str) -> QueueResult:
        invalid = _check_category(category)
        if invalid:
            return invalid
        try:
            removed = self.store.remove_range(self.queue_key(category), 0, -1)
        except SortedSetStoreError as exc:
            logger.error(f"[queue-clear] failed category={category}: {exc}", exc_info=True)
            return QueueResult.failure(str(exc))
        logger.info(f"[queue-clear] category={category} removed={removed}")
        self._synchronize(category, None)
        return QueueResult.success(removed)

    def is_user_in_queue(self, category: str, member_id: str) -> QueueResult:
        invalid = _check_args(category, member_id)
        if invalid:
            return invalid
        try:
            rank = self.store.rank(self.queue_key(category), member_id)
        except SortedSetStoreError as exc:
            logger.error(f"[queue-rank] failed category={category} member={member_id}: {exc}", exc_info=True)
            return QueueResult.failure(str(exc))
        return QueueResult.success(rank is not None)

    def _read(self, category: str, tag: str, fetch) -> QueueResult:
        invalid = _check_category(category)
        if invalid:
            return invalid
        try:
            rows = fetch(self.queue_key(category))
        except SortedSetStoreError as exc:
            logger.error(f"[{tag}] failed category={category}: {exc}", exc_info=True)
            return QueueResult.failure(str(exc))
        logger.debug(f"[{tag}] category={category} count={len(rows)}")
        return QueueResult.success(rows)

    def _synchronize(self, category: str, score: Optional[float]) -> None:
        try:
            members = self.store.range(self.queue_key(category), 0, -1)
            self.projection.synchronize(category, members, score)
        except SortedSetStoreError as exc:
            logger.error(f"[leaderboard-sync] failed category={category}: {exc}", exc_info=True)


def _check_category(category: str) -> Optional[QueueResult]:
    if not category or not str(category).strip():
        return QueueResult.failure('category is required')
    return None


def _check_args(category: str, member_id: str) -> Optional[QueueResult]:
    invalid = _check_category(category)
    if invalid:
        return invalid
    if member_id is None or not str(member_id).strip():
        return QueueResult.failure('member_id is required')
    return None
