import json
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .broadcaster import LeaderboardBroadcaster
from .store import SortedSetStore

logger = logging.getLogger(__name__)

PROJECTION_MODES = ('push', 'store', 'both')


@dataclass(frozen=True)
class LeaderboardSnapshot:
    category: str
    members: Tuple[str, ...]
    score: Optional[float] = None

    def to_dict(self) -> dict:
        return {self.category: list(self.members)}

    def to_message(self) -> str:
        """Render as ``{"<category>": ["m1", "m2"]}``."""
        return json.dumps(self.to_dict())


class LeaderboardProjection:
    """Republishes a category's queue membership as its current leaderboard.

    ``push`` hands the snapshot to the broadcaster, ``store`` persists it
    under the leaderboard key, ``both`` does the two in that order.
    """

    def __init__(
        self,
        store: SortedSetStore,
        broadcaster: Optional[LeaderboardBroadcaster] = None,
        mode: str = 'push',
        key_prefix: str = 'LEADERBOARD:',
    ):
        if mode not in PROJECTION_MODES:
            raise ValueError(f"Unknown projection mode '{mode}', expected one of {PROJECTION_MODES}")
        if mode in ('push', 'both') and broadcaster is None:
            raise ValueError(f"Projection mode '{mode}' requires a broadcaster")
        self.store = store
        self.broadcaster = broadcaster
        self.mode = mode
        self.key_prefix = key_prefix

    def leaderboard_key(self, category: str) -> str:
        return f"{self.key_prefix}{category}"

    def synchronize(self, category: str, members: Iterable[str], score: Optional[float] = None) -> LeaderboardSnapshot:
        snapshot = LeaderboardSnapshot(category, tuple(str(m) for m in members), score)
        logger.info(
            f"[leaderboard-sync] category={category} members={len(snapshot.members)} score={score} mode={self.mode}"
        )
        if self.mode in ('store', 'both'):
            self._persist(snapshot)
        if self.mode in ('push', 'both'):
            self.broadcaster.publish(snapshot.to_message())
        return snapshot

    def get_leaderboard(self, category: str, limit: Optional[int] = None) -> List[str]:
        """Read a persisted snapshot back in leaderboard order."""
        if limit is not None and limit < 1:
            return []
        end = -1 if limit is None else limit - 1
        return self.store.range(self.leaderboard_key(category), 0, end)

    def _persist(self, snapshot: LeaderboardSnapshot) -> None:
        # Atomic swap of the board; still not coupled to the queue write
        self.store.replace(
            self.leaderboard_key(snapshot.category),
            {member: float(position) for position, member in enumerate(snapshot.members)},
        )
