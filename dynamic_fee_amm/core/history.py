"""Bounded log of recent pool prices."""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Iterator, Optional

from dynamic_fee_amm.core.config import MAX_PRICE_HISTORY, PRECISION

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceSnapshot:
    """Pool price at a point in time.

    The price is A per B in scale units, i.e. reserve_a * PRECISION / reserve_b.
    """
    timestamp: int
    price: int


class PriceHistory:
    """Insertion-ordered window of the most recent price snapshots.

    Holds at most ``max_length`` entries; adding one more evicts the oldest.
    """

    def __init__(self, max_length: int = MAX_PRICE_HISTORY):
        self.max_length = max_length
        self._snapshots: deque[PriceSnapshot] = deque(maxlen=max_length)

    @staticmethod
    def price_of(reserve_a: int, reserve_b: int) -> int:
        """Recorded price for the given reserves; 0 when reserve_b is empty."""
        if reserve_b > 0:
            return reserve_a * PRECISION // reserve_b
        return 0

    def record(self, timestamp: int, reserve_a: int, reserve_b: int) -> PriceSnapshot:
        """Append the price implied by the reserves at ``timestamp``."""
        snapshot = PriceSnapshot(timestamp, self.price_of(reserve_a, reserve_b))
        self.append(snapshot)
        return snapshot

    def append(self, snapshot: PriceSnapshot) -> None:
        if len(self._snapshots) == self.max_length:
            logger.debug("Evicting price snapshot %s", self._snapshots[0])
        self._snapshots.append(snapshot)

    @property
    def latest(self) -> Optional[PriceSnapshot]:
        """Most recent snapshot, or None when the history is empty."""
        if not self._snapshots:
            return None
        return self._snapshots[-1]

    def snapshots(self) -> tuple[PriceSnapshot, ...]:
        """Copy of the window, oldest first."""
        return tuple(self._snapshots)

    def replace(self, snapshots: tuple[PriceSnapshot, ...]) -> None:
        """Reset the window to previously captured contents."""
        self._snapshots = deque(snapshots, maxlen=self.max_length)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[PriceSnapshot]:
        return iter(self.snapshots())

    def __getitem__(self, index: int) -> PriceSnapshot:
        return self._snapshots[index]
