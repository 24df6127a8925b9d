"""Reduction policies applied when the series store reaches capacity."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List


class OverflowPolicy(ABC):
    """Chooses which time-axis points survive a reduction.

    A policy only picks indices; the store applies them to the shared
    time axis and to every body's series so alignment is kept.
    """

    name: str = "overflow"

    @abstractmethod
    def select(self, length: int, capacity: int) -> List[int]:
        """Return the sorted time-axis indices to keep (fewer than ``capacity``)."""
        ...


class DecimatePolicy(OverflowPolicy):
    """Keep every other point, always including the first."""

    name = "decimate"

    def select(self, length: int, capacity: int) -> List[int]:
        if capacity <= 1:
            return []
        kept = list(range(0, length, 2))
        while len(kept) >= capacity:
            kept = kept[::2]
        return kept


class DropOldestPolicy(OverflowPolicy):
    """Discard the oldest tenth of the series (at least one point)."""

    name = "drop_oldest"

    def select(self, length: int, capacity: int) -> List[int]:
        drop = max(1, capacity // 10, length - capacity + 1)
        return list(range(min(drop, length), length))


_POLICIES = {
    DecimatePolicy.name: DecimatePolicy,
    DropOldestPolicy.name: DropOldestPolicy,
}


def make_overflow_policy(name: str) -> OverflowPolicy:
    try:
        return _POLICIES[name]()
    except KeyError:
        raise ValueError(f"Unknown overflow policy: {name}") from None
