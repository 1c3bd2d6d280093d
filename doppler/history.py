#!/usr/bin/env python3
"""
Bounded snapshot history used for time reversal.

Snapshots are only appended while time runs forward, so stored times are
increasing. The ring discards its oldest entry on overflow.
"""
from collections import deque
from typing import Deque, Iterator, Optional, Tuple

from .constants import SNAPSHOT_CAPACITY
from .data_models import SimulationSnapshot


class SnapshotRing:
    """Fixed-capacity ring of immutable simulation snapshots."""

    def __init__(self, capacity: int = SNAPSHOT_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"Snapshot capacity must be positive, got {capacity!r}")
        self._snapshots: Deque[SimulationSnapshot] = deque(maxlen=int(capacity))

    @property
    def capacity(self) -> int:
        return self._snapshots.maxlen

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[SimulationSnapshot]:
        return iter(self._snapshots)

    def append(self, snapshot: SimulationSnapshot) -> None:
        self._snapshots.append(snapshot)

    def oldest(self) -> Optional[SimulationSnapshot]:
        return self._snapshots[0] if self._snapshots else None

    def newest(self) -> Optional[SimulationSnapshot]:
        return self._snapshots[-1] if self._snapshots else None

    def nearest(self, time: float) -> Optional[SimulationSnapshot]:
        """Snapshot with the smallest absolute time difference to `time`."""
        if not self._snapshots:
            return None
        return min(self._snapshots, key=lambda s: abs(s.time - time))

    def around(self, time: float) -> Tuple[Optional[SimulationSnapshot], Optional[SimulationSnapshot]]:
        """(newest snapshot at or before `time`, oldest snapshot after it); either may be None."""
        before: Optional[SimulationSnapshot] = None
        after: Optional[SimulationSnapshot] = None
        for snapshot in reversed(self._snapshots):
            if snapshot.time <= time:
                before = snapshot
                break
            after = snapshot
        return before, after

    def discard_after(self, time: float) -> None:
        while self._snapshots and self._snapshots[-1].time > time:
            self._snapshots.pop()

    def clear(self) -> None:
        self._snapshots.clear()
