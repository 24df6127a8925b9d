"""Bounded per-body time series with one shared time axis.

Each body keeps ten parallel value lists (position, velocity, quaternion)
plus the time-axis step of every retained sample. Absent bodies are not
padded, so a body's lists may be shorter than the time axis; the step list
keeps the correspondence exact through overflow reductions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..attitude import IDENTITY_QUATERNION, Quaternion
from ..errors import MissingFieldError
from .overflow import DecimatePolicy, OverflowPolicy

Vector3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Sample:
    """One body's state at one step."""

    position: Vector3
    velocity: Vector3
    quaternion: Quaternion = IDENTITY_QUATERNION

    @property
    def state(self) -> Tuple[float, ...]:
        return self.position + self.velocity

    @staticmethod
    def from_state(state: Sequence[float], quaternion: Quaternion = IDENTITY_QUATERNION) -> "Sample":
        values = [float(v) for v in state]
        if len(values) != 6:
            raise ValueError(f"state must have 6 components, got {len(values)}")
        return Sample(
            position=(values[0], values[1], values[2]),
            velocity=(values[3], values[4], values[5]),
            quaternion=tuple(float(q) for q in quaternion),  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class Absent:
    """No usable data for one body at one step."""

    body_index: int
    reason: Optional[MissingFieldError] = None


SampleResult = Union[Sample, Absent]


@dataclass
class BodySeries:
    x: List[float] = field(default_factory=list)
    y: List[float] = field(default_factory=list)
    z: List[float] = field(default_factory=list)
    vx: List[float] = field(default_factory=list)
    vy: List[float] = field(default_factory=list)
    vz: List[float] = field(default_factory=list)
    q1: List[float] = field(default_factory=list)
    q2: List[float] = field(default_factory=list)
    q3: List[float] = field(default_factory=list)
    q4: List[float] = field(default_factory=list)
    steps: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.steps)

    def _columns(self) -> Tuple[List[float], ...]:
        return (self.x, self.y, self.z, self.vx, self.vy, self.vz, self.q1, self.q2, self.q3, self.q4)

    def _push(self, step: int, sample: Sample) -> None:
        values = sample.position + sample.velocity + tuple(sample.quaternion)
        for column, value in zip(self._columns(), values):
            column.append(value)
        self.steps.append(step)

    def _keep(self, remap: Dict[int, int]) -> None:
        positions = [i for i, step in enumerate(self.steps) if step in remap]
        for column in self._columns():
            column[:] = [column[i] for i in positions]
        self.steps[:] = [remap[self.steps[i]] for i in positions]

    def _clear(self) -> None:
        for column in self._columns():
            column.clear()
        self.steps.clear()

    def states(self) -> List[List[float]]:
        return [list(row) for row in zip(self.x, self.y, self.z, self.vx, self.vy, self.vz)]

    def quaternions(self) -> List[List[float]]:
        return [list(row) for row in zip(self.q1, self.q2, self.q3, self.q4)]


class SeriesStore:
    """Time-series buffer for a fixed set of bodies.

    :meth:`append` is the only way values enter the store: one call pushes
    one time value and at most one sample per body.

    Usage:
        store = SeriesStore(body_count=2, capacity=20000)
        store.append(epoch, [sample_a, Absent(1)])
        ...
        store.clear()
    """

    def __init__(
        self,
        body_count: int,
        capacity: int,
        policy: Optional[OverflowPolicy] = None,
    ):
        if body_count < 0:
            raise ValueError("body_count must be >= 0")
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.body_count = body_count
        self.capacity = capacity
        self.policy = policy or DecimatePolicy()
        self._series: List[BodySeries] = [BodySeries() for _ in range(body_count)]
        self._time: List[float] = []
        self._cleared = True
        self.reduction_count = 0

    def __len__(self) -> int:
        return len(self._time)

    @property
    def cleared(self) -> bool:
        return self._cleared

    @property
    def overflowed(self) -> bool:
        return self.reduction_count > 0

    @property
    def time(self) -> Tuple[float, ...]:
        return tuple(self._time)

    def series(self, index: int) -> BodySeries:
        return self._series[index]

    def append(self, time: float, per_body: Sequence[SampleResult]) -> None:
        if len(per_body) != self.body_count:
            raise ValueError(
                f"append expects {self.body_count} body results, got {len(per_body)}"
            )
        if len(self._time) >= self.capacity:
            self._reduce()
        step = len(self._time)
        for index, result in enumerate(per_body):
            if isinstance(result, Sample):
                self._series[index]._push(step, result)
        self._time.append(float(time))
        self._cleared = False

    def _reduce(self) -> None:
        length = len(self._time)
        kept = sorted(set(self.policy.select(length, self.capacity)))
        if len(kept) >= self.capacity or any(i < 0 or i >= length for i in kept):
            raise RuntimeError(
                f"Overflow policy {self.policy.name} did not free capacity "
                f"({len(kept)} of {length} points kept, capacity {self.capacity})"
            )
        remap = {old: new for new, old in enumerate(kept)}
        self._time[:] = [self._time[i] for i in kept]
        for body_series in self._series:
            body_series._keep(remap)
        self.reduction_count += 1
        logging.debug(
            "Series reduced by %s: %d -> %d points", self.policy.name, length, len(kept)
        )

    def clear(self) -> None:
        for body_series in self._series:
            body_series._clear()
        self._time.clear()
        self.reduction_count = 0
        self._cleared = True

    def summary(self) -> Dict[str, Any]:
        return {
            "steps": len(self._time),
            "capacity": self.capacity,
            "reductions": self.reduction_count,
            "samples_per_body": [len(s) for s in self._series],
        }
