"""Published sample events and sources that produce them.

A publish event is one flat numeric vector plus the labels naming each
position (``"All.epoch"``, ``"Sat.X"``, ...). The first value is always
the epoch of the sample.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .frames import BASE_FRAME


class RunState(str, Enum):
    RUNNING = "running"
    SOLVING = "solving"
    SOLVED_PASS = "solved_pass"
    END_OF_RUN = "end_of_run"


@dataclass(frozen=True)
class PublishEvent:
    labels: Tuple[str, ...] = ()
    values: Tuple[float, ...] = ()
    run_state: RunState = RunState.RUNNING
    frame: str = BASE_FRAME
    in_function: bool = False
    end_of_receive: bool = False
    _index: Dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: Dict[str, int] = {}
        for offset, label in enumerate(self.labels):
            index.setdefault(label, offset)
        object.__setattr__(self, "_index", index)

    def __len__(self) -> int:
        return len(self.values)

    @property
    def epoch(self) -> float:
        return float(self.values[0])

    @property
    def field_index(self) -> Dict[str, int]:
        return self._index

    def offset_of(self, label: str) -> Optional[int]:
        offset = self._index.get(label)
        if offset is None or offset >= len(self.values):
            return None
        return offset

    @staticmethod
    def end_of_run() -> "PublishEvent":
        return PublishEvent(run_state=RunState.END_OF_RUN)

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "PublishEvent":
        return PublishEvent(
            labels=tuple(str(label) for label in raw.get("labels", [])),
            values=tuple(float(v) for v in raw.get("values", [])),
            run_state=RunState(str(raw.get("run_state", RunState.RUNNING.value))),
            frame=str(raw.get("frame", BASE_FRAME)),
            in_function=bool(raw.get("in_function", False)),
            end_of_receive=bool(raw.get("end_of_receive", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "labels": list(self.labels),
            "values": list(self.values),
            "run_state": self.run_state.value,
            "frame": self.frame,
        }
        if self.in_function:
            payload["in_function"] = True
        if self.end_of_receive:
            payload["end_of_receive"] = True
        return payload


def state_labels(name: str) -> List[str]:
    return [f"{name}.{suffix}" for suffix in ("X", "Y", "Z", "Vx", "Vy", "Vz")]


def make_event(
    epoch: float,
    states: Dict[str, Sequence[float]],
    **kwargs: Any,
) -> PublishEvent:
    """Build an event publishing ``epoch`` and the 6-vector of each mover."""
    labels: List[str] = ["All.epoch"]
    values: List[float] = [float(epoch)]
    for name, state in states.items():
        labels.extend(state_labels(name))
        values.extend(float(v) for v in state)
    return PublishEvent(labels=tuple(labels), values=tuple(values), **kwargs)


class SampleSource(ABC):
    """Produces publish events in arrival order."""

    @abstractmethod
    def __iter__(self) -> Iterator[PublishEvent]:
        ...


class ReplaySampleSource(SampleSource):
    """Replays a JSON-lines recording of publish events.

    The terminal trigger fires twice at the end of a run. A recording that
    ends without an end-of-run line gets both appended.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def __iter__(self) -> Iterator[PublishEvent]:
        terminated = False
        with open(self.path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                try:
                    raw = json.loads(line)
                    if not isinstance(raw, dict):
                        raise TypeError(f"expected an object, got {type(raw).__name__}")
                    event = PublishEvent.from_dict(raw)
                except (ValueError, TypeError) as exc:
                    logging.warning("Skipping malformed line %d in %s: %s", line_no, self.path, exc)
                    continue
                terminated = event.run_state == RunState.END_OF_RUN
                yield event
        if not terminated:
            logging.debug("Recording %s has no end-of-run marker; closing run", self.path)
            yield PublishEvent.end_of_run()
            yield PublishEvent.end_of_run()
