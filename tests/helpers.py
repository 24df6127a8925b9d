"""Event builders shared by the tests."""

from __future__ import annotations

from typing import Tuple

from trajectory_exporter.sources import PublishEvent, make_event

EARTH_STATE = (0.0, 0.0, 0.0, 0.0, 0.0, 0.0)


def sat_state(epoch: float) -> Tuple[float, ...]:
    return (7000.0 + epoch, 10.0 * epoch, 1300.0, 1.0, 7.5, 0.5)


def sat_event(epoch: float, **kwargs) -> PublishEvent:
    return make_event(epoch, {"Sat": sat_state(epoch)}, **kwargs)
