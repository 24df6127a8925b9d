"""Shared fixtures for trajectory exporter tests."""

from __future__ import annotations

from typing import List, Optional, Tuple

import pytest

from trajectory_exporter.bodies import (
    AttitudeModel,
    BodyRoster,
    CelestialBody,
    Color,
    SpacePoint,
    Spacecraft,
)
from trajectory_exporter.config import ExportConfig
from trajectory_exporter.frames import FrameDefinition, FrameRegistry

from .helpers import EARTH_STATE


@pytest.fixture
def mover() -> Spacecraft:
    return Spacecraft("Sat", mass=850.0, orbit_color=Color(255, 0, 0))


@pytest.fixture
def earth() -> CelestialBody:
    return CelestialBody.fixed("Earth", EARTH_STATE, equatorial_radius=6378.1363)


@pytest.fixture
def selection(mover: Spacecraft, earth: CelestialBody) -> List[Tuple[str, Optional[SpacePoint]]]:
    # Reference body listed first to check movers still take the low indices
    return [("Earth", earth), ("Sat", mover)]


@pytest.fixture
def roster(selection) -> BodyRoster:
    return BodyRoster.build(selection)


@pytest.fixture
def config(tmp_path) -> ExportConfig:
    return ExportConfig(
        export_attitude=False,
        destination_path=str(tmp_path / "out.json"),
    )


@pytest.fixture
def registry() -> FrameRegistry:
    registry = FrameRegistry()
    registry.add(
        FrameDefinition(
            "Rotating",
            origin=(100.0, -50.0, 25.0),
            origin_velocity=(0.1, 0.2, -0.05),
            angle_deg=30.0,
            rate_deg_per_s=0.25,
        )
    )
    registry.add(FrameDefinition("Tilted", angle_deg=90.0))
    return registry


@pytest.fixture
def spinning_attitude() -> AttitudeModel:
    return AttitudeModel.from_dict({"angle_deg": 45.0, "spin_rate_deg_per_s": 2.0})
