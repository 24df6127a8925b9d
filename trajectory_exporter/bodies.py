"""Tracked bodies, their host-side objects, and the per-run roster.

A roster fixes each body's integer index for the whole run. Movers come
first, reference bodies second, each group in selection order.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .attitude import as_rotation_matrix, matrix_from_quaternion, rotation_z
from .errors import RosterError, StateRetrievalError
from .frames import as_state_vector

# kg/m^3, roughly the Hubble Space Telescope
SPACECRAFT_DENSITY = 610.0
RADIUS_SCALER = 200.0
MAX_DERIVED_RADIUS = 1000.0


class BodyKind(str, Enum):
    MOVER = "mover"
    REFERENCE = "reference"


class Scope(str, Enum):
    GLOBAL = "global"
    LOCAL = "local"
    NONE = "none"


@dataclass(frozen=True)
class Color:
    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        for channel in (self.red, self.green, self.blue):
            if not 0 <= int(channel) <= 255:
                raise ValueError(f"Color channel out of range 0-255: {channel}")

    def to_rgb_string(self) -> str:
        return f"{self.red},{self.green},{self.blue}"

    @staticmethod
    def parse(value: Any) -> "Color":
        """Accept ``"R,G,B"``, ``"#RRGGBB"``, a named color or a 3-sequence."""
        if isinstance(value, Color):
            return value
        if isinstance(value, str):
            text = value.strip()
            named = NAMED_COLORS.get(text.lower())
            if named is not None:
                return named
            if text.startswith("#") and len(text) == 7:
                return Color(int(text[1:3], 16), int(text[3:5], 16), int(text[5:7], 16))
            parts = [p for p in text.strip("[]").replace(",", " ").split() if p]
            if len(parts) == 3:
                return Color(int(parts[0]), int(parts[1]), int(parts[2]))
            raise ValueError(f"Unrecognised color: {value!r}")
        if isinstance(value, (list, tuple)) and len(value) == 3:
            return Color(int(value[0]), int(value[1]), int(value[2]))
        raise ValueError(f"Unrecognised color: {value!r}")


NAMED_COLORS: Dict[str, Color] = {
    "white": Color(255, 255, 255),
    "red": Color(255, 0, 0),
    "green": Color(0, 255, 0),
    "blue": Color(0, 0, 255),
    "yellow": Color(255, 255, 0),
    "orange": Color(255, 165, 0),
    "cyan": Color(0, 255, 255),
    "magenta": Color(255, 0, 255),
    "gray": Color(128, 128, 128),
}

WHITE = NAMED_COLORS["white"]


class SpacePoint(ABC):
    """Host-side object that can be tracked.

    Movers publish their state through the sample stream; reference bodies
    are asked for it directly with :meth:`state_at`.
    """

    name: str
    scope: Scope = Scope.GLOBAL
    orbit_color: Color = WHITE
    mass: Optional[float] = None
    equatorial_radius: Optional[float] = None

    @property
    @abstractmethod
    def kind(self) -> BodyKind:
        ...

    def is_global(self) -> bool:
        return self.scope == Scope.GLOBAL

    def is_local(self) -> bool:
        return self.scope == Scope.LOCAL

    @abstractmethod
    def has_attitude(self) -> bool:
        ...

    @abstractmethod
    def attitude_at(self, epoch: float) -> np.ndarray:
        """Body rotation matrix (base frame to body frame) at ``epoch``."""
        ...

    @abstractmethod
    def state_at(self, epoch: float) -> np.ndarray:
        """Position/velocity 6-vector in the base frame at ``epoch``."""
        ...


@dataclass
class AttitudeModel:
    """Fixed initial orientation spinning about the body +Z axis."""

    initial: np.ndarray = field(default_factory=lambda: np.eye(3))
    spin_rate_deg_per_s: float = 0.0

    def __post_init__(self) -> None:
        self.initial = as_rotation_matrix(self.initial)

    def at(self, epoch: float) -> np.ndarray:
        if self.spin_rate_deg_per_s == 0.0:
            return self.initial.copy()
        return rotation_z(math.radians(self.spin_rate_deg_per_s * epoch)) @ self.initial

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "AttitudeModel":
        if "quaternion" in raw:
            initial = matrix_from_quaternion(raw["quaternion"])
        elif "matrix" in raw:
            initial = as_rotation_matrix(raw["matrix"])
        else:
            initial = rotation_z(math.radians(float(raw.get("angle_deg", 0.0))))
        return AttitudeModel(
            initial=initial,
            spin_rate_deg_per_s=float(raw.get("spin_rate_deg_per_s", 0.0)),
        )


class Spacecraft(SpacePoint):
    """A mover: its state only arrives through published samples."""

    def __init__(
        self,
        name: str,
        mass: float = 850.0,
        attitude: Optional[AttitudeModel] = None,
        orbit_color: Color = WHITE,
        scope: Scope = Scope.GLOBAL,
    ):
        self.name = name
        self.mass = float(mass)
        self.attitude = attitude
        self.orbit_color = orbit_color
        self.scope = scope

    @property
    def kind(self) -> BodyKind:
        return BodyKind.MOVER

    def has_attitude(self) -> bool:
        return self.attitude is not None

    def attitude_at(self, epoch: float) -> np.ndarray:
        if self.attitude is None:
            raise StateRetrievalError(f"{self.name} has no attitude model")
        return self.attitude.at(epoch)

    def state_at(self, epoch: float) -> np.ndarray:
        raise StateRetrievalError(
            f"{self.name} is a streamed body; its state is not queryable at {epoch}"
        )


class CelestialBody(SpacePoint):
    """A reference body with a tabulated ephemeris in the base frame."""

    def __init__(
        self,
        name: str,
        epochs: Sequence[float],
        states: Sequence[Sequence[float]],
        equatorial_radius: float = 6378.1363,
        attitude: Optional[AttitudeModel] = None,
        orbit_color: Color = WHITE,
        scope: Scope = Scope.GLOBAL,
    ):
        self.name = name
        self.epochs = np.asarray(epochs, dtype=float).reshape(-1)
        self.states = np.asarray(states, dtype=float).reshape(-1, 6)
        if self.epochs.size == 0 or self.epochs.size != self.states.shape[0]:
            raise ValueError(f"{name}: ephemeris needs matching epochs and states")
        if np.any(np.diff(self.epochs) <= 0.0):
            raise ValueError(f"{name}: ephemeris epochs must increase")
        self.equatorial_radius = float(equatorial_radius)
        self.attitude = attitude
        self.orbit_color = orbit_color
        self.scope = scope

    @property
    def kind(self) -> BodyKind:
        return BodyKind.REFERENCE

    def has_attitude(self) -> bool:
        return self.attitude is not None

    def attitude_at(self, epoch: float) -> np.ndarray:
        if self.attitude is None:
            raise StateRetrievalError(f"{self.name} has no attitude model")
        return self.attitude.at(epoch)

    def state_at(self, epoch: float) -> np.ndarray:
        # A single ephemeris row is a fixed state valid at every epoch
        if self.epochs.size == 1:
            return self.states[0].copy()
        if not self.epochs[0] <= epoch <= self.epochs[-1]:
            raise StateRetrievalError(
                f"{self.name}: epoch {epoch} outside ephemeris "
                f"[{self.epochs[0]}, {self.epochs[-1]}]"
            )
        return as_state_vector(
            [np.interp(epoch, self.epochs, self.states[:, k]) for k in range(6)]
        )

    @staticmethod
    def fixed(name: str, state: Sequence[float], **kwargs: Any) -> "CelestialBody":
        """A body at a constant state for all epochs."""
        return CelestialBody(name, [0.0], [as_state_vector(state)], **kwargs)


def derive_radius(mass: float, scaler: float = RADIUS_SCALER) -> float:
    """Radius of a sphere of ``mass`` at spacecraft density, times ``scaler``."""
    volume = mass / SPACECRAFT_DENSITY
    return ((volume * 3.0 / 4.0) / math.pi) ** (1.0 / 3.0) * scaler


@dataclass
class Body:
    index: int
    name: str
    kind: BodyKind
    radius: float
    color: Color
    point: SpacePoint
    draw_orbit: bool = True
    draw_object: bool = True

    @property
    def display_tag(self) -> str:
        if self.draw_orbit and self.draw_object:
            return "line,point"
        if self.draw_orbit:
            return "line"
        if self.draw_object:
            return "point"
        return "none"


@dataclass
class BodyRoster:
    bodies: List[Body] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.bodies)

    def __iter__(self):
        return iter(self.bodies)

    def __getitem__(self, index: int) -> Body:
        return self.bodies[index]

    @property
    def names(self) -> List[str]:
        return [body.name for body in self.bodies]

    @property
    def movers(self) -> List[Body]:
        return [body for body in self.bodies if body.kind == BodyKind.MOVER]

    @property
    def references(self) -> List[Body]:
        return [body for body in self.bodies if body.kind == BodyKind.REFERENCE]

    def index_of(self, name: str) -> int:
        for body in self.bodies:
            if body.name == name:
                return body.index
        raise KeyError(name)

    def set_color_at(self, index: int, color: Any) -> None:
        if not 0 <= index < len(self.bodies):
            raise IndexError(f"No body at roster index {index}")
        self.bodies[index].color = Color.parse(color)

    def set_color(self, name: str, color: Any) -> None:
        self.set_color_at(self.index_of(name), color)

    def remove(self, name: str) -> bool:
        """Stop drawing a body's orbit. Its index is kept."""
        try:
            body = self.bodies[self.index_of(name)]
        except KeyError:
            return False
        body.draw_orbit = False
        return True

    @staticmethod
    def build(
        selection: Sequence[Tuple[str, Optional[SpacePoint]]],
        *,
        derive_radii: bool = True,
        min_radius: float = 50.0,
    ) -> "BodyRoster":
        """Fix body indices for a run from the selected objects.

        Entries whose object never resolved are dropped with an error
        message. Duplicate names keep the first selection.
        """
        resolved: List[SpacePoint] = []
        seen: set = set()
        for name, point in selection:
            if name in seen:
                logging.debug("Ignoring duplicate selection %s", name)
                continue
            seen.add(name)
            if point is None:
                logging.error("Selected object %s has no resolved reference; removing before run", name)
                continue
            if point.kind not in (BodyKind.MOVER, BodyKind.REFERENCE):
                raise RosterError(f"Unsupported object kind for {name}: {point.kind}")
            resolved.append(point)

        bodies: List[Body] = []
        for kind in (BodyKind.MOVER, BodyKind.REFERENCE):
            for point in resolved:
                if point.kind != kind:
                    continue
                bodies.append(
                    Body(
                        index=len(bodies),
                        name=point.name,
                        kind=kind,
                        radius=_body_radius(point, derive_radii, min_radius),
                        color=point.orbit_color,
                        point=point,
                    )
                )
        return BodyRoster(bodies)

    @staticmethod
    def from_points(points: Sequence[SpacePoint], **kwargs: Any) -> "BodyRoster":
        return BodyRoster.build([(p.name, p) for p in points], **kwargs)


def _body_radius(point: SpacePoint, derive_radii: bool, min_radius: float) -> float:
    if point.kind == BodyKind.REFERENCE:
        if point.equatorial_radius is None:
            return float(min_radius)
        return float(point.equatorial_radius)
    if not derive_radii or point.mass is None:
        return float(min_radius)
    radius = derive_radius(point.mass)
    if radius < min_radius or radius > MAX_DERIVED_RADIUS:
        return float(min_radius)
    return radius
