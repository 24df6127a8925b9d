"""Reference frames and state conversion between them.

Every frame is defined relative to one inertial base frame by a moving
origin and a rotation about +Z with a constant rate. The transform is
therefore epoch dependent: a state must be converted at its own epoch.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from .attitude import rotation_z

BASE_FRAME = "EarthMJ2000Eq"


def as_state_vector(state: Sequence[float]) -> np.ndarray:
    vec = np.asarray(state, dtype=float).reshape(-1)
    if vec.shape != (6,):
        raise ValueError(f"state must have 6 components, got {vec.shape[0]}")
    return vec


class FrameConverter(ABC):
    """Maps a position/velocity state from one named frame to another."""

    @abstractmethod
    def convert(
        self,
        epoch: float,
        state: Sequence[float],
        source: str,
        target: str,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Convert ``state`` from ``source`` to ``target`` at ``epoch``.

        Returns:
            The converted 6-vector and the 3x3 rotation ``R`` with
            ``v_target = R @ v_source`` at that epoch.
        """
        ...


@dataclass
class FrameDefinition:
    """A frame expressed relative to the inertial base frame."""

    name: str
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    origin_velocity: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    angle_deg: float = 0.0
    rate_deg_per_s: float = 0.0

    def rotation(self, epoch: float) -> np.ndarray:
        return rotation_z(math.radians(self.angle_deg + self.rate_deg_per_s * epoch))

    def rotation_rate(self, epoch: float) -> np.ndarray:
        """Time derivative of :meth:`rotation`."""
        theta = math.radians(self.angle_deg + self.rate_deg_per_s * epoch)
        omega = math.radians(self.rate_deg_per_s)
        c = math.cos(theta)
        s = math.sin(theta)
        return omega * np.array(
            [
                [-s, c, 0.0],
                [-c, -s, 0.0],
                [0.0, 0.0, 0.0],
            ],
            dtype=float,
        )

    def origin_at(self, epoch: float) -> Tuple[np.ndarray, np.ndarray]:
        v0 = np.asarray(self.origin_velocity, dtype=float)
        return np.asarray(self.origin, dtype=float) + v0 * epoch, v0

    def from_base(self, epoch: float, state: np.ndarray) -> np.ndarray:
        rot = self.rotation(epoch)
        rot_dot = self.rotation_rate(epoch)
        origin, origin_vel = self.origin_at(epoch)
        rel_pos = state[:3] - origin
        rel_vel = state[3:] - origin_vel
        return np.concatenate([rot @ rel_pos, rot @ rel_vel + rot_dot @ rel_pos])

    def to_base(self, epoch: float, state: np.ndarray) -> np.ndarray:
        rot = self.rotation(epoch)
        rot_dot = self.rotation_rate(epoch)
        origin, origin_vel = self.origin_at(epoch)
        rel_pos = rot.T @ state[:3]
        rel_vel = rot.T @ (state[3:] - rot_dot @ rel_pos)
        return np.concatenate([rel_pos + origin, rel_vel + origin_vel])

    @staticmethod
    def from_dict(name: str, raw: Dict[str, Any]) -> "FrameDefinition":
        return FrameDefinition(
            name=name,
            origin=_vector3(raw.get("origin", (0.0, 0.0, 0.0)), f"{name}.origin"),
            origin_velocity=_vector3(
                raw.get("origin_velocity", (0.0, 0.0, 0.0)), f"{name}.origin_velocity"
            ),
            angle_deg=float(raw.get("angle_deg", 0.0)),
            rate_deg_per_s=float(raw.get("rate_deg_per_s", 0.0)),
        )


def _vector3(value: Any, label: str) -> Tuple[float, float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"{label} must be a list of 3 numbers")
    return (float(value[0]), float(value[1]), float(value[2]))


@dataclass
class FrameRegistry(FrameConverter):
    """Named frame definitions; the base frame is always present."""

    frames: Dict[str, FrameDefinition] = field(default_factory=dict)
    base_name: str = BASE_FRAME

    def __post_init__(self) -> None:
        self.frames.setdefault(self.base_name, FrameDefinition(self.base_name))

    def add(self, frame: FrameDefinition) -> None:
        self.frames[frame.name] = frame

    def __contains__(self, name: object) -> bool:
        return name in self.frames

    def get(self, name: str) -> FrameDefinition:
        try:
            return self.frames[name]
        except KeyError:
            raise KeyError(f"Unknown reference frame: {name}") from None

    def convert(
        self,
        epoch: float,
        state: Sequence[float],
        source: str,
        target: str,
    ) -> Tuple[np.ndarray, np.ndarray]:
        vec = as_state_vector(state)
        src = self.get(source)
        dst = self.get(target)
        if src is dst:
            return vec.copy(), np.eye(3)
        base_state = src.to_base(epoch, vec)
        out = dst.from_base(epoch, base_state)
        rotation = dst.rotation(epoch) @ src.rotation(epoch).T
        return out, rotation

    @staticmethod
    def from_dict(raw: Optional[Dict[str, Any]], base_name: str = BASE_FRAME) -> "FrameRegistry":
        registry = FrameRegistry(base_name=base_name)
        for name, spec in (raw or {}).items():
            if not isinstance(spec, dict):
                raise ValueError(f"Invalid frame definition for {name}")
            registry.add(FrameDefinition.from_dict(str(name), spec))
        return registry
