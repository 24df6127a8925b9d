"""Configuration models and YAML loading."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .bodies import AttitudeModel, CelestialBody, Color, Scope, SpacePoint, Spacecraft, WHITE
from .errors import ConfigurationError
from .frames import BASE_FRAME
from .utils import file_name_from_script, is_valid_file_name

MIN_PRECISION = 10
OVERFLOW_POLICIES = ("decimate", "drop_oldest")


class SolverIterations(str, Enum):
    NONE = "none"
    CURRENT = "current"
    ALL = "all"


@dataclass
class BodySpec:
    name: str
    kind: str = "spacecraft"
    mass: float = 850.0
    color: Optional[Any] = None
    scope: str = Scope.GLOBAL.value
    equatorial_radius: float = 6378.1363
    attitude: Optional[Dict[str, Any]] = None
    epochs: List[float] = field(default_factory=list)
    states: List[List[float]] = field(default_factory=list)

    def to_space_point(self) -> SpacePoint:
        try:
            color = Color.parse(self.color) if self.color else WHITE
            scope = Scope(self.scope)
        except ValueError as exc:
            raise ConfigurationError(f"bodies.{self.name}", self.color or self.scope, str(exc)) from exc
        attitude = AttitudeModel.from_dict(self.attitude) if self.attitude else None
        if self.kind == "spacecraft":
            return Spacecraft(
                self.name,
                mass=self.mass,
                attitude=attitude,
                orbit_color=color,
                scope=scope,
            )
        if self.kind == "celestial_body":
            if not self.states:
                raise ConfigurationError(f"bodies.{self.name}.states", self.states, "at least one state")
            epochs = self.epochs or [0.0]
            return CelestialBody(
                self.name,
                epochs,
                self.states,
                equatorial_radius=self.equatorial_radius,
                attitude=attitude,
                orbit_color=color,
                scope=scope,
            )
        raise ConfigurationError(
            f"bodies.{self.name}.kind", self.kind, "'spacecraft' or 'celestial_body'"
        )


@dataclass
class ExportConfig:
    target_frame: str = BASE_FRAME
    export_attitude: bool = True
    export_colors: bool = True
    sample_stride: int = 1
    capacity: int = 20000
    min_body_radius: float = 50.0
    derive_radii: bool = True
    destination_path: str = ""
    solver_iterations: SolverIterations = SolverIterations.NONE
    overflow_policy: str = "decimate"
    precision: Optional[int] = None
    global_pipeline: bool = False
    bodies: List[BodySpec] = field(default_factory=list)
    frames: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def space_points(self) -> List[Tuple[str, Optional[SpacePoint]]]:
        return [(spec.name, spec.to_space_point()) for spec in self.bodies]


def validate_export_config(config: ExportConfig) -> ExportConfig:
    """Reject invalid values before a run starts.

    Raises:
        ConfigurationError: naming the first failing field.
    """
    if int(config.sample_stride) <= 0:
        raise ConfigurationError("data_collect_frequency", config.sample_stride, "Integer Number > 0")
    if int(config.capacity) <= 0:
        raise ConfigurationError("max_data_points", config.capacity, "Integer Number > 0")
    if float(config.min_body_radius) <= 0:
        raise ConfigurationError("min_body_radius", config.min_body_radius, "Real Number > 0")
    if config.precision is not None and int(config.precision) < MIN_PRECISION:
        raise ConfigurationError("precision", config.precision, f"Integer Number >= {MIN_PRECISION}")
    if config.overflow_policy not in OVERFLOW_POLICIES:
        raise ConfigurationError("overflow_policy", config.overflow_policy, " or ".join(OVERFLOW_POLICIES))
    if not isinstance(config.solver_iterations, SolverIterations):
        raise ConfigurationError("solver_iterations", config.solver_iterations, "none, current or all")
    if not config.target_frame:
        raise ConfigurationError("coordinate_system", config.target_frame, "a frame name")
    validate_destination(config.destination_path)
    return config


def validate_destination(value: str) -> None:
    if not is_valid_file_name(value):
        raise ConfigurationError("json_file", value, "a valid file name")
    if value and not value.lower().endswith(".json"):
        raise ConfigurationError("json_file", value, "a path ending in .json")


def resolve_destination(config: ExportConfig, script_name: Optional[str] = None) -> Path:
    """Return the document path, deriving one from the script name if unset."""
    if config.destination_path:
        return Path(config.destination_path)
    return Path(file_name_from_script(script_name, ".json"))


def load_export_config(path: Path) -> ExportConfig:
    raw = yaml.safe_load(Path(path).read_text())
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError("config", str(path), "a YAML mapping")

    try:
        solver = SolverIterations(str(raw.get("solver_iterations", "none")).lower())
    except ValueError:
        raise ConfigurationError(
            "solver_iterations", raw.get("solver_iterations"), "none, current or all"
        ) from None

    precision_raw = raw.get("precision")
    frames_raw = raw.get("frames", {}) or {}
    if not isinstance(frames_raw, dict):
        raise ConfigurationError("frames", frames_raw, "a mapping of frame definitions")

    config = ExportConfig(
        target_frame=str(raw.get("coordinate_system", BASE_FRAME)),
        export_attitude=bool(raw.get("export_attitude", True)),
        export_colors=bool(raw.get("export_colors", True)),
        sample_stride=int(raw.get("data_collect_frequency", 1)),
        capacity=int(raw.get("max_data_points", 20000)),
        min_body_radius=float(raw.get("min_body_radius", 50.0)),
        derive_radii=bool(raw.get("derive_radii", True)),
        destination_path=str(raw.get("json_file", "") or ""),
        solver_iterations=solver,
        overflow_policy=str(raw.get("overflow_policy", "decimate")),
        precision=int(precision_raw) if precision_raw is not None else None,
        global_pipeline=bool(raw.get("global", False)),
        bodies=_parse_bodies(raw.get("bodies")),
        frames={str(k): v for k, v in frames_raw.items()},
    )
    return validate_export_config(config)


def apply_export_overrides(
    config: ExportConfig,
    *,
    destination_path: Optional[str] = None,
    sample_stride: Optional[int] = None,
    capacity: Optional[int] = None,
    export_attitude: Optional[bool] = None,
    export_colors: Optional[bool] = None,
    target_frame: Optional[str] = None,
) -> ExportConfig:
    updated = replace(
        config,
        destination_path=destination_path if destination_path is not None else config.destination_path,
        sample_stride=sample_stride if sample_stride is not None else config.sample_stride,
        capacity=capacity if capacity is not None else config.capacity,
        export_attitude=export_attitude if export_attitude is not None else config.export_attitude,
        export_colors=export_colors if export_colors is not None else config.export_colors,
        target_frame=target_frame if target_frame is not None else config.target_frame,
    )
    return validate_export_config(updated)


def _parse_bodies(value: Any) -> List[BodySpec]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigurationError("bodies", value, "a list of body entries")
    specs: List[BodySpec] = []
    for item in value:
        if isinstance(item, str):
            specs.append(BodySpec(name=item))
            continue
        if not isinstance(item, dict) or "name" not in item:
            raise ConfigurationError("bodies", item, "a name or a mapping with 'name'")
        states = item.get("states")
        if states is None and item.get("state") is not None:
            states = [item["state"]]
        specs.append(
            BodySpec(
                name=str(item["name"]),
                kind=str(item.get("kind", "spacecraft")),
                mass=float(item.get("mass", 850.0)),
                color=item.get("color"),
                scope=str(item.get("scope", Scope.GLOBAL.value)),
                equatorial_radius=float(item.get("equatorial_radius", 6378.1363)),
                attitude=item.get("attitude"),
                epochs=[float(e) for e in item.get("epochs", []) or []],
                states=[[float(v) for v in row] for row in states or []],
            )
        )
    return specs
