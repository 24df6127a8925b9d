"""Trajectory document schema helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

SCHEMA_VERSION = "1.0"


@dataclass
class OrbitEntry:
    name: str
    display: str
    radius: float
    eph: List[List[float]] = field(default_factory=list)
    time: List[float] = field(default_factory=list)
    color: Optional[str] = None
    att: Optional[List[List[float]]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "display": self.display,
            "radius": self.radius,
        }
        if self.color is not None:
            payload["color"] = self.color
        payload["eph"] = self.eph
        if self.att is not None:
            payload["att"] = self.att
        payload["time"] = self.time
        return payload

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "OrbitEntry":
        att = raw.get("att")
        return OrbitEntry(
            name=str(raw["name"]),
            display=str(raw.get("display", "line,point")),
            radius=float(raw.get("radius", 0.0)),
            eph=[[float(v) for v in row] for row in raw.get("eph", [])],
            time=[float(t) for t in raw.get("time", [])],
            color=raw.get("color"),
            att=[[float(v) for v in row] for row in att] if att is not None else None,
        )


@dataclass
class TrajectoryDocument:
    frame: str
    orbits: List[OrbitEntry] = field(default_factory=list)
    truncated: bool = False
    coordinates: str = "cartesian"
    units: str = "km"
    version: str = SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "coordinates": self.coordinates,
            "units": self.units,
            "frame": self.frame,
            "schema_version": self.version,
        }
        if self.truncated:
            info["truncated"] = True
        return {
            "info": info,
            "orbits": [orbit.to_dict() for orbit in self.orbits],
        }

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "TrajectoryDocument":
        info = raw.get("info", {}) or {}
        return TrajectoryDocument(
            frame=str(info.get("frame", "")),
            orbits=[OrbitEntry.from_dict(o) for o in raw.get("orbits", [])],
            truncated=bool(info.get("truncated", False)),
            coordinates=str(info.get("coordinates", "cartesian")),
            units=str(info.get("units", "km")),
            version=str(info.get("schema_version", SCHEMA_VERSION)),
        )


def load_document(path: Path) -> TrajectoryDocument:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid trajectory document: {path}")
    return TrajectoryDocument.from_dict(raw)
