"""Trajectory document model and the terminal exporter."""

from .document import SCHEMA_VERSION, OrbitEntry, TrajectoryDocument, load_document
from .exporter import DocumentExporter, ExportStatus

__all__ = [
    "SCHEMA_VERSION",
    "DocumentExporter",
    "ExportStatus",
    "OrbitEntry",
    "TrajectoryDocument",
    "load_document",
]
