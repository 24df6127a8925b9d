"""Trajectory recorder: gate, extract and buffer published samples per run.

Records per-step state for every selected body:
- Position and velocity in the configured view frame
- Attitude quaternion (x, y, z, w), identity when a body has no attitude
- One shared time axis

Writes one JSON trajectory document when the run ends.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple, Union

from ..bodies import BodyRoster, SpacePoint
from ..config import ExportConfig, validate_export_config
from ..errors import ConfigurationError, ExportIOError, ExtractionError, RosterError
from ..export.exporter import DocumentExporter, ExportStatus
from ..frames import FrameConverter, FrameRegistry
from ..sources import PublishEvent
from .extractor import FieldExtractor
from .overflow import make_overflow_policy
from .selector import SampleSelector, SelectorDecision
from .series import SeriesStore


class TrajectoryRecorder:
    """Owns one run's selector, extractor, series store and exporter.

    Usage:
        recorder = TrajectoryRecorder(config, config.space_points())
        recorder.initialize()
        for event in source:
            recorder.distribute(event)
    """

    def __init__(
        self,
        config: ExportConfig,
        selection: Sequence[Tuple[str, Optional[SpacePoint]]],
        converter: Optional[FrameConverter] = None,
        script_name: Optional[str] = None,
    ):
        """Initialize the recorder.

        Args:
            config: Export configuration (validated here)
            selection: Selected objects by name, in selection order; an
                unresolved object is given as ``None``
            converter: Frame converter (built from ``config.frames`` if None)
            script_name: Run script name used to derive a default document name
        """
        self.config = validate_export_config(config)
        self.selection = list(selection)
        try:
            self.converter = converter or FrameRegistry.from_dict(config.frames)
        except ValueError as exc:
            raise ConfigurationError("frames", config.frames, str(exc)) from exc
        if isinstance(self.converter, FrameRegistry) and self.config.target_frame not in self.converter:
            raise ConfigurationError(
                "coordinate_system",
                self.config.target_frame,
                "the base frame or a frame defined under 'frames'",
            )
        self.script_name = script_name
        self.exporter = DocumentExporter(self.config, script_name)
        self.active = True

        self.roster: Optional[BodyRoster] = None
        self.store: Optional[SeriesStore] = None
        self.selector: Optional[SampleSelector] = None
        self.extractor: Optional[FieldExtractor] = None
        self.last_status: Optional[ExportStatus] = None
        self.last_error: Optional[ExportIOError] = None
        self.abandoned_events = 0
        self.export_count = 0
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> BodyRoster:
        """Fix the body roster and allocate the store for a run.

        Raises:
            RosterError: if no selected object resolved to a trackable body.
        """
        if self._initialized:
            return self.roster
        if not self.selection:
            raise RosterError("No objects were selected for export")
        roster = BodyRoster.build(
            self.selection,
            derive_radii=self.config.derive_radii,
            min_radius=self.config.min_body_radius,
        )
        if len(roster) == 0:
            raise RosterError(
                f"All {len(self.selection)} selected objects have unresolved references"
            )
        self.roster = roster
        self.store = SeriesStore(
            len(roster),
            self.config.capacity,
            make_overflow_policy(self.config.overflow_policy),
        )
        self.selector = SampleSelector(
            bodies=roster.bodies,
            stride=self.config.sample_stride,
            solver_iterations=self.config.solver_iterations,
            global_pipeline=self.config.global_pipeline,
            active=self.active,
        )
        self.extractor = FieldExtractor(self.converter, self.config.target_frame)
        self._initialized = True
        logging.info(
            "Recording %d movers and %d reference bodies in %s",
            len(roster.movers),
            len(roster.references),
            self.config.target_frame,
        )
        return roster

    def distribute(self, event: PublishEvent) -> bool:
        """Process one publish event.

        Returns:
            True if the event's data was buffered
        """
        if not self._initialized:
            self.initialize()

        decision = self.selector.decide(event)
        if decision == SelectorDecision.EXPORT:
            self.finish()
            return False
        if decision != SelectorDecision.BUFFER:
            return False

        try:
            results = self.extractor.extract_all(event, self.roster.bodies)
        except ExtractionError as exc:
            self.abandoned_events += 1
            logging.error("Abandoning sample at epoch %s: %s", event.epoch, exc)
            return False
        self.store.append(event.epoch, results)
        return True

    def run(self, events: Iterable[PublishEvent]) -> Optional[ExportStatus]:
        """Distribute every event, then return the last export status.

        A failed write is logged and retried on the next end-of-run
        trigger. If the run ends with the write still failing, the last
        :class:`ExportIOError` is raised.
        """
        for event in events:
            try:
                self.distribute(event)
            except ExportIOError as exc:
                logging.error("%s", exc)
        if self.last_error is not None:
            raise self.last_error
        return self.last_status

    def finish(self, path: Optional[Path] = None) -> ExportStatus:
        """Export once and emit the deferred end-of-run advisories.

        The advisories are emitted even when the write fails.

        Raises:
            ExportIOError: if the document cannot be written; the buffered
                data is kept so a later call can retry.
        """
        if not self._initialized:
            self.initialize()
        overflowed = self.store.overflowed
        reductions = self.store.reduction_count
        try:
            status = self.exporter.export_once(self.store, self.roster, path)
        except ExportIOError as exc:
            self.last_error = exc
            raise
        finally:
            self._emit_advisories()
        self.last_error = None
        if status == ExportStatus.EXPORTED:
            self.export_count += 1
            logging.info("Trajectory data exported successfully.")
            if overflowed:
                logging.warning(
                    "Max data points (%d) exceeded; series reduced %d times by %s.",
                    self.config.capacity,
                    reductions,
                    self.config.overflow_policy,
                )
            self.selector.reset()
        self.last_status = status
        return status

    def _emit_advisories(self) -> None:
        if self.extractor.absent_data:
            logging.warning("There was absent data. Did you propagate all bodies?")
            self.extractor.reset()
        if self.abandoned_events:
            logging.warning(
                "%d samples were abandoned because their state could not be extracted.",
                self.abandoned_events,
            )
            self.abandoned_events = 0

    def take_action(self, action: str, data: str = "") -> bool:
        if action == "Clear":
            if self._initialized:
                logging.warning("Cannot clear the selection during a run")
                return False
            self.selection = []
            return True
        if action == "Remove":
            if self.roster is not None:
                return self.roster.remove(data)
            before = len(self.selection)
            self.selection = [item for item in self.selection if item[0] != data]
            return len(self.selection) != before
        if action in ("PenUp", "PenDown"):
            self.active = action == "PenDown"
            if self.selector is not None:
                self.selector.active = self.active
            return True
        return False

    def set_orbit_color(self, body: Union[int, str], color: Any) -> None:
        """Set a body's orbit color by roster index, or by name."""
        if self.roster is None:
            raise RosterError("Orbit colors can only be set after initialize()")
        if isinstance(body, int):
            self.roster.set_color_at(body, color)
        else:
            self.roster.set_color(body, color)

    def get_summary(self) -> Dict[str, Any]:
        if self.store is None or self.roster is None:
            return {}
        summary = self.store.summary()
        summary["bodies"] = self.roster.names
        summary["absent_data"] = bool(self.extractor and self.extractor.absent_data)
        return summary
