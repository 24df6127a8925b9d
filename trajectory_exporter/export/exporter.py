"""Terminal export of the series store to a trajectory document."""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..bodies import BodyRoster
from ..config import ExportConfig, resolve_destination
from ..errors import ExportIOError
from ..recording.series import SeriesStore
from ..utils import ensure_dir, round_significant
from .document import OrbitEntry, TrajectoryDocument


class ExportStatus(str, Enum):
    EXPORTED = "exported"
    ALREADY_EXPORTED = "already_exported"
    NO_DATA = "no_data"


class DocumentExporter:
    """Writes the accumulated series once per run.

    The end-of-run trigger fires more than once; every call after a
    successful write returns ``ALREADY_EXPORTED`` until new samples are
    appended. A failed write leaves the store intact so the export can be
    retried.
    """

    def __init__(self, config: ExportConfig, script_name: Optional[str] = None):
        self.config = config
        self.script_name = script_name

    @property
    def destination(self) -> Path:
        return resolve_destination(self.config, self.script_name)

    def build_document(self, store: SeriesStore, roster: BodyRoster) -> TrajectoryDocument:
        time = self._numbers(store.time)
        orbits: List[OrbitEntry] = []
        for body in roster:
            series = store.series(body.index)
            orbits.append(
                OrbitEntry(
                    name=body.name,
                    display=body.display_tag,
                    radius=body.radius,
                    color=body.color.to_rgb_string() if self.config.export_colors else None,
                    eph=[self._numbers(row) for row in series.states()],
                    att=(
                        [self._numbers(row) for row in series.quaternions()]
                        if self.config.export_attitude
                        else None
                    ),
                    time=list(time),
                )
            )
        return TrajectoryDocument(
            frame=self.config.target_frame,
            orbits=orbits,
            truncated=store.overflowed,
        )

    def export_once(
        self,
        store: SeriesStore,
        roster: BodyRoster,
        path: Optional[Path] = None,
    ) -> ExportStatus:
        """Write the document if this run has not been exported yet.

        Raises:
            ExportIOError: if the destination cannot be opened or written.
        """
        if store.cleared:
            logging.debug("Export already done for this run; skipping duplicate trigger")
            return ExportStatus.ALREADY_EXPORTED

        if len(roster) == 0 or len(roster) != store.body_count:
            logging.error(
                "There is no data to write. Are you sure you have selected any "
                "objects to export? No data was written during this run."
            )
            return ExportStatus.NO_DATA

        destination = Path(path) if path is not None else self.destination
        text = json.dumps(self.build_document(store, roster).to_dict(), indent=2)
        try:
            if str(destination.parent) not in ("", "."):
                ensure_dir(destination.parent)
            with open(destination, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as exc:
            raise ExportIOError(destination, exc.strerror or str(exc)) from exc

        logging.info(
            "Exported %d orbits x %d steps to %s", len(roster), len(store), destination
        )
        store.clear()
        return ExportStatus.EXPORTED

    def _numbers(self, values) -> List[float]:
        if self.config.precision is None:
            return [float(v) for v in values]
        return [round_significant(float(v), self.config.precision) for v in values]
