"""Tests for document export."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from trajectory_exporter.bodies import BodyRoster
from trajectory_exporter.config import ExportConfig
from trajectory_exporter.errors import ExportIOError
from trajectory_exporter.export.document import load_document
from trajectory_exporter.export.exporter import DocumentExporter, ExportStatus
from trajectory_exporter.recording.series import Absent, Sample, SeriesStore


def _filled_store(steps: int = 3) -> SeriesStore:
    store = SeriesStore(2, capacity=100)
    for i in range(steps):
        t = float(i) * 60.0
        store.append(t, [Sample.from_state((7000.0 + t, 0.0, 0.0, 0.0, 7.5, 0.0)), Sample.from_state((0.0,) * 6)])
    return store


def _read(path: Path) -> dict:
    return json.loads(path.read_text())


def test_document_shape(config: ExportConfig, roster: BodyRoster) -> None:
    exporter = DocumentExporter(config)
    assert exporter.export_once(_filled_store(), roster) == ExportStatus.EXPORTED
    doc = _read(Path(config.destination_path))
    assert doc["info"]["coordinates"] == "cartesian"
    assert doc["info"]["units"] == "km"
    assert doc["info"]["frame"] == "EarthMJ2000Eq"
    assert "truncated" not in doc["info"]
    sat, earth = doc["orbits"]
    assert list(sat) == ["name", "display", "radius", "color", "eph", "time"]
    assert sat["name"] == "Sat" and earth["name"] == "Earth"
    assert sat["display"] == "line,point"
    assert sat["color"] == "255,0,0"
    assert sat["time"] == [0.0, 60.0, 120.0]
    assert sat["eph"][2] == [7120.0, 0.0, 0.0, 0.0, 7.5, 0.0]
    assert earth["radius"] == pytest.approx(6378.1363)


def test_optional_keys(config: ExportConfig, roster: BodyRoster) -> None:
    config = replace(config, export_attitude=True, export_colors=False)
    DocumentExporter(config).export_once(_filled_store(2), roster)
    sat = _read(Path(config.destination_path))["orbits"][0]
    assert "color" not in sat
    assert sat["att"] == [[0.0, 0.0, 0.0, 1.0], [0.0, 0.0, 0.0, 1.0]]


def test_export_is_idempotent(config: ExportConfig, roster: BodyRoster) -> None:
    exporter = DocumentExporter(config)
    store = _filled_store()
    assert exporter.export_once(store, roster) == ExportStatus.EXPORTED
    first = Path(config.destination_path).read_text()
    assert store.cleared
    assert exporter.export_once(store, roster) == ExportStatus.ALREADY_EXPORTED
    assert Path(config.destination_path).read_text() == first


def test_empty_roster_writes_nothing(config: ExportConfig) -> None:
    store = SeriesStore(0, capacity=10)
    store.append(0.0, [])
    status = DocumentExporter(config).export_once(store, BodyRoster())
    assert status == ExportStatus.NO_DATA
    assert not Path(config.destination_path).exists()


def test_write_failure_keeps_data_for_retry(tmp_path: Path, config: ExportConfig, roster: BodyRoster) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    exporter = DocumentExporter(config)
    store = _filled_store()
    with pytest.raises(ExportIOError):
        exporter.export_once(store, roster, blocker / "out.json")
    assert not store.cleared
    assert len(store) == 3
    assert exporter.export_once(store, roster) == ExportStatus.EXPORTED


def test_absent_samples_shorten_eph(config: ExportConfig, roster: BodyRoster) -> None:
    store = SeriesStore(2, capacity=10)
    store.append(0.0, [Sample.from_state((1.0,) * 6), Sample.from_state((0.0,) * 6)])
    store.append(1.0, [Absent(0), Sample.from_state((0.0,) * 6)])
    DocumentExporter(config).export_once(store, roster)
    document = load_document(Path(config.destination_path))
    assert [len(o.eph) for o in document.orbits] == [1, 2]
    assert [len(o.time) for o in document.orbits] == [2, 2]


def test_precision_rounds_values(config: ExportConfig, roster: BodyRoster) -> None:
    config = replace(config, precision=10)
    store = SeriesStore(2, capacity=10)
    store.append(1.0 / 3.0, [Sample.from_state((2.0 / 3.0,) * 6), Sample.from_state((0.0,) * 6)])
    DocumentExporter(config).export_once(store, roster)
    doc = _read(Path(config.destination_path))
    assert doc["orbits"][0]["time"] == [0.3333333333]
    assert doc["orbits"][0]["eph"][0][0] == 0.6666666667


def test_default_destination_from_script_name(tmp_path: Path, monkeypatch, roster: BodyRoster) -> None:
    monkeypatch.chdir(tmp_path)
    exporter = DocumentExporter(ExportConfig(), script_name="mission.script")
    assert exporter.destination == Path("mission.json")
    exporter.export_once(_filled_store(), roster)
    assert (tmp_path / "mission.json").exists()
