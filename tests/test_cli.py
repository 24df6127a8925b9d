"""Tests for the command line entry point."""

from __future__ import annotations

import json
from pathlib import Path

from trajectory_exporter.cli import EXIT_CONFIG, EXIT_IO, EXIT_NO_DATA, EXIT_OK, main

CONFIGS = Path(__file__).resolve().parents[1] / "configs"
CONFIG = str(CONFIGS / "export.yaml")
RECORDING = str(CONFIGS / "example_recording.jsonl")


def test_export_writes_document(tmp_path: Path) -> None:
    out = tmp_path / "run.json"
    assert main(["export", "--config", CONFIG, "--input", RECORDING, "--out", str(out)]) == EXIT_OK
    doc = json.loads(out.read_text())
    assert doc["info"]["frame"] == "EarthFixedSpin"
    assert [o["name"] for o in doc["orbits"]] == ["DefaultSC", "Earth"]
    assert len(doc["orbits"][0]["eph"]) == 3
    assert len(doc["orbits"][0]["att"]) == 3


def test_export_flags(tmp_path: Path) -> None:
    out = tmp_path / "run.json"
    code = main(
        [
            "export", "--config", CONFIG, "--input", RECORDING, "--out", str(out),
            "--stride", "2", "--no-attitude", "--no-colors",
        ]
    )
    assert code == EXIT_OK
    sat = json.loads(out.read_text())["orbits"][0]
    assert len(sat["time"]) == 2
    assert "att" not in sat and "color" not in sat


def test_export_without_samples(tmp_path: Path) -> None:
    recording = tmp_path / "empty.jsonl"
    recording.write_text('{"run_state": "end_of_run"}\n{"run_state": "end_of_run"}\n')
    out = tmp_path / "run.json"
    code = main(["export", "--config", CONFIG, "--input", str(recording), "--out", str(out)])
    assert code == EXIT_NO_DATA
    assert not out.exists()


def test_default_document_name_follows_script(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    code = main(["export", "--config", CONFIG, "--input", RECORDING, "--script-name", "mission.script"])
    assert code == EXIT_OK
    assert (tmp_path / "mission.json").exists()


def test_invalid_config_exit_code(tmp_path: Path) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("max_data_points: 0\n")
    assert main(["validate", "--config", str(bad)]) == EXIT_CONFIG


def test_empty_roster_exit_code(tmp_path: Path) -> None:
    empty = tmp_path / "empty.yaml"
    empty.write_text("coordinate_system: EarthMJ2000Eq\n")
    assert main(["validate", "--config", str(empty)]) == EXIT_CONFIG


def test_missing_input_exit_code(tmp_path: Path) -> None:
    code = main(["export", "--config", CONFIG, "--input", str(tmp_path / "nope.jsonl"), "--out", str(tmp_path / "o.json")])
    assert code == EXIT_IO


def test_unwritable_destination_exit_code(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    code = main(["export", "--config", CONFIG, "--input", RECORDING, "--out", str(blocker / "run.json")])
    assert code == EXIT_IO


def test_validate_lists_roster(capsys) -> None:
    assert main(["validate", "--config", CONFIG, "--script-name", "mission.script"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "DefaultSC" in out and "Earth" in out
    assert "destination: mission.json" in out


def test_inspect_summarises_document(tmp_path: Path, capsys) -> None:
    out = tmp_path / "run.json"
    main(["export", "--config", CONFIG, "--input", RECORDING, "--out", str(out)])
    capsys.readouterr()
    assert main(["inspect", str(out)]) == EXIT_OK
    text = capsys.readouterr().out
    assert "frame: EarthFixedSpin" in text
    assert "DefaultSC" in text
