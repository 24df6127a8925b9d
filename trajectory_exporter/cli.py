"""CLI for replaying sample recordings into trajectory documents."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from .config import ExportConfig, apply_export_overrides, load_export_config, resolve_destination
from .errors import ConfigurationError, ExportIOError, RosterError
from .export.document import load_document
from .export.exporter import ExportStatus
from .recording.recorder import TrajectoryRecorder
from .sources import ReplaySampleSource

EXIT_OK = 0
EXIT_NO_DATA = 1
EXIT_CONFIG = 2
EXIT_IO = 3


def _load_config(args: argparse.Namespace) -> ExportConfig:
    config = load_export_config(Path(args.config))
    return apply_export_overrides(
        config,
        destination_path=getattr(args, "out", None),
        sample_stride=getattr(args, "stride", None),
        capacity=getattr(args, "capacity", None),
        export_attitude=False if getattr(args, "no_attitude", False) else None,
        export_colors=False if getattr(args, "no_colors", False) else None,
    )


def do_export(args: argparse.Namespace) -> int:
    config = _load_config(args)
    script_name = args.script_name or Path(args.input).name
    recorder = TrajectoryRecorder(config, config.space_points(), script_name=script_name)
    recorder.initialize()
    logging.info("Replaying %s", args.input)
    status = recorder.run(ReplaySampleSource(Path(args.input)))
    if status == ExportStatus.NO_DATA or recorder.export_count == 0:
        logging.warning("No samples were buffered from %s; nothing was written.", args.input)
        return EXIT_NO_DATA
    logging.info("Document: %s", recorder.exporter.destination)
    return EXIT_OK


def do_validate(args: argparse.Namespace) -> int:
    config = _load_config(args)
    recorder = TrajectoryRecorder(config, config.space_points(), script_name=args.script_name)
    roster = recorder.initialize()
    for body in roster:
        print(f"{body.index:3d}  {body.kind.value:<9}  {body.name:<20} radius={body.radius:.3f}")
    print(f"destination: {resolve_destination(config, args.script_name)}")
    return EXIT_OK


def do_inspect(args: argparse.Namespace) -> int:
    document = load_document(Path(args.document))
    print(f"frame: {document.frame}  units: {document.units}  truncated: {document.truncated}")
    for orbit in document.orbits:
        att = len(orbit.att) if orbit.att is not None else "-"
        print(f"{orbit.name:<20} eph={len(orbit.eph):<6} att={att!s:<6} time={len(orbit.time)}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Trajectory document exporter.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_cmd = subparsers.add_parser("export", help="Replay a sample recording and write the document")
    export_cmd.add_argument("--config", required=True, help="Export config YAML")
    export_cmd.add_argument("--input", required=True, help="JSON-lines sample recording")
    export_cmd.add_argument("--out", help="Destination document (.json)")
    export_cmd.add_argument("--stride", type=int, help="Buffer every Nth sample")
    export_cmd.add_argument("--capacity", type=int, help="Max samples before reduction")
    export_cmd.add_argument("--no-attitude", action="store_true", help="Omit attitude quaternions")
    export_cmd.add_argument("--no-colors", action="store_true", help="Omit orbit colors")
    export_cmd.add_argument("--script-name", help="Run script name for the default document name")

    validate_cmd = subparsers.add_parser("validate", help="Validate a config and show the roster")
    validate_cmd.add_argument("--config", required=True, help="Export config YAML")
    validate_cmd.add_argument("--script-name", help="Run script name for the default document name")

    inspect_cmd = subparsers.add_parser("inspect", help="Summarise an exported document")
    inspect_cmd.add_argument("document", help="Trajectory document (.json)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    handlers = {
        "export": do_export,
        "validate": do_validate,
        "inspect": do_inspect,
    }
    try:
        return handlers[args.command](args)
    except (ConfigurationError, RosterError) as exc:
        logging.error("Configuration error: %s", exc)
        return EXIT_CONFIG
    except ExportIOError as exc:
        logging.error("%s", exc)
        return EXIT_IO
    except FileNotFoundError as exc:
        logging.error("File not found: %s", exc.filename)
        return EXIT_IO


if __name__ == "__main__":
    raise SystemExit(main())
