#!/usr/bin/env python3
"""Entry point for the trajectory exporter CLI."""

from trajectory_exporter.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
