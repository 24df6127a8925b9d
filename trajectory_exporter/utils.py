"""Utility helpers."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Optional

DEFAULT_DOCUMENT_NAME = "json.json"

_INVALID_FILENAME_CHARS = set('<>:"|?*')


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def is_valid_file_name(value: str) -> bool:
    """Return False if the path contains characters no host filesystem accepts.

    An empty string is valid here: it asks for a derived default name.
    """
    if value == "":
        return True
    # Drive letters ("C:\\...") are the one place a colon is allowed
    body = value[2:] if len(value) > 2 and value[1] == ":" and value[0].isalpha() else value
    if any(ch in _INVALID_FILENAME_CHARS for ch in body):
        return False
    if any(ord(ch) < 32 for ch in value):
        return False
    return Path(value).name not in ("", ".", "..")


def file_name_from_script(script_name: Optional[str], suffix: str = ".json") -> str:
    """Derive a document name from the run's script name.

    ``mission.script`` becomes ``mission.json``. Without a script name the
    fixed ``json.json`` is used.
    """
    if not script_name:
        return DEFAULT_DOCUMENT_NAME
    path = Path(script_name)
    if path.suffix:
        return str(path.with_suffix(suffix))
    return str(path) + suffix


def round_significant(value: float, digits: int) -> float:
    if value == 0.0 or not math.isfinite(value):
        return value
    return float(f"{value:.{digits}g}")
