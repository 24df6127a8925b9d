"""Error kinds raised by the trajectory export pipeline."""

from __future__ import annotations

from typing import Any, Tuple


class TrajectoryExportError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(TrajectoryExportError, ValueError):
    """Invalid configuration value; the run does not start."""

    def __init__(self, field_name: str, value: Any, expected: str):
        self.field_name = field_name
        self.value = value
        self.expected = expected
        super().__init__(
            f"Invalid value {value!r} for '{field_name}': expected {expected}"
        )


class RosterError(ConfigurationError):
    """The body selection cannot be turned into a usable roster."""

    def __init__(self, message: str, value: Any = None):
        self.field_name = "bodies"
        self.value = value
        self.expected = "at least one resolvable body of a supported kind"
        Exception.__init__(self, message)


class MissingFieldError(TrajectoryExportError, KeyError):
    """A mover's state fields were not present in a published sample."""

    def __init__(self, body_name: str, missing: Tuple[str, ...]):
        self.body_name = body_name
        self.missing = tuple(missing)
        super().__init__(f"{body_name}: missing fields {', '.join(self.missing)}")

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0])


class ExtractionError(TrajectoryExportError, RuntimeError):
    """One event could not be turned into samples; the event is abandoned."""


class StateRetrievalError(ExtractionError):
    """A reference body could not report its state at the requested epoch."""


class FrameConversionError(ExtractionError):
    """A sample could not be converted into the view frame."""


class ExportIOError(TrajectoryExportError, OSError):
    """The output document could not be opened or written."""

    def __init__(self, path: Any, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write trajectory document {path}: {reason}")
