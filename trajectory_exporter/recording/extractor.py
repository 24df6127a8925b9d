"""Per-body extraction of state and attitude from a publish event."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

import numpy as np

from ..attitude import IDENTITY_QUATERNION, Quaternion, quaternion_from_matrix
from ..bodies import Body, BodyKind
from ..errors import FrameConversionError, MissingFieldError, StateRetrievalError
from ..frames import FrameConverter, as_state_vector
from ..sources import PublishEvent, state_labels
from .series import Absent, Sample, SampleResult


@dataclass
class FieldExtractor:
    """Builds one :class:`Sample` (or :class:`Absent`) per body and event.

    Frame conversion always happens at the sample's own epoch: states
    relative to a moving origin are not valid at any other epoch.
    """

    converter: FrameConverter
    target_frame: str
    absent_data: bool = False

    def reset(self) -> None:
        self.absent_data = False

    def extract_all(self, event: PublishEvent, bodies: List[Body]) -> List[SampleResult]:
        return [self.extract(event, body) for body in bodies]

    def extract(self, event: PublishEvent, body: Body) -> SampleResult:
        """Extract one body's sample.

        Raises:
            StateRetrievalError: if a reference body cannot report its state.
            FrameConversionError: if the event frame is unknown to the converter.
        """
        if body.kind == BodyKind.MOVER:
            state = self._mover_state(event, body)
            if isinstance(state, MissingFieldError):
                self.absent_data = True
                logging.debug("Absent data at epoch %s: %s", event.epoch, state)
                return Absent(body.index, state)
        else:
            state = self._reference_state(event, body)
        return self._build_sample(event, body, state)

    def _mover_state(self, event: PublishEvent, body: Body) -> Union[np.ndarray, MissingFieldError]:
        labels = state_labels(body.name)
        offsets = [event.offset_of(label) for label in labels]
        missing = tuple(label for label, offset in zip(labels, offsets) if offset is None)
        if missing:
            return MissingFieldError(body.name, missing)
        return as_state_vector([event.values[offset] for offset in offsets])

    def _reference_state(self, event: PublishEvent, body: Body) -> np.ndarray:
        try:
            return as_state_vector(body.point.state_at(event.epoch))
        except StateRetrievalError:
            raise
        except Exception as exc:
            raise StateRetrievalError(f"Error getting {body.name} state: {exc}") from exc

    def _build_sample(self, event: PublishEvent, body: Body, state: np.ndarray) -> Sample:
        rotation: Optional[np.ndarray] = None
        if event.frame != self.target_frame:
            try:
                state, rotation = self.converter.convert(
                    event.epoch, state, event.frame, self.target_frame
                )
            except (KeyError, ValueError) as exc:
                raise FrameConversionError(
                    f"Cannot convert {body.name} from {event.frame} to {self.target_frame}: {exc}"
                ) from exc
        return Sample.from_state(state, self._quaternion(event, body, rotation))

    def _quaternion(self, event: PublishEvent, body: Body, rotation: Optional[np.ndarray]) -> Quaternion:
        if not body.point.has_attitude():
            return IDENTITY_QUATERNION
        attitude = np.asarray(body.point.attitude_at(event.epoch), dtype=float)
        if rotation is not None:
            attitude = attitude @ rotation.T
        return quaternion_from_matrix(attitude)
