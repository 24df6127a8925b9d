"""Gating of publish events before extraction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from ..bodies import Body
from ..config import SolverIterations
from ..sources import PublishEvent, RunState

# Epoch plus one full position/velocity state
MIN_FIELD_COUNT = 7


class SelectorDecision(str, Enum):
    EXPORT = "export"
    REJECT = "reject"
    NO_OP = "no_op"
    BUFFER = "buffer"


@dataclass
class SampleSelector:
    """Decides, per publish event, whether it is buffered.

    Rules are applied in order and the first match wins:

    1. end of run: trigger export, nothing buffered
    2. solver iteration in progress with solver display off: reject
       (with ``current``, end-of-segment events while solving are rejected)
    3. no data: accepted, nothing to do
    4. pipeline inactive: reject
    5. in-function event not visible to this pipeline: reject
    6. fewer than seven values: malformed, accepted, nothing to do
    7. stride decimation on a running counter: buffer on the first event
       and on every multiple of ``stride``
    """

    bodies: Sequence[Body]
    stride: int = 1
    solver_iterations: SolverIterations = SolverIterations.NONE
    global_pipeline: bool = False
    active: bool = True
    counter: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.stride < 1:
            raise ValueError("stride must be >= 1")

    def reset(self) -> None:
        self.counter = 0

    def accept(self, event: PublishEvent) -> bool:
        return self.decide(event) == SelectorDecision.BUFFER

    def decide(self, event: PublishEvent) -> SelectorDecision:
        if event.run_state == RunState.END_OF_RUN:
            return SelectorDecision.EXPORT

        if event.run_state == RunState.SOLVING and self.solver_iterations == SolverIterations.NONE:
            return SelectorDecision.REJECT
        if (
            event.end_of_receive
            and self.solver_iterations == SolverIterations.CURRENT
            and event.run_state in (RunState.SOLVING, RunState.SOLVED_PASS)
        ):
            return SelectorDecision.REJECT

        if len(event.values) == 0:
            return SelectorDecision.NO_OP

        if not self.active:
            return SelectorDecision.REJECT

        if event.in_function and not self._visible_in_function():
            return SelectorDecision.REJECT

        if len(event.values) < MIN_FIELD_COUNT:
            logging.debug("Ignoring short sample with %d values", len(event.values))
            return SelectorDecision.NO_OP

        self.counter += 1
        if self.counter == 1 or self.counter % self.stride == 0:
            return SelectorDecision.BUFFER
        return SelectorDecision.REJECT

    def _visible_in_function(self) -> bool:
        for body in self.bodies:
            point = body.point
            if self.global_pipeline and point.is_local():
                return False
            if not point.is_global() and not point.is_local():
                return False
        return True
