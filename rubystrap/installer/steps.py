#!/usr/bin/env python3
"""
rubystrap Installation Steps
Ordered, fail-fast execution of installation steps
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


class StepState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SequenceState(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass
class StepOutcome:
    """What a step action reports back"""
    succeeded: bool
    already_satisfied: bool = False
    location: Optional[str] = None
    message: Optional[str] = None
    failed_packages: List[str] = field(default_factory=list)
    retry_commands: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """Succeeded, but some packages could not be installed"""
        return self.succeeded and bool(self.failed_packages)

    @classmethod
    def satisfied(cls, location: Optional[str] = None) -> 'StepOutcome':
        return cls(succeeded=True, already_satisfied=True, location=location)

    @classmethod
    def failure(cls, message: str) -> 'StepOutcome':
        return cls(succeeded=False, message=message)


@dataclass
class Step:
    """A named installation action"""
    name: str
    action: Callable[[], StepOutcome]
    state: StepState = StepState.PENDING
    outcome: Optional[StepOutcome] = None

    def run(self) -> StepOutcome:
        self.state = StepState.RUNNING
        try:
            outcome = self.action()
        except Exception as e:
            logger.exception("step %s raised", self.name)
            outcome = StepOutcome.failure(f"{type(e).__name__}: {e}")
        self.outcome = outcome
        self.state = StepState.SUCCEEDED if outcome.succeeded else StepState.FAILED
        return outcome


@dataclass
class SequenceResult:
    """Final state of a step sequence"""
    state: SequenceState
    steps: List[Step]
    failed_step: Optional[Step] = None

    @property
    def succeeded(self) -> bool:
        return self.state == SequenceState.COMPLETED

    @property
    def failed_packages(self) -> List[str]:
        failed: List[str] = []
        for step in self.steps:
            if step.outcome is not None:
                failed.extend(step.outcome.failed_packages)
        return failed

    @property
    def retry_commands(self) -> List[str]:
        commands: List[str] = []
        for step in self.steps:
            if step.outcome is not None:
                commands.extend(step.outcome.retry_commands)
        return commands

    @property
    def degraded(self) -> bool:
        return self.succeeded and bool(self.failed_packages)


class StepSequence:
    """
    Run steps strictly in order; the first failing step aborts the sequence.

    Nothing is rolled back: artifacts created by earlier steps stay in place,
    and each step's own "already satisfied" guard makes a full re-run safe.
    """

    def __init__(self, steps: Sequence[Step],
                 on_start: Optional[Callable[[Step], None]] = None,
                 on_finish: Optional[Callable[[Step], None]] = None):
        self.steps = list(steps)
        self.state = SequenceState.NOT_STARTED
        self.on_start = on_start
        self.on_finish = on_finish

    def run(self) -> SequenceResult:
        self.state = SequenceState.IN_PROGRESS

        for step in self.steps:
            if self.on_start:
                self.on_start(step)
            outcome = step.run()
            if self.on_finish:
                self.on_finish(step)

            if not outcome.succeeded:
                logger.error("step %s failed: %s", step.name, outcome.message or 'command failed')
                self.state = SequenceState.ABORTED
                return SequenceResult(self.state, self.steps, failed_step=step)

            if outcome.already_satisfied:
                logger.debug("step %s already satisfied", step.name)
            elif outcome.degraded:
                logger.warning("step %s could not install: %s", step.name, ', '.join(outcome.failed_packages))

        self.state = SequenceState.COMPLETED
        return SequenceResult(self.state, self.steps)
