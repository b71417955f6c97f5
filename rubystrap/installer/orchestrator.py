#!/usr/bin/env python3
"""
rubystrap Orchestrator
Check every required dependency, then run the installation steps if nothing is missing
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from rubystrap.dependencies.dependency import CheckResult, Dependency
from rubystrap.installer.steps import SequenceResult, SequenceState, Step, StepSequence

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 2


class InstructionKind(Enum):
    COMMAND = "command"
    INSTRUCTIONS = "instructions"
    WEBSITE = "website"
    FALLBACK = "fallback"


FALLBACK_INSTRUCTION = "Search for it yourself."


@dataclass
class Instruction:
    """How to install one missing dependency"""
    kind: InstructionKind
    text: str
    comments: Optional[str] = None


def instruction_for(dep: Dependency) -> Instruction:
    """
    Choose the remediation for a missing dependency

    Precedence: install command, then free-text instructions, then website
    (with optional comments), then a generic fallback.
    """
    if dep.install_command is not None:
        return Instruction(InstructionKind.COMMAND, dep.install_command, dep.install_comments)
    elif dep.install_instructions is not None:
        return Instruction(InstructionKind.INSTRUCTIONS, dep.install_instructions, dep.install_comments)
    elif dep.website is not None:
        return Instruction(InstructionKind.WEBSITE, dep.website, dep.website_comments)
    return Instruction(InstructionKind.FALLBACK, FALLBACK_INSTRUCTION)


@dataclass
class DependencyReport:
    """Outcome of checking the whole catalog"""
    checked: List[Tuple[Dependency, CheckResult]] = field(default_factory=list)

    @property
    def missing(self) -> List[Dependency]:
        return [dep for dep, result in self.checked if not result.is_found]

    @property
    def passed(self) -> bool:
        return not self.missing

    def instructions(self) -> List[Tuple[str, Instruction]]:
        """(name, instruction) for every missing dependency, in catalog order"""
        return [(dep.name, instruction_for(dep)) for dep in self.missing]


class Verdict(Enum):
    SUCCESS = "success"
    DEGRADED = "degraded"
    DEPENDENCIES_MISSING = "dependencies_missing"
    STEP_FAILED = "step_failed"


@dataclass
class RunResult:
    verdict: Verdict
    dependencies: DependencyReport
    sequence: Optional[SequenceResult] = None

    @property
    def exit_code(self) -> int:
        if self.verdict in (Verdict.SUCCESS, Verdict.DEGRADED):
            return EXIT_SUCCESS
        return EXIT_FAILURE

    @property
    def failed_packages(self) -> List[str]:
        return self.sequence.failed_packages if self.sequence else []


class Reporter:
    """Progress callbacks; the default implementation ignores everything"""

    def dependency_checked(self, dep: Dependency, result: CheckResult) -> None:
        pass

    def step_started(self, step: Step) -> None:
        pass

    def step_finished(self, step: Step) -> None:
        pass


class Orchestrator:
    """
    Two phases: a dependency gate, then the installation step sequence.

    Every dependency is checked exactly once and in catalog order, even after
    one is found missing. Steps only run if nothing is missing.
    """

    def __init__(self, catalog: Sequence[Dependency], steps: Sequence[Step],
                 reporter: Optional[Reporter] = None):
        self.catalog = list(catalog)
        self.steps = list(steps)
        self.reporter = reporter or Reporter()

    def check_dependencies(self) -> DependencyReport:
        report = DependencyReport()
        for dep in self.catalog:
            result = dep.check()
            logger.debug("%s: %r", dep.name, result)
            report.checked.append((dep, result))
            self.reporter.dependency_checked(dep, result)

        if not report.passed:
            logger.info("missing dependencies: %s", ', '.join(dep.name for dep in report.missing))
        return report

    def run_steps(self) -> SequenceResult:
        sequence = StepSequence(
            self.steps,
            on_start=self.reporter.step_started,
            on_finish=self.reporter.step_finished,
        )
        return sequence.run()

    def run(self, report: Optional[DependencyReport] = None) -> RunResult:
        """
        Run both phases

        Args:
            report: An already computed dependency report (skips re-checking)

        Returns:
            RunResult with the verdict and both phases' details
        """
        if report is None:
            report = self.check_dependencies()
        if not report.passed:
            return RunResult(Verdict.DEPENDENCIES_MISSING, report)

        sequence = self.run_steps()
        if sequence.state == SequenceState.ABORTED:
            return RunResult(Verdict.STEP_FAILED, report, sequence)
        if sequence.degraded:
            return RunResult(Verdict.DEGRADED, report, sequence)
        return RunResult(Verdict.SUCCESS, report, sequence)
