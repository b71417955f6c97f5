"""
rubystrap Installer
Dependency gate, installation steps and the orchestrator that ties them together
"""

from rubystrap.installer.steps import (
    Step,
    StepOutcome,
    StepSequence,
    StepState,
    SequenceResult,
    SequenceState,
)
from rubystrap.installer.rbenv import RbenvSteps
from rubystrap.installer.orchestrator import (
    DependencyReport,
    Instruction,
    InstructionKind,
    Orchestrator,
    Reporter,
    RunResult,
    Verdict,
    instruction_for,
)

__all__ = [
    'Step',
    'StepOutcome',
    'StepSequence',
    'StepState',
    'SequenceResult',
    'SequenceState',
    'RbenvSteps',
    'DependencyReport',
    'Instruction',
    'InstructionKind',
    'Orchestrator',
    'Reporter',
    'RunResult',
    'Verdict',
    'instruction_for',
]
