"""
Tests for the rubystrap orchestrator

Dependency gate (check everything, collect missing, pick instructions) and the
verdicts produced by the step phase.
"""
from rubystrap.dependencies.dependency import Dependency
from rubystrap.installer.orchestrator import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    FALLBACK_INSTRUCTION,
    InstructionKind,
    Orchestrator,
    Reporter,
    Verdict,
    instruction_for,
)
from rubystrap.installer.steps import SequenceState, Step, StepOutcome


def _dep(name, present=True, checks=None, **fields):
    def init(dep):
        dep.name = name
        for key, value in fields.items():
            setattr(dep, key, value)

        def checker(result):
            if checks is not None:
                checks.append(name)
            if present:
                result.found(f"/usr/bin/{name}")
            else:
                result.not_found()
        dep.define_checker(checker)
    return Dependency(init)


def _ok_step(name, calls):
    def action():
        calls.append(name)
        return StepOutcome(succeeded=True)
    return Step(name, action)


class RecordingReporter(Reporter):
    def __init__(self):
        self.events = []

    def dependency_checked(self, dep, result):
        self.events.append(('dep', dep.name, result.is_found))

    def step_started(self, step):
        self.events.append(('start', step.name))

    def step_finished(self, step):
        self.events.append(('finish', step.name))


class TestDependencyGate:
    """Every dependency is checked once, in order, without short-circuit"""

    def test_missing_set_without_short_circuit(self):
        checks = []
        catalog = [
            _dep('one', checks=checks),
            _dep('two', present=False, checks=checks),
            _dep('three', checks=checks),
        ]
        report = Orchestrator(catalog, []).check_dependencies()

        assert checks == ['one', 'two', 'three']
        assert report.missing == [catalog[1]]
        assert not report.passed

    def test_all_present_passes(self):
        report = Orchestrator([_dep('one'), _dep('two')], []).check_dependencies()
        assert report.passed
        assert report.missing == []

    def test_empty_catalog_passes(self):
        assert Orchestrator([], []).check_dependencies().passed

    def test_reporter_sees_every_check(self):
        reporter = RecordingReporter()
        Orchestrator([_dep('one'), _dep('two', present=False)], [], reporter).check_dependencies()
        assert reporter.events == [('dep', 'one', True), ('dep', 'two', False)]

    def test_instructions_for_missing_only(self):
        report = Orchestrator([
            _dep('gcc', install_command='apt-get install build-essential'),
            _dep('patch', present=False, install_command='apt-get install patch'),
        ], []).check_dependencies()
        [(name, instruction)] = report.instructions()
        assert name == 'patch'
        assert instruction.text == 'apt-get install patch'


class TestInstructionPrecedence:
    """command > instructions > website > fallback"""

    def test_command_wins(self):
        dep = _dep('x', install_command='yum install x', install_instructions='do it', website='http://x')
        instruction = instruction_for(dep)
        assert instruction.kind == InstructionKind.COMMAND
        assert instruction.text == 'yum install x'

    def test_instructions_before_website(self):
        dep = _dep('x', install_instructions='brew install x', website='http://x')
        instruction = instruction_for(dep)
        assert instruction.kind == InstructionKind.INSTRUCTIONS
        assert instruction.text == 'brew install x'

    def test_website_with_comments(self):
        dep = _dep('x', website='http://x.org/', website_comments='pick the source tarball')
        instruction = instruction_for(dep)
        assert instruction.kind == InstructionKind.WEBSITE
        assert instruction.text == 'http://x.org/'
        assert instruction.comments == 'pick the source tarball'

    def test_fallback(self):
        instruction = instruction_for(_dep('x'))
        assert instruction.kind == InstructionKind.FALLBACK
        assert instruction.text == FALLBACK_INSTRUCTION


class TestRun:
    """Verdicts and exit codes"""

    def test_missing_dependency_blocks_steps(self):
        calls = []
        result = Orchestrator([_dep('cc', present=False)], [_ok_step('rbenv', calls)]).run()
        assert result.verdict == Verdict.DEPENDENCIES_MISSING
        assert result.exit_code == EXIT_FAILURE
        assert result.sequence is None
        assert calls == []

    def test_success(self):
        calls = []
        reporter = RecordingReporter()
        result = Orchestrator([_dep('cc')], [_ok_step('a', calls), _ok_step('b', calls)], reporter).run()
        assert result.verdict == Verdict.SUCCESS
        assert result.exit_code == EXIT_SUCCESS
        assert calls == ['a', 'b']
        assert reporter.events[1:] == [('start', 'a'), ('finish', 'a'), ('start', 'b'), ('finish', 'b')]

    def test_step_failure(self):
        calls = []
        steps = [
            _ok_step('one', calls),
            Step('two', lambda: StepOutcome.failure('Cannot install ruby-build')),
            _ok_step('three', calls),
            _ok_step('four', calls),
        ]
        result = Orchestrator([_dep('cc')], steps).run()
        assert result.verdict == Verdict.STEP_FAILED
        assert result.exit_code == EXIT_FAILURE
        assert result.sequence.state == SequenceState.ABORTED
        assert result.sequence.failed_step.name == 'two'
        assert calls == ['one']

    def test_degraded_is_success_exit(self):
        steps = [Step('gems', lambda: StepOutcome(succeeded=True, failed_packages=['bundler']))]
        result = Orchestrator([_dep('cc')], steps).run()
        assert result.verdict == Verdict.DEGRADED
        assert result.exit_code == EXIT_SUCCESS
        assert result.failed_packages == ['bundler']

    def test_precomputed_report_is_not_rechecked(self):
        checks = []
        orchestrator = Orchestrator([_dep('cc', checks=checks)], [])
        report = orchestrator.check_dependencies()
        result = orchestrator.run(report)
        assert checks == ['cc']
        assert result.verdict == Verdict.SUCCESS
