"""
Tests for the rubystrap dependency model

Lazy one-shot initialization and the found / found-at / not-found result states.
"""
import pytest

from rubystrap.dependencies.dependency import CheckResult, Dependency, ResultState


@pytest.fixture
def counted():
    """A dependency whose init routine counts its calls"""
    calls = []

    def init(dep):
        calls.append(dep)
        dep.name = "The 'make' tool"
        dep.install_command = "apt-get install build-essential"
        dep.website = "http://www.gnu.org/software/make/"
        dep.define_checker(lambda result: result.found('/usr/bin/make'))

    return Dependency(init), calls


class TestCheckResult:
    """Tagged found / found-at / not-found states"""

    def test_default_is_not_found(self):
        result = CheckResult()
        assert result.state == ResultState.NOT_FOUND
        assert not result.is_found
        assert result.location is None

    def test_found_with_location(self):
        result = CheckResult()
        result.found("/x/y")
        assert result.is_found
        assert result.location == "/x/y"
        assert result.state == ResultState.FOUND_AT

    def test_found_without_location(self):
        result = CheckResult()
        result.found()
        assert result.is_found
        assert result.location is None
        assert result.state == ResultState.FOUND

    def test_not_found_clears_location(self):
        result = CheckResult()
        result.found("/x/y")
        result.not_found()
        assert not result.is_found
        assert result.location is None


class TestLazyInitialization:
    """The init routine runs once, on first read or check()"""

    def test_construction_does_not_initialize(self, counted):
        dep, calls = counted
        assert calls == []
        assert not dep.initialized

    def test_field_read_initializes_once(self, counted):
        dep, calls = counted
        assert dep.name == "The 'make' tool"
        assert dep.install_command == "apt-get install build-essential"
        assert dep.website == "http://www.gnu.org/software/make/"
        assert dep.name == "The 'make' tool"
        assert len(calls) == 1

    def test_unset_fields_are_none(self, counted):
        dep, _ = counted
        assert dep.install_instructions is None
        assert dep.install_comments is None
        assert dep.website_comments is None
        assert dep.provides is None

    def test_check_after_field_read_does_not_reinitialize(self, counted):
        dep, calls = counted
        dep.website
        dep.check()
        dep.check()
        assert len(calls) == 1

    def test_reentrant_read_inside_init(self):
        calls = []

        def init(dep):
            calls.append(1)
            dep.name = "Patch"
            # reading a field from inside the routine must not recurse
            assert dep.name == "Patch"
            assert dep.website is None

        dep = Dependency(init)
        assert dep.name == "Patch"
        assert len(calls) == 1

    def test_assignment_does_not_initialize(self, counted):
        dep, calls = counted
        dep.install_comments = "needs root"
        assert calls == []

    def test_repr(self, counted):
        dep, _ = counted
        assert 'uninitialized' in repr(dep)
        dep.name
        assert "make" in repr(dep)


class TestCheck:
    """check() builds a fresh result each time"""

    def test_check_returns_checker_outcome(self, counted):
        dep, _ = counted
        result = dep.check()
        assert result.is_found
        assert result.location == '/usr/bin/make'

    def test_results_are_independent(self, counted):
        dep, _ = counted
        first = dep.check()
        second = dep.check()
        assert first is not second
        first.not_found()
        assert second.is_found
        assert second.location == '/usr/bin/make'

    def test_checker_that_marks_nothing_is_not_found(self):
        dep = Dependency(lambda d: d.define_checker(lambda result: None))
        assert not dep.check().is_found

    def test_no_checker_is_not_found(self):
        dep = Dependency(lambda d: setattr(d, 'name', 'Nothing'))
        assert not dep.check().is_found

    def test_define_checker_as_decorator(self):
        def init(dep):
            dep.name = "Git"

            @dep.define_checker
            def checker(result):
                result.found()

        result = Dependency(init).check()
        assert result.is_found
        assert result.location is None
