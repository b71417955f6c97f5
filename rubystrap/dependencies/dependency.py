#!/usr/bin/env python3
"""
rubystrap Dependency Model
A piece of required system software: how to detect it and how to install it
"""

from enum import Enum
from typing import Callable, Optional


class ResultState(Enum):
    """Outcome of a single presence check"""
    NOT_FOUND = "not_found"
    FOUND = "found"          # present, location unknown
    FOUND_AT = "found_at"    # present at a known path


class CheckResult:
    """
    Filled in by a dependency's checker routine.

    A checker calls exactly one of ``found()`` or ``not_found()``; a result
    nobody touched stays NOT_FOUND.
    """

    def __init__(self):
        self.state = ResultState.NOT_FOUND
        self._location: Optional[str] = None

    def found(self, location: Optional[str] = None) -> None:
        """Mark the dependency present, optionally at ``location``"""
        if location is None:
            self.state = ResultState.FOUND
            self._location = None
        else:
            self.state = ResultState.FOUND_AT
            self._location = str(location)

    def not_found(self) -> None:
        self.state = ResultState.NOT_FOUND
        self._location = None

    @property
    def is_found(self) -> bool:
        return self.state != ResultState.NOT_FOUND

    @property
    def location(self) -> Optional[str]:
        """Path where the dependency was found; None unless state is FOUND_AT"""
        if self.state == ResultState.FOUND_AT:
            return self._location
        return None

    def __repr__(self) -> str:
        if self.state == ResultState.FOUND_AT:
            return f"CheckResult(found_at={self._location!r})"
        return f"CheckResult({self.state.value})"


Checker = Callable[[CheckResult], None]


def _deferred(attr: str) -> property:
    """Property that runs the owner's init routine before reading ``attr``"""
    private = '_' + attr

    def getter(self):
        self._ensure_initialized()
        return getattr(self, private)

    def setter(self, value):
        setattr(self, private, value)

    return property(getter, setter)


class Dependency:
    """
    Software the installer requires, e.g. a C compiler or OpenSSL headers.

    The constructor takes an init routine that receives the dependency and
    fills in its platform-specific fields and checker. The routine runs at most
    once: on the first field read or the first ``check()``. Assigning fields
    (which is what the init routine does) never triggers it.

    Example:
        def init(dep):
            dep.name = "The 'make' tool"
            dep.website = "http://www.gnu.org/software/make/"
            dep.define_checker(lambda result: result.found('/usr/bin/make'))

        make = Dependency(init)
        make.check().is_found
    """

    FIELDS = (
        'name',
        'install_command',
        'install_instructions',
        'install_comments',
        'website',
        'website_comments',
        'provides',
    )

    name = _deferred('name')
    install_command = _deferred('install_command')
    install_instructions = _deferred('install_instructions')
    install_comments = _deferred('install_comments')
    website = _deferred('website')
    website_comments = _deferred('website_comments')
    provides = _deferred('provides')

    def __init__(self, init: Callable[['Dependency'], None]):
        self._init: Optional[Callable[['Dependency'], None]] = init
        self._initialized = False
        self._checker: Optional[Checker] = None
        for attr in self.FIELDS:
            setattr(self, '_' + attr, None)

    @property
    def initialized(self) -> bool:
        return self._initialized

    def define_checker(self, checker: Checker) -> Checker:
        """Set the presence checker; usable as a decorator inside the init routine"""
        self._checker = checker
        return checker

    def check(self) -> CheckResult:
        """
        Run the checker against a fresh result

        Returns:
            The populated CheckResult (NOT_FOUND if no checker is defined)
        """
        self._ensure_initialized()
        result = CheckResult()
        if self._checker is not None:
            self._checker(result)
        return result

    def _ensure_initialized(self) -> None:
        # Clear the reference first so reads from inside the routine don't recurse
        if self._init is not None:
            init = self._init
            self._init = None
            self._initialized = True
            init(self)

    def __repr__(self) -> str:
        if self._initialized:
            return f"Dependency({self._name!r})"
        return "Dependency(<uninitialized>)"
