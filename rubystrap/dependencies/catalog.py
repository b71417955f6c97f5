#!/usr/bin/env python3
"""
rubystrap Dependency Catalog
Everything that must be installed before Ruby can be built
"""

from typing import Callable, Dict, List, Optional, Sequence

from rubystrap.core.commands import CommandRunner
from rubystrap.dependencies.dependency import CheckResult, Dependency
from rubystrap.dependencies.probes import header_available
from rubystrap.platform.detector import EnvironmentFacts, LinuxDistribution

APPLE_COMPILER_INSTALL_INSTRUCTIONS = (
    "Please install OS X GCC-4.2 by running: "
    "brew tap homebrew/dupes; brew install apple-gcc42"
)

DEBIAN_FAMILY = (LinuxDistribution.UBUNTU, LinuxDistribution.DEBIAN)
REDHAT_FAMILY = (LinuxDistribution.RHEL, LinuxDistribution.FEDORA, LinuxDistribution.CENTOS)


def _linux_install_command(facts: EnvironmentFacts, apt: Optional[str] = None,
                           yum: Optional[str] = None, emerge: Optional[str] = None) -> Optional[str]:
    """Pick the package-manager command for the detected distribution"""
    distro = facts.linux_distribution
    if distro in DEBIAN_FAMILY and apt:
        return f"apt-get install {apt}"
    if distro in REDHAT_FAMILY and yum:
        return f"yum install {yum}"
    if distro == LinuxDistribution.GENTOO and emerge:
        return f"emerge -av {emerge}"
    return None


def _path_checker(path: Optional[str]) -> Callable[[CheckResult], None]:
    def checker(result: CheckResult) -> None:
        if path:
            result.found(path)
        else:
            result.not_found()
    return checker


def _executable_checker(facts: EnvironmentFacts, name: str) -> Callable[[CheckResult], None]:
    def checker(result: CheckResult) -> None:
        _path_checker(facts.find_executable(name))(result)
    return checker


def _header_checker(facts: EnvironmentFacts, runner: CommandRunner,
                    source_lines: Sequence[str]) -> Callable[[CheckResult], None]:
    def checker(result: CheckResult) -> None:
        if header_available(source_lines, facts, runner):
            result.found()
        else:
            result.not_found()
    return checker


def git(facts: EnvironmentFacts, runner: CommandRunner) -> Dependency:
    def init(dep: Dependency) -> None:
        dep.name = "Git version control system"
        dep.provides = "git"
        dep.define_checker(_executable_checker(facts, 'git'))
        if facts.is_linux:
            dep.install_command = _linux_install_command(facts, apt='git-core', yum='git-core', emerge='git')
        elif facts.is_macos:
            dep.install_instructions = "brew install git"
        dep.website = "http://git-scm.com/"
    return Dependency(init)


def c_compiler(facts: EnvironmentFacts, runner: CommandRunner) -> Dependency:
    def init(dep: Dependency) -> None:
        dep.name = "Non-broken C compiler"
        dep.provides = "cc"
        dep.define_checker(_path_checker(facts.compiler_c))
        if facts.is_linux:
            dep.install_command = _linux_install_command(
                facts, apt='build-essential', yum='gcc-c++', emerge='gcc')
        elif facts.is_macos:
            dep.install_instructions = APPLE_COMPILER_INSTALL_INSTRUCTIONS
        dep.website = "http://gcc.gnu.org/"
    return Dependency(init)


def cxx_compiler(facts: EnvironmentFacts, runner: CommandRunner) -> Dependency:
    def init(dep: Dependency) -> None:
        dep.name = "Non-broken C++ compiler"
        dep.provides = "c++"
        dep.define_checker(_path_checker(facts.compiler_cxx))
        if facts.is_linux:
            dep.install_command = _linux_install_command(
                facts, apt='build-essential', yum='gcc-c++', emerge='gcc')
        elif facts.is_macos:
            dep.install_instructions = APPLE_COMPILER_INSTALL_INSTRUCTIONS
        dep.website = "http://gcc.gnu.org/"
    return Dependency(init)


def make(facts: EnvironmentFacts, runner: CommandRunner) -> Dependency:
    def init(dep: Dependency) -> None:
        dep.name = "The 'make' tool"
        dep.provides = "make"
        dep.define_checker(_executable_checker(facts, 'make'))
        if facts.is_linux:
            dep.install_command = _linux_install_command(facts, apt='build-essential', yum='make')
        elif facts.is_macos:
            dep.install_instructions = (
                "Please install the Apple Development Tools: http://developer.apple.com/tools/"
            )
        dep.website = "http://www.gnu.org/software/make/"
    return Dependency(init)


def patch(facts: EnvironmentFacts, runner: CommandRunner) -> Dependency:
    def init(dep: Dependency) -> None:
        dep.name = "The 'patch' tool"
        dep.provides = "patch"
        dep.define_checker(_executable_checker(facts, 'patch'))
        if facts.is_linux:
            dep.install_command = _linux_install_command(facts, apt='patch', yum='patch')
        dep.website = "http://www.gnu.org/software/diffutils/"
    return Dependency(init)


def zlib_dev(facts: EnvironmentFacts, runner: CommandRunner) -> Dependency:
    def init(dep: Dependency) -> None:
        dep.name = "Zlib development headers"
        dep.provides = "zlib.h"
        dep.define_checker(_header_checker(facts, runner, ["#include <zlib.h>"]))
        if facts.is_linux:
            dep.install_command = _linux_install_command(facts, apt='zlib1g-dev', yum='zlib-devel')
        dep.website = "http://www.zlib.net/"
    return Dependency(init)


def openssl_dev(facts: EnvironmentFacts, runner: CommandRunner) -> Dependency:
    def init(dep: Dependency) -> None:
        dep.name = "OpenSSL development headers"
        dep.provides = "openssl/ssl.h"
        dep.define_checker(_header_checker(facts, runner, ["#include <openssl/ssl.h>"]))
        if facts.is_linux:
            dep.install_command = _linux_install_command(facts, apt='libssl-dev', yum='openssl-devel')
        dep.website = "http://www.openssl.org/"
    return Dependency(init)


def readline_dev(facts: EnvironmentFacts, runner: CommandRunner) -> Dependency:
    def init(dep: Dependency) -> None:
        dep.name = "GNU Readline development headers"
        dep.provides = "readline/readline.h"
        # readline.h doesn't compile on OS X without stdio.h first
        dep.define_checker(_header_checker(
            facts, runner, ["#include <stdio.h>", "#include <readline/readline.h>"]))
        if facts.is_linux:
            dep.install_command = _linux_install_command(facts, apt='libreadline-dev', yum='readline-devel')
        dep.website = "http://cnswww.cns.cwru.edu/php/chet/readline/rltop.html"
    return Dependency(init)


# Presentation order only; no entry depends on another's outcome
REQUIRED_DEPENDENCIES: List[Callable[[EnvironmentFacts, CommandRunner], Dependency]] = [
    git,
    c_compiler,
    cxx_compiler,
    make,
    patch,
    zlib_dev,
    openssl_dev,
    readline_dev,
]


def build_catalog(facts: EnvironmentFacts, runner: Optional[CommandRunner] = None) -> List[Dependency]:
    """
    Build the required-software catalog for this platform

    Args:
        facts: Detected environment facts
        runner: Runner used by compile probes (default: silent CommandRunner)

    Returns:
        Dependencies in presentation order. Nothing is initialized or
        checked until a field is read or check() is called.
    """
    runner = runner or CommandRunner()
    return [factory(facts, runner) for factory in REQUIRED_DEPENDENCIES]


def catalog_by_provides(catalog: Sequence[Dependency]) -> Dict[str, Dependency]:
    """Index a catalog by the capability each dependency provides"""
    return {dep.provides: dep for dep in catalog if dep.provides}
