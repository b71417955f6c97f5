#!/usr/bin/env python3
"""
rubystrap Platform Detection
Detects operating system, C/C++ compilers, library extensions and Linux distribution
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Tuple

from rubystrap.core.commands import CommandRunner

logger = logging.getLogger(__name__)


class OSType(Enum):
    """Operating system types"""
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


class LinuxDistribution(Enum):
    """Linux distributions that get tailored install commands"""
    UBUNTU = "ubuntu"
    DEBIAN = "debian"
    RHEL = "rhel"
    FEDORA = "fedora"
    CENTOS = "centos"
    SUSE = "suse"
    GENTOO = "gentoo"
    UNKNOWN = "unknown"


# Ranked candidates; the first one found on PATH wins
C_COMPILERS = ('gcc', 'cc')
CXX_COMPILERS = ('g++', 'c++')

# Apple ships llvm-gcc as /usr/bin/gcc since Xcode 4 and it miscompiles Ruby.
BROKEN_COMPILER_MARKER = 'llvm'
ALTERNATE_COMPILERS = {
    'gcc': 'gcc-4.2',
    'g++': 'g++-4.2',
}


def _os_type(platform_name: str) -> OSType:
    if platform_name.startswith('linux'):
        return OSType.LINUX
    elif platform_name.startswith('darwin'):
        return OSType.MACOS
    elif platform_name.startswith(('win32', 'cygwin', 'msys')):
        return OSType.WINDOWS
    return OSType.UNKNOWN


def find_executable(name: str, search_path: Optional[str] = None) -> Optional[str]:
    """
    Find an executable on the search path without shelling out to ``which``.

    Args:
        name: Executable name
        search_path: PATH-style string (default: the process's PATH)

    Returns:
        Absolute path of the first regular, executable file found, or None
    """
    if search_path is None:
        search_path = os.environ.get('PATH', '')

    for directory in search_path.split(os.pathsep):
        if not directory:
            continue
        candidate = os.path.join(directory, name)
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return os.path.abspath(candidate)
    return None


def _compiler_version(path: str) -> str:
    """Output of ``<path> --version``, empty if it can't be run"""
    return CommandRunner().capture([path, '--version']) or ''


@dataclass(frozen=True)
class EnvironmentFacts:
    """Platform and toolchain facts, computed once per process"""
    os_type: OSType
    platform: str
    compiler_c: Optional[str]
    compiler_cxx: Optional[str]
    library_extension: str
    native_extension_suffix: str
    linux_distribution: Optional[LinuxDistribution]
    cflags: str = ''
    home: str = ''
    shell: str = ''
    search_path: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_linux(self) -> bool:
        return self.os_type == OSType.LINUX

    @property
    def is_macos(self) -> bool:
        return self.os_type == OSType.MACOS

    @property
    def path_string(self) -> str:
        return os.pathsep.join(self.search_path)

    def find_executable(self, name: str) -> Optional[str]:
        """find_executable() against the PATH captured at detection time"""
        return find_executable(name, self.path_string)

    def to_dict(self) -> Dict:
        """Convert to dictionary for display"""
        return {
            'os_type': self.os_type.value,
            'platform': self.platform,
            'compiler_c': self.compiler_c,
            'compiler_cxx': self.compiler_cxx,
            'library_extension': self.library_extension,
            'native_extension_suffix': self.native_extension_suffix,
            'linux_distribution': self.linux_distribution.value if self.linux_distribution else None,
            'cflags': self.cflags,
            'home': self.home,
            'shell': self.shell,
        }


class PlatformDetector:
    """
    Detect platform details: OS, compilers, library conventions, Linux distribution

    All inputs are injectable so detection can run against a fake host:
    ``environ`` replaces os.environ, ``platform_name`` replaces sys.platform,
    ``root`` is prepended to the /etc release files and ``version_probe``
    returns a compiler's ``--version`` output.
    """

    def __init__(self,
                 environ: Optional[Mapping[str, str]] = None,
                 platform_name: Optional[str] = None,
                 root: str = '/',
                 version_probe: Optional[Callable[[str], str]] = None,
                 system_bin_dir: str = '/usr/bin'):
        self.environ = dict(os.environ) if environ is None else dict(environ)
        self.platform_name = platform_name or sys.platform
        self.root = Path(root)
        self.version_probe = version_probe or _compiler_version
        self.system_bin_dir = system_bin_dir
        self.os_type = _os_type(self.platform_name)
        self.info: Optional[EnvironmentFacts] = None

    def detect(self) -> EnvironmentFacts:
        """
        Perform full platform detection

        Returns:
            EnvironmentFacts with all detected details
        """
        self.info = EnvironmentFacts(
            os_type=self.os_type,
            platform=self.platform_name,
            compiler_c=self.detect_c_compiler(),
            compiler_cxx=self.detect_cxx_compiler(),
            library_extension=self._library_extension(),
            native_extension_suffix=self._native_extension_suffix(),
            linux_distribution=self.detect_linux_distribution(),
            cflags=self.environ.get('CFLAGS', ''),
            home=self.environ.get('HOME', ''),
            shell=self.environ.get('SHELL', ''),
            search_path=tuple(d for d in self._search_path().split(os.pathsep) if d),
        )
        logger.debug("detected platform facts: %s", self.info.to_dict())
        return self.info

    def _search_path(self) -> str:
        return self.environ.get('PATH', '')

    def _env_defined(self, name: str) -> bool:
        return bool(self.environ.get(name))

    def find_executable(self, name: str) -> Optional[str]:
        return find_executable(name, self._search_path())

    # Compilers

    def detect_c_compiler(self) -> Optional[str]:
        """C compiler: $CC, else gcc/cc from PATH, avoiding Apple's llvm-gcc"""
        return self._detect_compiler('CC', C_COMPILERS)

    def detect_cxx_compiler(self) -> Optional[str]:
        """C++ compiler: $CXX, else g++/c++ from PATH, avoiding Apple's llvm-g++"""
        return self._detect_compiler('CXX', CXX_COMPILERS)

    def _detect_compiler(self, override: str, candidates: Tuple[str, ...]) -> Optional[str]:
        result = None
        if self._env_defined(override):
            result = self.environ[override]
        else:
            for name in candidates:
                result = self.find_executable(name)
                if result:
                    break

        if result and self.is_broken_compiler(result):
            alternate = ALTERNATE_COMPILERS[os.path.basename(result)]
            logger.info("%s is a known-broken llvm-gcc build, looking for %s instead", result, alternate)
            result = self.find_executable(alternate)
        return result

    def is_broken_compiler(self, path: str) -> bool:
        """
        Check whether ``path`` is Apple's default llvm-gcc / llvm-g++

        Only the system-default gcc and g++ on macOS are inspected.
        """
        if self.os_type != OSType.MACOS:
            return False
        defaults = [os.path.join(self.system_bin_dir, name) for name in ALTERNATE_COMPILERS]
        if path not in defaults:
            return False
        return BROKEN_COMPILER_MARKER in self.version_probe(path)

    # Library conventions

    def _library_extension(self) -> str:
        return 'dylib' if self.os_type == OSType.MACOS else 'so'

    def _native_extension_suffix(self) -> str:
        return 'bundle' if self.os_type == OSType.MACOS else 'so'

    # Linux distribution

    def _release_file(self, name: str) -> Path:
        return self.root / 'etc' / name

    def _read_release_file(self, name: str) -> str:
        try:
            return self._release_file(name).read_text(errors='replace')
        except (IOError, OSError):
            return ''

    def _has_release_file(self, name: str) -> bool:
        try:
            return self._release_file(name).exists()
        except OSError:
            return False

    def detect_linux_distribution(self) -> Optional[LinuxDistribution]:
        """
        Fingerprint the Linux distribution from /etc release files

        Returns:
            LinuxDistribution, or None when the host is not Linux
        """
        if self.os_type != OSType.LINUX:
            return None

        if 'Ubuntu' in self._read_release_file('lsb-release'):
            return LinuxDistribution.UBUNTU
        elif self._has_release_file('debian_version'):
            return LinuxDistribution.DEBIAN
        elif self._has_release_file('redhat-release'):
            redhat_release = self._read_release_file('redhat-release')
            if 'CentOS' in redhat_release:
                return LinuxDistribution.CENTOS
            elif 'Fedora' in redhat_release:
                return LinuxDistribution.FEDORA
            # e.g. "Red Hat Enterprise Linux Server release 5.1 (Tikanga)"
            return LinuxDistribution.RHEL
        elif self._has_release_file('suse-release'):
            return LinuxDistribution.SUSE
        elif self._has_release_file('gentoo-release'):
            return LinuxDistribution.GENTOO
        return LinuxDistribution.UNKNOWN


def detect_environment(**kwargs) -> EnvironmentFacts:
    """Run a fresh PlatformDetector and return its facts"""
    return PlatformDetector(**kwargs).detect()


__all__ = [
    'OSType',
    'LinuxDistribution',
    'EnvironmentFacts',
    'PlatformDetector',
    'find_executable',
    'detect_environment',
]
