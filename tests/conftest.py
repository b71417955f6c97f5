"""
Shared fixtures for rubystrap tests
"""
import stat
from pathlib import Path
from typing import List, Optional

import pytest

from rubystrap.platform.detector import EnvironmentFacts, LinuxDistribution, OSType


def make_executable(directory: Path, name: str) -> Path:
    path = directory / name
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class FakeRunner:
    """CommandRunner stand-in that records commands and returns scripted results"""

    def __init__(self, fail_when=None):
        self.commands: List[List[str]] = []
        self.fail_when = fail_when or (lambda cmd: False)

    def run(self, cmd, cwd=None, quiet=False) -> bool:
        self.commands.append(list(cmd))
        return not self.fail_when(cmd)

    def run_with_retries(self, cmd, cwd=None) -> bool:
        return self.run(cmd, cwd=cwd)

    def capture(self, cmd) -> Optional[str]:
        self.commands.append(list(cmd))
        return ''


@pytest.fixture
def bin_dir(tmp_path):
    """Empty directory to put fake executables in"""
    directory = tmp_path / "bin"
    directory.mkdir()
    return directory


@pytest.fixture
def linux_facts():
    """Facts for an Ubuntu host with gcc/g++ found"""
    def _create(distro=LinuxDistribution.UBUNTU, search_path=(), cc='/usr/bin/gcc', cxx='/usr/bin/g++'):
        return EnvironmentFacts(
            os_type=OSType.LINUX,
            platform='linux',
            compiler_c=cc,
            compiler_cxx=cxx,
            library_extension='so',
            native_extension_suffix='so',
            linux_distribution=distro,
            search_path=tuple(str(p) for p in search_path),
        )
    return _create
