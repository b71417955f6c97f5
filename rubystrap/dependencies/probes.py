#!/usr/bin/env python3
"""
rubystrap Header Probes
Test whether development headers are installed by compiling a throwaway file
"""

import logging
import os
import shlex
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Iterable, Optional

from rubystrap.core.commands import CommandRunner
from rubystrap.platform.detector import EnvironmentFacts

logger = logging.getLogger(__name__)

PROBE_SOURCE_NAME = 'rubystrap-check.c'
PROBE_OBJECT_NAME = 'rubystrap-check.o'


def probe_directory() -> Path:
    return Path(tempfile.gettempdir())


def header_available(source_lines: Iterable[str], facts: EnvironmentFacts,
                     runner: Optional[CommandRunner] = None,
                     directory: Optional[Path] = None) -> bool:
    """
    Compile ``source_lines`` with the detected C compiler.

    The probe source and object files live at a fixed path in the temp
    directory and are always removed, whatever the compile does.

    Args:
        source_lines: Lines of C source, typically #include directives
        facts: Environment facts (compiler and CFLAGS)
        runner: Command runner (default: a silent CommandRunner)
        directory: Where to write the probe (default: system temp dir)

    Returns:
        True if the compile succeeded. A compiler that can't be launched
        counts as a failed compile.
    """
    lines = list(source_lines)
    runner = runner or CommandRunner()
    directory = directory or probe_directory()
    source = directory / PROBE_SOURCE_NAME
    obj = directory / PROBE_OBJECT_NAME

    cmd = shlex.split(facts.compiler_c or 'gcc')
    cmd.extend(shlex.split(facts.cflags or ''))
    cmd.extend(['-c', PROBE_SOURCE_NAME])

    try:
        with open(source, 'w') as f:
            for line in lines:
                f.write(line + '\n')
        available = runner.run(cmd, cwd=directory, quiet=True)
        logger.debug("header probe %s: %s", lines, 'ok' if available else 'failed')
        return available
    except OSError as e:
        logger.debug("header probe could not run: %s", e)
        return False
    finally:
        for artifact in (source, obj):
            with suppress(OSError):
                os.unlink(artifact)
