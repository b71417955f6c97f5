#!/usr/bin/env python3
"""
rubystrap External Commands
Runs git, compiler, rbenv and gem processes and reports success or failure
"""

import logging
import shlex
import subprocess
import time
from pathlib import Path
from typing import Callable, List, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class CommandRunner:
    """
    Launch external commands synchronously.

    Every failure mode (non-zero exit, missing executable, OS error) is
    reported as ``False``; callers never see process exceptions.
    """

    def __init__(self, retries: int = 1, echo: Optional[Callable[[str], None]] = None,
                 retry_delay: float = 1.0):
        """
        Args:
            retries: Attempts made by run_with_retries (min 1)
            echo: Called with the command line before it runs (None = silent)
            retry_delay: Seconds to wait between attempts
        """
        self.retries = max(1, int(retries))
        self.echo = echo
        self.retry_delay = retry_delay

    def run(self, cmd: List[str], cwd: Optional[PathLike] = None, quiet: bool = False) -> bool:
        """
        Run a command and wait for it.

        Args:
            cmd: Command and arguments
            cwd: Working directory
            quiet: Discard stdout/stderr instead of passing them through

        Returns:
            True if the command exited with status 0
        """
        line = shlex.join(cmd)
        if self.echo is not None and not quiet:
            self.echo(line)
        logger.debug("running: %s (cwd=%s)", line, cwd)

        output = subprocess.DEVNULL if quiet else None
        try:
            result = subprocess.run(cmd, cwd=cwd, stdout=output, stderr=output, check=False)
        except (subprocess.SubprocessError, OSError) as e:
            logger.debug("could not launch %s: %s", cmd[0], e)
            return False

        if result.returncode != 0:
            logger.debug("%s exited with status %d", cmd[0], result.returncode)
        return result.returncode == 0

    def run_with_retries(self, cmd: List[str], cwd: Optional[PathLike] = None) -> bool:
        """
        Run a network-bound command, retrying up to ``retries`` times.

        Returns:
            True as soon as one attempt succeeds
        """
        for attempt in range(self.retries):
            if self.run(cmd, cwd=cwd):
                return True
            if attempt < self.retries - 1:
                logger.info("retrying %s (attempt %d of %d)", cmd[0], attempt + 2, self.retries)
                time.sleep(self.retry_delay)
        return False

    def capture(self, cmd: List[str]) -> Optional[str]:
        """
        Run a command and return its combined stdout/stderr text.

        Returns:
            Output text, or None if the command could not be launched
        """
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except (subprocess.SubprocessError, OSError) as e:
            logger.debug("could not launch %s: %s", cmd[0], e)
            return None
        return result.stdout or ''
