#!/usr/bin/env python3
"""
rubystrap rbenv Steps
Install rbenv, ruby-build, a Ruby version and gems into the user's home
"""

import glob
import logging
import os
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from rubystrap.core.commands import CommandRunner
from rubystrap.installer.steps import Step, StepOutcome

logger = logging.getLogger(__name__)

RBENV_REPOSITORY = "https://github.com/rbenv/rbenv.git"
RUBY_BUILD_REPOSITORY = "https://github.com/rbenv/ruby-build.git"
DEFAULT_GEMS = ("rake", "bundler")


class RbenvSteps:
    """
    The installation steps, in order: rbenv, ruby-build, Ruby, gems.

    Every step checks for its target first and does nothing if it exists.
    """

    def __init__(self, rbenv_root: str, ruby_version: str,
                 runner: Optional[CommandRunner] = None,
                 gems: Sequence[str] = DEFAULT_GEMS,
                 rbenv_repository: str = RBENV_REPOSITORY,
                 ruby_build_repository: str = RUBY_BUILD_REPOSITORY,
                 announce: Optional[Callable[[str], None]] = None):
        """
        Args:
            rbenv_root: rbenv destination, e.g. ~/.rbenv (user-expanded)
            ruby_version: Ruby version passed to ``rbenv install``
            runner: Runs git, rbenv and gem
            gems: Gems to install into the new Ruby
            announce: Called with a short message before a step does real work
        """
        self.rbenv_root = Path(os.path.expanduser(rbenv_root))
        self.ruby_version = ruby_version
        self.runner = runner or CommandRunner()
        self.gems = list(gems)
        self.rbenv_repository = rbenv_repository
        self.ruby_build_repository = ruby_build_repository
        self.announce = announce or (lambda message: None)

    @property
    def plugins_dir(self) -> Path:
        return self.rbenv_root / 'plugins'

    @property
    def ruby_build_dir(self) -> Path:
        return self.plugins_dir / 'ruby-build'

    @property
    def rbenv_bin(self) -> Path:
        return self.rbenv_root / 'bin' / 'rbenv'

    @property
    def version_dir(self) -> Path:
        return self.rbenv_root / 'versions' / self.ruby_version

    @property
    def ruby_bin(self) -> Path:
        return self.version_dir / 'bin' / 'ruby'

    @property
    def gem_command(self) -> List[str]:
        return [str(self.ruby_bin), str(self.version_dir / 'bin' / 'gem')]

    def steps(self) -> List[Step]:
        return [
            Step('rbenv', self.install_rbenv),
            Step('ruby-build', self.install_ruby_build),
            Step(f'ruby-{self.ruby_version}', self.install_ruby),
            Step('gems', self.install_gems),
        ]

    def install_rbenv(self) -> StepOutcome:
        if self.rbenv_root.is_dir():
            return StepOutcome.satisfied(str(self.rbenv_root))

        self.announce(f"Installing rbenv to {self.rbenv_root}...")
        self.rbenv_root.parent.mkdir(parents=True, exist_ok=True)
        if not self.runner.run_with_retries(
                ['git', 'clone', self.rbenv_repository, self.rbenv_root.name],
                cwd=self.rbenv_root.parent):
            return StepOutcome.failure("Cannot install rbenv")
        return StepOutcome(succeeded=True, location=str(self.rbenv_root))

    def install_ruby_build(self) -> StepOutcome:
        if self.ruby_build_dir.is_dir():
            return StepOutcome.satisfied(str(self.ruby_build_dir))

        self.announce(f"Installing ruby-build to {self.plugins_dir}...")
        try:
            self.plugins_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("cannot create %s: %s", self.plugins_dir, e)
            return StepOutcome.failure("Cannot install ruby-build")
        if not self.runner.run_with_retries(
                ['git', 'clone', self.ruby_build_repository, 'ruby-build'],
                cwd=self.plugins_dir):
            return StepOutcome.failure("Cannot install ruby-build")
        return StepOutcome(succeeded=True, location=str(self.ruby_build_dir))

    def install_ruby(self) -> StepOutcome:
        if self.ruby_bin.exists():
            return StepOutcome.satisfied(str(self.ruby_bin))

        self.announce(f"Installing ruby-{self.ruby_version}...")
        if not self.runner.run([str(self.rbenv_bin), 'install', self.ruby_version]):
            return StepOutcome.failure(f"Cannot install ruby-{self.ruby_version}")
        return StepOutcome(succeeded=True, location=str(self.ruby_bin))

    def installed_gem_paths(self, gem_name: str) -> List[str]:
        pattern = str(self.version_dir / 'lib' / 'ruby' / 'gems' / '*' / 'gems' / f'{gem_name}-[0-9]*')
        return sorted(glob.glob(pattern))

    def retry_command(self, gem_name: str) -> str:
        return ' '.join(self.gem_command + ['install', gem_name])

    def install_gems(self) -> StepOutcome:
        """
        Install each missing gem independently.

        A failed gem doesn't stop the others; the step still succeeds and
        reports which gems need a manual retry. If refreshing the gem sources
        fails, no install is attempted and every gem counts as failed.
        """
        failed: List[str] = []
        sources_updated = False

        for gem_name in self.gems:
            paths = self.installed_gem_paths(gem_name)
            if paths:
                logger.info("%s found at %s", gem_name, paths[-1])
                continue

            self.announce(f"Installing {gem_name}...")
            if not sources_updated:
                sources_updated = self.runner.run_with_retries(self.gem_command + ['sources', '--update'])
                if not sources_updated:
                    logger.warning("could not update gem sources, skipping gem installation")
                    failed = list(self.gems)
                    break

            installed = self.runner.run_with_retries(
                self.gem_command + ['install', '-r', '--no-document', gem_name])
            if installed:
                installed = self.runner.run([str(self.rbenv_bin), 'rehash'])
            if not installed:
                failed.append(gem_name)

        return StepOutcome(
            succeeded=True,
            failed_packages=failed,
            retry_commands=[self.retry_command(name) for name in failed],
        )
