#!/usr/bin/env python3
"""
rubystrap Configuration Management
Handles .rubystrap.yml configuration files
"""

import logging
import yaml
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field

from rubystrap import ConfigError
from rubystrap.installer.rbenv import DEFAULT_GEMS, RBENV_REPOSITORY, RUBY_BUILD_REPOSITORY

logger = logging.getLogger(__name__)

DEFAULT_RUBY_VERSION = "3.3.6"
VERSION_FILE_NAME = "VERSION"
LOG_LEVELS = ('error', 'warning', 'info', 'debug')


def read_version_file(directory: Optional[Path] = None) -> str:
    """Contents of the VERSION file in ``directory`` (default: cwd), '' if unreadable"""
    path = (directory or Path.cwd()) / VERSION_FILE_NAME
    try:
        return path.read_text().strip()
    except (IOError, OSError):
        return ''


@dataclass
class RubystrapConfig:
    """rubystrap configuration structure"""

    # Empty = VERSION file in the working directory, else DEFAULT_RUBY_VERSION
    ruby_version: str = ""

    rbenv_root: str = "~/.rbenv"
    rbenv_repository: str = RBENV_REPOSITORY
    ruby_build_repository: str = RUBY_BUILD_REPOSITORY
    gems: List[str] = field(default_factory=lambda: list(DEFAULT_GEMS))

    # Attempts for network-bound commands (git clone, gem install)
    command_retries: int = 1

    # Wait for Enter between screens
    interactive: bool = True

    log_level: str = "warning"

    def resolve_ruby_version(self, directory: Optional[Path] = None) -> str:
        return self.ruby_version or read_version_file(directory) or DEFAULT_RUBY_VERSION

    def validate(self) -> None:
        """Raise ConfigError for values that can't work"""
        if not self.rbenv_root:
            raise ConfigError("rbenv_root must not be empty")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")
        if not isinstance(self.gems, list) or any(not isinstance(name, str) or not name for name in self.gems):
            raise ConfigError("gems must be a list of gem names")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RubystrapConfig':
        """Create config from dictionary"""
        config = cls()

        ruby = data.get('ruby', {}) or {}
        config.ruby_version = str(ruby.get('version', config.ruby_version) or '')
        gems = ruby.get('gems', config.gems) or []
        if not isinstance(gems, list):
            raise ConfigError(f"ruby.gems must be a list of gem names, got {gems!r}")
        config.gems = list(gems)

        rbenv = data.get('rbenv', {}) or {}
        config.rbenv_root = rbenv.get('root', config.rbenv_root)
        config.rbenv_repository = rbenv.get('repository', config.rbenv_repository)
        config.ruby_build_repository = rbenv.get('ruby_build_repository', config.ruby_build_repository)

        retry_count = data.get('command_retries', config.command_retries)
        try:
            config.command_retries = max(1, int(retry_count))
        except (TypeError, ValueError):
            config.command_retries = 1

        config.interactive = bool(data.get('interactive', config.interactive))
        config.log_level = str(data.get('log_level', config.log_level)).lower()

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for YAML export"""
        return {
            'ruby': {
                'version': self.ruby_version,
                'gems': self.gems,
            },
            'rbenv': {
                'root': self.rbenv_root,
                'repository': self.rbenv_repository,
                'ruby_build_repository': self.ruby_build_repository,
            },
            'command_retries': self.command_retries,
            'interactive': self.interactive,
            'log_level': self.log_level,
        }


class ConfigManager:
    """Manage rubystrap configuration files"""

    DEFAULT_CONFIG_NAME = ".rubystrap.yml"

    @staticmethod
    def find_config(start_path: Path = None) -> Optional[Path]:
        """
        Find .rubystrap.yml by walking up directory tree

        Args:
            start_path: Starting directory (default: current directory)

        Returns:
            Path to .rubystrap.yml or None if not found
        """
        current = (start_path or Path.cwd()).resolve()

        while True:
            config_file = current / ConfigManager.DEFAULT_CONFIG_NAME
            if config_file.exists():
                return config_file
            if current == current.parent:
                return None
            current = current.parent

    @staticmethod
    def load_config(config_path: Path = None) -> RubystrapConfig:
        """
        Load configuration from .rubystrap.yml

        Args:
            config_path: Path to config file (default: search from current dir)

        Returns:
            RubystrapConfig object; defaults if the file is missing or unusable
        """
        if config_path is None:
            config_path = ConfigManager.find_config()

        if config_path is None or not config_path.exists():
            return RubystrapConfig()

        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f)

            if data is None:
                return RubystrapConfig()
            if not isinstance(data, dict):
                raise ConfigError("top level must be a mapping")

            config = RubystrapConfig.from_dict(data)
            config.validate()
            return config

        except (yaml.YAMLError, ConfigError, OSError, AttributeError) as e:
            logger.warning("Failed to load config from %s: %s", config_path, e)
            return RubystrapConfig()

    @staticmethod
    def save_config(config: RubystrapConfig, config_path: Path) -> bool:
        """
        Save configuration to .rubystrap.yml

        Returns:
            True if successful
        """
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(config_path, 'w') as f:
                yaml.dump(
                    config.to_dict(),
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    indent=2
                )

            return True

        except (IOError, OSError, yaml.YAMLError) as e:
            logger.error("Failed to save config to %s: %s", config_path, e)
            return False

    @staticmethod
    def create_default_config(project_root: Path) -> Path:
        """
        Create default .rubystrap.yml in project root

        Returns:
            Path to created config file
        """
        config = RubystrapConfig()
        config_path = project_root / ConfigManager.DEFAULT_CONFIG_NAME

        ConfigManager.save_config(config, config_path)

        return config_path
