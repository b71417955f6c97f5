"""
rubystrap core utilities
Logging setup and external command execution
"""

from rubystrap.core.commands import CommandRunner
from rubystrap.core.logging import setup_logging

__all__ = ['CommandRunner', 'setup_logging']
