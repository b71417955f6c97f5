"""
rubystrap - rbenv & Ruby installer
Checks for required system software, then installs rbenv, ruby-build, Ruby and a few gems.
"""

__version__ = "0.4.2"
__author__ = "rubystrap contributors"
__license__ = "MIT"


class RubystrapError(Exception):
    """Base class for rubystrap errors"""


class ConfigError(RubystrapError):
    """Invalid configuration value"""


__all__ = ["__version__", "RubystrapError", "ConfigError"]
