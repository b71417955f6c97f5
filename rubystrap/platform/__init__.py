"""
rubystrap Platform Detection
OS, compiler and Linux distribution detection
"""

from rubystrap.platform.detector import (
    PlatformDetector,
    EnvironmentFacts,
    OSType,
    LinuxDistribution,
    find_executable,
    detect_environment,
)

__all__ = [
    'PlatformDetector',
    'EnvironmentFacts',
    'OSType',
    'LinuxDistribution',
    'find_executable',
    'detect_environment',
]
