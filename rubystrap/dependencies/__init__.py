"""
rubystrap Dependencies
Required-software descriptors, presence checks and the catalog
"""

from rubystrap.dependencies.dependency import CheckResult, Dependency, ResultState
from rubystrap.dependencies.catalog import build_catalog, REQUIRED_DEPENDENCIES

__all__ = [
    'CheckResult',
    'Dependency',
    'ResultState',
    'build_catalog',
    'REQUIRED_DEPENDENCIES',
]
