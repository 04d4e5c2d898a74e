"""
Migration System

Applies EF Core migrations in CI, runs the test suite against the migrated
database and rolls back to the last known-good migration when tests fail.
"""

from .config import ConfigurationManager, PipelineSettings
from .error_handling import MigrationSystemError
from .lifecycle import LifecycleRun, LifecycleState, MigrationLifecycleController
from .migrations import NO_BASELINE, MigrationSnapshot

__version__ = "1.0.0"

__all__ = [
    "ConfigurationManager",
    "PipelineSettings",
    "MigrationSystemError",
    "MigrationLifecycleController",
    "LifecycleRun",
    "LifecycleState",
    "MigrationSnapshot",
    "NO_BASELINE",
]
