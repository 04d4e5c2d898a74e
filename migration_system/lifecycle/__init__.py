"""
Lifecycle Module

Orchestration of the migrate / test / rollback protocol.
"""

from .controller import MigrationLifecycleController, SuiteRunner
from .run_record import (
    LifecycleRun,
    LifecycleState,
    TestOutcome,
    migration_output,
)

__all__ = [
    "MigrationLifecycleController",
    "SuiteRunner",
    "LifecycleRun",
    "LifecycleState",
    "TestOutcome",
    "migration_output",
]
