"""
Lifecycle Run Record

Transient state of one migrate/test/rollback run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..migrations.models import NO_BASELINE


class LifecycleState(Enum):
    """States of the migration lifecycle."""

    IDLE = "idle"
    BASELINE_CAPTURED = "baseline_captured"
    APPLIED = "applied"
    TESTS_RUN = "tests_run"
    COMPLETED = "completed"
    ROLLED_BACK = "rolled_back"
    ROLLBACK_FAILED = "rollback_failed"
    FAILED = "failed"


class TestOutcome(Enum):
    """Result of the test step."""

    __test__ = False

    NOT_RUN = "not_run"
    PASSED = "passed"
    FAILED = "failed"


TERMINAL_STATES = {
    LifecycleState.COMPLETED,
    LifecycleState.ROLLED_BACK,
    LifecycleState.ROLLBACK_FAILED,
    LifecycleState.FAILED,
}

ALLOWED_TRANSITIONS = {
    LifecycleState.IDLE: {
        LifecycleState.BASELINE_CAPTURED,
        LifecycleState.COMPLETED,
        LifecycleState.FAILED,
    },
    LifecycleState.BASELINE_CAPTURED: {LifecycleState.APPLIED, LifecycleState.FAILED},
    LifecycleState.APPLIED: {LifecycleState.TESTS_RUN, LifecycleState.FAILED},
    LifecycleState.TESTS_RUN: {
        LifecycleState.COMPLETED,
        LifecycleState.ROLLED_BACK,
        LifecycleState.ROLLBACK_FAILED,
    },
}


def migration_output(name: Optional[str]) -> str:
    """Render a migration name for step outputs; the no-migration sentinel is empty."""
    if not name or name == NO_BASELINE:
        return ""
    return name


@dataclass
class LifecycleRun:
    """Record of a single controller invocation; never persisted."""

    baseline: str = NO_BASELINE
    applied: Optional[str] = None
    test_outcome: TestOutcome = TestOutcome.NOT_RUN
    rolled_back: bool = False
    state: LifecycleState = LifecycleState.IDLE
    error: Optional[Exception] = None
    rollback_error: Optional[Exception] = None
    test_result_file: Optional[str] = None
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    history: List[LifecycleState] = field(default_factory=list)

    def __post_init__(self):
        if not self.history:
            self.history.append(self.state)

    @property
    def is_finished(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def succeeded(self) -> bool:
        return self.state == LifecycleState.COMPLETED and self.error is None

    @property
    def new_migration(self) -> str:
        """The newly applied migration, or an empty string."""
        return migration_output(self.applied)

    def transition(self, new_state: LifecycleState) -> None:
        allowed = ALLOWED_TRANSITIONS.get(self.state, set())
        if new_state not in allowed:
            raise RuntimeError(
                f"Invalid lifecycle transition: {self.state.value} -> {new_state.value}"
            )

        self.state = new_state
        self.history.append(new_state)
        if new_state in TERMINAL_STATES:
            self.finished_at = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "baseline": self.baseline,
            "applied": self.applied,
            "test_outcome": self.test_outcome.value,
            "rolled_back": self.rolled_back,
            "state": self.state.value,
            "error": str(self.error) if self.error else None,
            "rollback_error": str(self.rollback_error) if self.rollback_error else None,
            "test_result_file": self.test_result_file,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "history": [state.value for state in self.history],
        }
