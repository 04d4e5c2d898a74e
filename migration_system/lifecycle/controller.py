"""
Migration Lifecycle Controller

Captures a baseline, applies pending migrations, runs the test suite and
rolls the database back to the baseline when the tests fail.
"""

import logging
from typing import Optional, Protocol

from ..config.settings import MigrationSettings
from ..error_handling import (
    ErrorCodes,
    ErrorContext,
    ErrorReporter,
    MigrationSystemError,
    TestExecutionFailed,
)
from ..migrations import (
    NO_BASELINE,
    MigrationApplier,
    MigrationInspector,
    MigrationReverter,
)
from ..suites.dotnet_suite import TestRunResult
from .run_record import LifecycleRun, LifecycleState, TestOutcome

logger = logging.getLogger(__name__)


class SuiteRunner(Protocol):
    """Anything that can run the test suite once."""

    def run_tests(self) -> TestRunResult: ...


class MigrationLifecycleController:
    """Owns the baseline / apply / conditional rollback protocol."""

    def __init__(
        self,
        inspector: MigrationInspector,
        applier: MigrationApplier,
        reverter: MigrationReverter,
        test_runner: SuiteRunner,
        error_reporter: ErrorReporter,
    ):
        self.inspector = inspector
        self.applier = applier
        self.reverter = reverter
        self.test_runner = test_runner
        self.error_reporter = error_reporter

    def run(self, settings: MigrationSettings) -> LifecycleRun:
        """Execute one lifecycle run.

        Returns the run record when the tests pass (or migrations are
        skipped). Otherwise re-raises the error that failed the run: the
        apply failure or the test failure. A rollback outcome is recorded
        on the run and never replaces that error.
        """
        run = self.migrate(settings)
        if run.is_finished:
            return run

        test_error = self._run_tests(run)
        run.transition(LifecycleState.TESTS_RUN)

        if test_error is None:
            run.transition(LifecycleState.COMPLETED)
            logger.info("Tests passed; migrations kept.")
            return run

        run.error = test_error
        if self._should_roll_back(run, settings):
            self._roll_back(run, _target(settings))
        else:
            logger.info(
                "Rollback skipped as no valid baseline migration was available "
                "or rollback on test failure is disabled."
            )
            run.transition(LifecycleState.COMPLETED)

        _attach_run(test_error, run)
        raise test_error

    def migrate(self, settings: MigrationSettings) -> LifecycleRun:
        """Capture the baseline, then apply pending migrations.

        The returned run is ``APPLIED``, or ``COMPLETED`` when migrations
        are skipped.
        """
        run = LifecycleRun()

        if not settings.run_migrations:
            logger.info("Skipping migrations as requested.")
            run.transition(LifecycleState.COMPLETED)
            return run

        target = _target(settings)

        # The baseline must be read before anything is applied.
        try:
            run.baseline = self.inspector.get_last_non_pending_migration(*target)
        except MigrationSystemError as e:
            self._fail(run, e)
            raise
        run.transition(LifecycleState.BASELINE_CAPTURED)
        logger.info(f"Baseline migration before new migrations: {run.baseline}")

        try:
            run.applied = self.applier.apply_pending(*target)
        except MigrationSystemError as e:
            self._fail(run, e)
            raise
        run.transition(LifecycleState.APPLIED)
        if run.new_migration:
            logger.info(f"New migration applied: {run.new_migration}")
        else:
            logger.info("No new migrations were applied.")
        return run

    def _run_tests(self, run: LifecycleRun) -> Optional[TestExecutionFailed]:
        """Run the suite and return the failure, if any."""
        try:
            result = self.test_runner.run_tests()
        except TestExecutionFailed as e:
            run.test_outcome = TestOutcome.FAILED
            logger.error(f"Test execution encountered an error: {e.message}")
            return e

        run.test_result_file = result.result_file
        if result.passed:
            run.test_outcome = TestOutcome.PASSED
            return None

        run.test_outcome = TestOutcome.FAILED
        logger.error("Tests failed.")
        return TestExecutionFailed(
            f"dotnet test failed with exit code {result.exit_code}",
            error_code=ErrorCodes.TESTS_FAILED,
            context=ErrorContext(
                file_path=result.result_file, operation="run_tests"
            ),
            exit_code=result.exit_code,
        )

    @staticmethod
    def _should_roll_back(run: LifecycleRun, settings: MigrationSettings) -> bool:
        return settings.rollback_on_test_failure and run.baseline != NO_BASELINE

    def _roll_back(self, run: LifecycleRun, target: tuple) -> None:
        logger.info(
            f"Rolling back migrations to baseline: {run.baseline} due to test failure..."
        )
        try:
            self.reverter.revert_to(*target, run.baseline)
        except Exception as e:
            run.rollback_error = e
            run.transition(LifecycleState.ROLLBACK_FAILED)
            self.error_reporter.report_error(
                e,
                operation="rollback_migrations",
                additional_context={"baseline": run.baseline},
            )
            logger.error("Rollback failure will not replace the test failure.")
            return

        run.rolled_back = True
        run.transition(LifecycleState.ROLLED_BACK)

    @staticmethod
    def _fail(run: LifecycleRun, error: MigrationSystemError) -> None:
        run.error = error
        run.transition(LifecycleState.FAILED)
        _attach_run(error, run)


def _attach_run(error: MigrationSystemError, run: LifecycleRun) -> None:
    info = dict(error.context.additional_info or {})
    info["lifecycle_run"] = run.to_dict()
    error.context.additional_info = info


def _target(settings: MigrationSettings) -> tuple:
    return (
        settings.env_name,
        settings.home,
        settings.migrations_folder,
        settings.use_global_tool,
    )
