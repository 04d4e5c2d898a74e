"""
CLI Commands

Wires concrete services together for the command-line interface.
"""

import logging
from datetime import datetime
from typing import Optional

from ..config import PipelineSettings
from ..error_handling import (
    ArtifactUploadError,
    ErrorCodes,
    ErrorContext,
    ErrorReporter,
    TestExecutionFailed,
)
from ..execution import CommandRunner, ToolBootstrapper
from ..lifecycle import LifecycleRun, MigrationLifecycleController, TestOutcome
from ..migrations import EfTool, MigrationApplier, MigrationInspector, MigrationReverter
from ..suites import ArtifactUploader, DirectoryArtifactUploader, DotnetTestRunner

logger = logging.getLogger(__name__)


class MigrationCLI:
    """Command-line interface for migration lifecycle management."""

    def __init__(
        self,
        settings: PipelineSettings,
        runner: Optional[CommandRunner] = None,
        uploader: Optional[ArtifactUploader] = None,
    ):
        self.settings = settings
        self.runner = runner or CommandRunner(timeout=settings.command_timeout)
        self.error_reporter = ErrorReporter(report_file=settings.report_file)

        bootstrapper = ToolBootstrapper(
            self.runner,
            dotnet_root=settings.dotnet_root,
            timeout=settings.command_timeout,
        )
        self.ef_tool = EfTool(bootstrapper, dotnet_root=settings.dotnet_root)
        self.inspector = MigrationInspector(self.ef_tool)
        self.applier = MigrationApplier(self.ef_tool, self.inspector)
        self.reverter = MigrationReverter(self.ef_tool)

        tests = settings.tests
        self.test_runner = DotnetTestRunner(
            self.runner,
            env_name=settings.tests_env_name,
            test_folder=tests.test_folder,
            output_folder=tests.output_folder,
            test_format=tests.test_format,
            verbosity=tests.verbosity,
            timeout=settings.command_timeout,
        )
        self.uploader = uploader or DirectoryArtifactUploader(tests.artifacts_dir)
        self.controller = MigrationLifecycleController(
            self.inspector,
            self.applier,
            self.reverter,
            self.test_runner,
            self.error_reporter,
        )

    @property
    def _target(self) -> tuple:
        migration = self.settings.migration
        return (
            migration.env_name,
            migration.home,
            migration.migrations_folder,
            migration.use_global_tool,
        )

    def list_migrations(self) -> dict:
        """List migrations with their status."""
        snapshot = self.inspector.list_migrations(*self._target)
        return snapshot.to_dict()

    def get_status(self) -> dict:
        """Summarize the database's migration state."""
        snapshot = self.inspector.list_migrations(*self._target)
        return {
            "environment": self.settings.migration.env_name,
            "migrations_folder": self.settings.migration.migrations_folder,
            "total": len(snapshot),
            "applied": len(snapshot.applied),
            "pending": len(snapshot.pending),
            "last_non_pending": snapshot.last_non_pending(),
            "current_applied": snapshot.current_applied(),
        }

    def migrate(self) -> dict:
        """Capture the baseline and apply pending migrations."""
        skipped = not self.settings.migration.run_migrations
        run = self.controller.migrate(self.settings.migration)

        return {
            "baseline_migration": "" if skipped else run.baseline,
            "new_migration": run.new_migration,
            "skipped": skipped,
        }

    def run_tests(self) -> LifecycleRun:
        """Run the full lifecycle, then publish test results.

        Raises the error that failed the run after results are uploaded.
        """
        try:
            if self.settings.migration.run_migrations:
                return self.controller.run(self.settings.migration)
            return self._run_tests_only()
        finally:
            self.upload_results()

    def _run_tests_only(self) -> LifecycleRun:
        run = self.controller.run(self.settings.migration)
        result = self.test_runner.run_tests()
        run.test_result_file = result.result_file
        if result.passed:
            run.test_outcome = TestOutcome.PASSED
            return run

        run.test_outcome = TestOutcome.FAILED
        raise TestExecutionFailed(
            f"dotnet test failed with exit code {result.exit_code}",
            error_code=ErrorCodes.TESTS_FAILED,
            context=ErrorContext(file_path=result.result_file, operation="run_tests"),
            exit_code=result.exit_code,
        )

    def rollback(self, target: str) -> dict:
        """Move the database to ``target``."""
        self.reverter.revert_to(*self._target, target)
        return {"target": target, "rolled_back": True}

    def upload_results(self) -> list[str]:
        """Publish the test result file; failures are logged, never raised."""
        tests = self.settings.tests
        if not tests.upload_results:
            return []

        result_file = self.test_runner.result_file
        if result_file is None or not result_file.exists():
            logger.warning("No test result file to upload.")
            return []

        try:
            uploaded = self.uploader.upload(
                tests.artifact_name, [str(result_file)], tests.output_folder
            )
        except ArtifactUploadError as e:
            self.error_reporter.report_error(e, operation="upload_test_results")
            return []

        logger.info(f"Test results uploaded as artifact: {tests.artifact_name}")
        return uploaded

    def report_failure(self, error: Exception, operation: str) -> str:
        """Report the error that fails the command and return a user message."""
        self.error_reporter.report_error(error, operation=operation)
        if self.error_reporter.report_file:
            self.error_reporter.export_error_report()
        return self.error_reporter.format_user_friendly_error(error)

    @staticmethod
    def timestamp() -> str:
        return datetime.now().isoformat()
