"""
.NET Test Suite Runner

Runs ``dotnet test`` for a test project and reports pass/fail together with
the location of the results file.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..error_handling import (
    CommandFailed,
    CommandFailureCause,
    ErrorCodes,
    ErrorContext,
    TestExecutionFailed,
)
from ..execution import DOTNET, CommandRunner

logger = logging.getLogger(__name__)


@dataclass
class TestRunResult:
    """Outcome of one test suite execution."""

    __test__ = False

    passed: bool
    exit_code: int
    result_file: Optional[str] = None
    output: str = ""

    def to_dict(self) -> dict:
        return {
            "passed": self.passed,
            "exit_code": self.exit_code,
            "result_file": self.result_file,
        }


class DotnetTestRunner:
    """Executes a .NET test project with an optional result logger."""

    def __init__(
        self,
        runner: CommandRunner,
        env_name: str,
        test_folder: str,
        output_folder: str = "TestResults",
        test_format: str = "trx",
        verbosity: str = "normal",
        extra_args: Optional[List[str]] = None,
        timeout: Optional[float] = None,
    ):
        self.runner = runner
        self.env_name = env_name
        self.test_folder = test_folder
        self.output_folder = output_folder
        self.test_format = test_format
        self.verbosity = verbosity
        self.extra_args = extra_args or []
        self.timeout = timeout

    @property
    def result_file(self) -> Optional[Path]:
        if not self.test_format:
            return None
        return Path(self.output_folder).resolve() / f"TestResults.{self.test_format}"

    def build_args(self) -> List[str]:
        args = ["test", self.test_folder, "--verbosity", self.verbosity]
        result_file = self.result_file
        if result_file is not None:
            args += ["--logger", f"{self.test_format};LogFileName={result_file}"]
        return args + list(self.extra_args)

    def run_tests(self) -> TestRunResult:
        """Run the suite; a failing suite is a result, an unrunnable one raises."""
        context = ErrorContext(
            environment=self.env_name,
            file_path=self.test_folder,
            operation="run_tests",
        )

        if not Path(self.test_folder).exists():
            raise TestExecutionFailed(
                f"Test folder does not exist: {self.test_folder}",
                error_code=ErrorCodes.TEST_FOLDER_NOT_FOUND,
                context=context,
            )

        result_file = self.result_file
        if result_file is not None:
            try:
                result_file.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise TestExecutionFailed(
                    f"Could not create test output folder {result_file.parent}: {e}",
                    error_code=ErrorCodes.TEST_RUNNER_UNAVAILABLE,
                    context=context,
                    cause=e,
                ) from e

        logger.info(f"Running tests in folder: {self.test_folder} ({self.env_name})...")
        try:
            output = self.runner.run(
                DOTNET,
                self.build_args(),
                env={"DOTNET_ENVIRONMENT": self.env_name},
                timeout=self.timeout,
            )
        except CommandFailed as e:
            if e.failure != CommandFailureCause.EXIT_CODE:
                raise TestExecutionFailed(
                    f"Could not run tests in {self.test_folder}: {e.message}",
                    error_code=ErrorCodes.TEST_RUNNER_UNAVAILABLE,
                    context=context,
                    cause=e,
                ) from e

            logger.error(f"dotnet test failed with exit code {e.exit_code}")
            return TestRunResult(
                passed=False,
                exit_code=e.exit_code,
                result_file=_existing(result_file),
                output=e.output,
            )

        logger.info("Tests completed successfully.")
        return TestRunResult(
            passed=True,
            exit_code=0,
            result_file=_existing(result_file),
            output=output,
        )


def _existing(path: Optional[Path]) -> Optional[str]:
    if path is not None and path.exists():
        return str(path)
    return None
