"""
Error Types and Exceptions

Defines custom exception types for the migration system with detailed
error information and remediation guidance.
"""

from typing import Optional, Dict, Any, List
from dataclasses import dataclass
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""

    COMMAND = "command"
    MIGRATION = "migration"
    ROLLBACK = "rollback"
    TESTS = "tests"
    CONFIGURATION = "configuration"
    ARTIFACTS = "artifacts"


class CommandFailureCause(Enum):
    """Why an external command did not succeed."""

    EXIT_CODE = "exit_code"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    OS_ERROR = "os_error"


@dataclass
class ErrorContext:
    """Additional context information for errors."""

    environment: Optional[str] = None
    migrations_folder: Optional[str] = None
    target_migration: Optional[str] = None
    file_path: Optional[str] = None
    operation: Optional[str] = None
    additional_info: Optional[Dict[str, Any]] = None


class MigrationSystemError(Exception):
    """Base exception for migration system errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[ErrorContext] = None,
        remediation: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.remediation = remediation or ErrorMessages.get_remediation(error_code)
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "context": {
                "environment": self.context.environment,
                "migrations_folder": self.context.migrations_folder,
                "target_migration": self.context.target_migration,
                "file_path": self.context.file_path,
                "operation": self.context.operation,
                "additional_info": self.context.additional_info,
            },
            "remediation": self.remediation,
            "cause": str(self.cause) if self.cause else None,
        }


class CommandFailed(MigrationSystemError):
    """An external process could not be started or exited unsuccessfully."""

    def __init__(
        self,
        tool: str,
        args: List[str],
        cwd: Optional[str] = None,
        failure: CommandFailureCause = CommandFailureCause.EXIT_CODE,
        exit_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
        underlying_error: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        self.tool = tool
        self.args = list(args)
        self.cwd = cwd
        self.failure = failure
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.underlying_error = underlying_error or ""

        command_line = " ".join([tool, *self.args])
        location = cwd or "current working directory"
        message = f"Command failed: {command_line} in directory: {location}"
        if underlying_error:
            message = f"{message}. Original error: {underlying_error}"

        super().__init__(
            message=message,
            error_code=_COMMAND_ERROR_CODES[failure],
            category=ErrorCategory.COMMAND,
            severity=ErrorSeverity.HIGH,
            context=ErrorContext(
                file_path=cwd,
                operation=command_line,
                additional_info={"exit_code": exit_code, "failure": failure.value},
            ),
            cause=cause,
        )

    @property
    def timed_out(self) -> bool:
        return self.failure == CommandFailureCause.TIMEOUT

    @property
    def output(self) -> str:
        """Combined captured output, stdout first."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


class ToolInstallFailed(MigrationSystemError):
    """Installing the EF command-line tool failed."""

    def __init__(
        self,
        message: str,
        error_code: str = "TOOL_INSTALL_FAILED",
        context: Optional[ErrorContext] = None,
        remediation: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.COMMAND,
            severity=ErrorSeverity.HIGH,
            context=context,
            remediation=remediation,
            cause=cause,
        )


class MigrationInspectionFailed(MigrationSystemError):
    """Listing migrations for an environment failed."""

    def __init__(
        self,
        env_name: str,
        cause: Optional[Exception] = None,
        context: Optional[ErrorContext] = None,
    ):
        self.env_name = env_name
        detail = f": {cause}" if cause else ""
        super().__init__(
            message=f"Failed to list migrations for environment: {env_name}{detail}",
            error_code=ErrorCodes.MIGRATION_INSPECTION_FAILED,
            category=ErrorCategory.MIGRATION,
            severity=ErrorSeverity.HIGH,
            context=context or ErrorContext(environment=env_name),
            cause=cause,
        )


class MigrationApplyFailed(MigrationSystemError):
    """Applying pending migrations failed."""

    def __init__(
        self,
        env_name: str,
        cause: Optional[Exception] = None,
        context: Optional[ErrorContext] = None,
    ):
        self.env_name = env_name
        detail = f": {cause}" if cause else ""
        super().__init__(
            message=f"Failed to update database for environment: {env_name}{detail}",
            error_code=ErrorCodes.MIGRATION_APPLY_FAILED,
            category=ErrorCategory.MIGRATION,
            severity=ErrorSeverity.CRITICAL,
            context=context or ErrorContext(environment=env_name),
            cause=cause,
        )


class MigrationRollbackFailed(MigrationSystemError):
    """Moving the database to a target migration failed."""

    def __init__(
        self,
        env_name: str,
        target: str,
        cause: Optional[Exception] = None,
        context: Optional[ErrorContext] = None,
    ):
        self.env_name = env_name
        self.target = target
        detail = f". {cause}" if cause else ""
        super().__init__(
            message=(
                f"Failed to rollback to migration: {target} "
                f"for environment: {env_name}{detail}"
            ),
            error_code=ErrorCodes.MIGRATION_ROLLBACK_FAILED,
            category=ErrorCategory.ROLLBACK,
            severity=ErrorSeverity.CRITICAL,
            context=context
            or ErrorContext(environment=env_name, target_migration=target),
            cause=cause,
        )


class TestExecutionFailed(MigrationSystemError):
    """The test suite failed or could not be executed."""

    __test__ = False

    def __init__(
        self,
        message: str,
        error_code: str = "TESTS_FAILED",
        context: Optional[ErrorContext] = None,
        remediation: Optional[str] = None,
        cause: Optional[Exception] = None,
        exit_code: Optional[int] = None,
    ):
        self.exit_code = exit_code
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.TESTS,
            severity=ErrorSeverity.HIGH,
            context=context,
            remediation=remediation,
            cause=cause,
        )


class ConfigurationError(MigrationSystemError):
    """Errors related to configuration issues."""

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIGURATION_ERROR",
        context: Optional[ErrorContext] = None,
        remediation: Optional[str] = None,
        cause: Optional[Exception] = None,
        problems: Optional[List[str]] = None,
    ):
        self.problems = problems or []
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            context=context,
            remediation=remediation,
            cause=cause,
        )


class ArtifactUploadError(MigrationSystemError):
    """Errors related to publishing test result artifacts."""

    def __init__(
        self,
        message: str,
        error_code: str = "ARTIFACT_UPLOAD_FAILED",
        context: Optional[ErrorContext] = None,
        remediation: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.ARTIFACTS,
            severity=ErrorSeverity.LOW,
            context=context,
            remediation=remediation,
            cause=cause,
        )


# Predefined error codes and messages
class ErrorCodes:
    """Common error codes and their default messages."""

    # Command Errors
    COMMAND_FAILED = "COMMAND_FAILED"
    COMMAND_NOT_FOUND = "COMMAND_NOT_FOUND"
    COMMAND_TIMEOUT = "COMMAND_TIMEOUT"
    COMMAND_OS_ERROR = "COMMAND_OS_ERROR"
    TOOL_INSTALL_FAILED = "TOOL_INSTALL_FAILED"

    # Migration Errors
    MIGRATION_INSPECTION_FAILED = "MIGRATION_INSPECTION_FAILED"
    MIGRATION_APPLY_FAILED = "MIGRATION_APPLY_FAILED"
    MIGRATION_ROLLBACK_FAILED = "MIGRATION_ROLLBACK_FAILED"

    # Test Errors
    TESTS_FAILED = "TESTS_FAILED"
    TEST_FOLDER_NOT_FOUND = "TEST_FOLDER_NOT_FOUND"
    TEST_RUNNER_UNAVAILABLE = "TEST_RUNNER_UNAVAILABLE"

    # Configuration Errors
    CONFIG_FILE_NOT_FOUND = "CONFIG_FILE_NOT_FOUND"
    CONFIG_INVALID_FORMAT = "CONFIG_INVALID_FORMAT"
    CONFIG_MISSING_REQUIRED_FIELD = "CONFIG_MISSING_REQUIRED_FIELD"
    ENVIRONMENT_NOT_CONFIGURED = "ENVIRONMENT_NOT_CONFIGURED"


_COMMAND_ERROR_CODES = {
    CommandFailureCause.EXIT_CODE: ErrorCodes.COMMAND_FAILED,
    CommandFailureCause.NOT_FOUND: ErrorCodes.COMMAND_NOT_FOUND,
    CommandFailureCause.TIMEOUT: ErrorCodes.COMMAND_TIMEOUT,
    CommandFailureCause.OS_ERROR: ErrorCodes.COMMAND_OS_ERROR,
}


class ErrorMessages:
    """Default error messages and remediation steps."""

    MESSAGES = {
        ErrorCodes.COMMAND_NOT_FOUND: {
            "message": "Executable not found",
            "remediation": "Install the tool or ensure it is on PATH",
        },
        ErrorCodes.COMMAND_TIMEOUT: {
            "message": "Command did not finish before its deadline",
            "remediation": "Check for database lock contention or raise command_timeout",
        },
        ErrorCodes.TOOL_INSTALL_FAILED: {
            "message": "dotnet-ef could not be installed",
            "remediation": "Check that the .NET SDK is installed and DOTNET_ROOT is correct",
        },
        ErrorCodes.MIGRATION_INSPECTION_FAILED: {
            "message": "Migrations could not be listed",
            "remediation": "Verify the migrations project path and the database connection string",
        },
        ErrorCodes.MIGRATION_APPLY_FAILED: {
            "message": "Pending migrations could not be applied",
            "remediation": "Inspect the dotnet-ef output and check the database for partially applied changes",
        },
        ErrorCodes.MIGRATION_ROLLBACK_FAILED: {
            "message": "Database could not be moved to the target migration",
            "remediation": "Restore the database manually with 'dotnet ef database update <baseline>'",
        },
        ErrorCodes.TESTS_FAILED: {
            "message": "Test suite failed",
            "remediation": "Check the test results artifact for failing tests",
        },
        ErrorCodes.TEST_FOLDER_NOT_FOUND: {
            "message": "Test folder does not exist",
            "remediation": "Set test_folder to a directory containing a test project",
        },
        ErrorCodes.CONFIG_MISSING_REQUIRED_FIELD: {
            "message": "A required setting is missing",
            "remediation": "Set the value in the config file, an INPUT_* variable or a CLI flag",
        },
    }

    @classmethod
    def get_message(cls, error_code: str) -> str:
        """Get default message for error code."""
        return cls.MESSAGES.get(error_code, {}).get("message", "Unknown error")

    @classmethod
    def get_remediation(cls, error_code: str) -> str:
        """Get default remediation for error code."""
        return cls.MESSAGES.get(error_code, {}).get(
            "remediation", "No remediation available"
        )
