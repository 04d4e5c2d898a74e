"""
Error Handling

Error taxonomy and error reporting for the migration system.
"""

from .error_types import (
    MigrationSystemError,
    CommandFailed,
    CommandFailureCause,
    ToolInstallFailed,
    MigrationInspectionFailed,
    MigrationApplyFailed,
    MigrationRollbackFailed,
    TestExecutionFailed,
    ConfigurationError,
    ArtifactUploadError,
    ErrorContext,
    ErrorSeverity,
    ErrorCategory,
    ErrorCodes,
    ErrorMessages,
)
from .error_reporter import ErrorReporter, ErrorReport

__all__ = [
    # Error Types
    "MigrationSystemError",
    "CommandFailed",
    "CommandFailureCause",
    "ToolInstallFailed",
    "MigrationInspectionFailed",
    "MigrationApplyFailed",
    "MigrationRollbackFailed",
    "TestExecutionFailed",
    "ConfigurationError",
    "ArtifactUploadError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorCodes",
    "ErrorMessages",
    # Error Reporting
    "ErrorReporter",
    "ErrorReport",
]
