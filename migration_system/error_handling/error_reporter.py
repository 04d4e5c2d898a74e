"""
Error Reporter

Provides detailed error reporting with logging, formatting, and
remediation guidance for migration system errors.
"""

import logging
import json
import traceback
from typing import Any, Dict, List, Optional
from datetime import datetime
from pathlib import Path

from .error_types import MigrationSystemError, ErrorSeverity

logger = logging.getLogger(__name__)

_SEVERITY_LOG_LEVELS = {
    ErrorSeverity.CRITICAL: logging.CRITICAL,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.LOW: logging.INFO,
}


class ErrorReport:
    """Represents a single reported error."""

    def __init__(
        self,
        error: Exception,
        timestamp: Optional[datetime] = None,
        operation: Optional[str] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ):
        self.error = error
        self.timestamp = timestamp or datetime.now()
        self.operation = operation
        self.additional_context = additional_context or {}
        self.traceback = _format_traceback(error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error report to dictionary."""
        base_dict = {
            "timestamp": self.timestamp.isoformat(),
            "operation": self.operation,
            "error_type": type(self.error).__name__,
            "error_message": str(self.error),
            "traceback": self.traceback,
            "additional_context": self.additional_context,
        }

        if isinstance(self.error, MigrationSystemError):
            base_dict.update(self.error.to_dict())

        return base_dict

    def to_json(self, indent: int = 2) -> str:
        """Convert error report to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)


def _format_traceback(error: Exception) -> Optional[str]:
    if error.__traceback__ is None:
        return None
    return "".join(
        traceback.format_exception(type(error), error, error.__traceback__)
    )


class ErrorReporter:
    """Handles error reporting, logging, and formatting."""

    def __init__(
        self,
        log_level: int = logging.ERROR,
        report_file: Optional[Path] = None,
        include_traceback: bool = True,
    ):
        self.log_level = log_level
        self.report_file = Path(report_file) if report_file else None
        self.include_traceback = include_traceback
        self.error_history: List[ErrorReport] = []

    def report_error(
        self,
        error: Exception,
        operation: Optional[str] = None,
        additional_context: Optional[Dict[str, Any]] = None,
        log_error: bool = True,
    ) -> ErrorReport:
        """Record an error, log it and return the report."""
        report = ErrorReport(
            error=error, operation=operation, additional_context=additional_context
        )
        self.error_history.append(report)

        if log_error:
            self._log_error(report)

        return report

    def _log_error(self, report: ErrorReport) -> None:
        """Log error with a level derived from its severity."""
        error = report.error

        if isinstance(error, MigrationSystemError):
            log_level = _SEVERITY_LOG_LEVELS.get(error.severity, self.log_level)
        else:
            log_level = self.log_level

        logger.log(log_level, self._format_error_message(report))

        if self.include_traceback and report.traceback:
            logger.debug(f"Traceback:\n{report.traceback}")

    def _format_error_message(self, report: ErrorReport) -> str:
        """Format error message for logging."""
        error = report.error
        parts = []

        if report.operation:
            parts.append(f"Operation: {report.operation}")

        if isinstance(error, MigrationSystemError):
            parts.append(f"[{error.error_code}] {error.message}")

            context_parts = []
            if error.context.environment:
                context_parts.append(f"Environment: {error.context.environment}")
            if error.context.target_migration:
                context_parts.append(f"Target: {error.context.target_migration}")
            if error.context.file_path:
                context_parts.append(f"Path: {error.context.file_path}")
            if context_parts:
                parts.append(f"Context: {', '.join(context_parts)}")
        else:
            parts.append(f"{type(error).__name__}: {error}")

        return " | ".join(parts)

    def format_user_friendly_error(self, error: Exception) -> str:
        """Format error message for end users."""
        if isinstance(error, MigrationSystemError):
            message_parts = [f"✗ {error.message}"]

            if error.context.environment:
                message_parts.append(f"   Environment: {error.context.environment}")
            if error.context.target_migration:
                message_parts.append(
                    f"   Target migration: {error.context.target_migration}"
                )
            if error.remediation:
                message_parts.append(f"   Solution: {error.remediation}")

            return "\n".join(message_parts)

        return f"✗ {type(error).__name__}: {error}"

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all reported errors."""
        if not self.error_history:
            return {
                "total_errors": 0,
                "by_category": {},
                "by_severity": {},
                "recent_errors": [],
            }

        by_category: Dict[str, int] = {}
        by_severity: Dict[str, int] = {}

        for report in self.error_history:
            error = report.error

            if isinstance(error, MigrationSystemError):
                category = error.category.value
                severity = error.severity.value
            else:
                category = "other"
                severity = "unknown"

            by_category[category] = by_category.get(category, 0) + 1
            by_severity[severity] = by_severity.get(severity, 0) + 1

        return {
            "total_errors": len(self.error_history),
            "by_category": by_category,
            "by_severity": by_severity,
            "recent_errors": [
                {
                    "timestamp": report.timestamp.isoformat(),
                    "operation": report.operation,
                    "error": str(report.error),
                }
                for report in self.error_history[-5:]
            ],
        }

    def clear_history(self) -> None:
        """Clear error history."""
        self.error_history.clear()

    def export_error_report(self, file_path: Optional[Path] = None) -> Path:
        """Write every reported error and a summary to a JSON file."""
        target = Path(file_path) if file_path else self.report_file
        if target is None:
            raise ValueError("No report file configured")

        report_data = {
            "generated_at": datetime.now().isoformat(),
            "summary": self.get_error_summary(),
            "errors": [report.to_dict() for report in self.error_history],
        }

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            json.dump(report_data, f, indent=2, default=str)

        logger.info(f"Error report written to {target}")
        return target
