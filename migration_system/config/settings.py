"""
Pipeline Settings Models

Defines data structures for migration and test step configuration.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Any, Optional

TRUE_VALUES = {"true", "yes", "y", "1", "on"}
FALSE_VALUES = {"false", "no", "n", "0", "off", ""}


def parse_bool(value: Any) -> bool:
    """Parse a boolean from YAML, an environment variable or a flag."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


@dataclass
class MigrationSettings:
    """Parameters of every migration lifecycle operation."""

    env_name: str = "Development"
    home: str = field(default_factory=lambda: os.environ.get("HOME") or os.getcwd())
    migrations_folder: str = ""
    use_global_tool: bool = False
    rollback_on_test_failure: bool = False
    run_migrations: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class TestSettings:
    """Configuration of the test suite step."""

    __test__ = False

    test_folder: str = ""
    env_name: Optional[str] = None
    output_folder: str = "TestResults"
    test_format: str = "trx"
    verbosity: str = "normal"
    upload_results: bool = False
    artifacts_dir: str = "artifacts"
    artifact_name: str = "TestResults"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class PipelineSettings:
    """Complete configuration for one CLI invocation."""

    migration: MigrationSettings = field(default_factory=MigrationSettings)
    tests: TestSettings = field(default_factory=TestSettings)
    dotnet_root: Optional[str] = None
    command_timeout: Optional[float] = None
    report_file: Optional[str] = None

    @property
    def tests_env_name(self) -> str:
        return self.tests.env_name or self.migration.env_name

    def validate(self, require_tests: bool = False) -> list[str]:
        """Return a list of configuration problems (empty when valid)."""
        problems = []

        if not self.migration.env_name:
            problems.append("migrations_env_name is required")
        if not self.migration.home:
            problems.append("home_directory is required")
        if self.migration.run_migrations and not self.migration.migrations_folder:
            problems.append("migrations_folder is required when run_migrations is enabled")
        if require_tests and not self.tests.test_folder:
            problems.append("test_folder is required to run tests")
        if self.command_timeout is not None and self.command_timeout <= 0:
            problems.append("command_timeout must be a positive number of seconds")

        return problems

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "migration": self.migration.to_dict(),
            "tests": self.tests.to_dict(),
            "dotnet_root": self.dotnet_root,
            "command_timeout": self.command_timeout,
            "report_file": self.report_file,
        }
