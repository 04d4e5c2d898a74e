"""
Tests for Configuration Management

Tests settings layering from YAML, INPUT_* variables and explicit overrides.
"""

from pathlib import Path

import pytest
import yaml

from migration_system.config import (
    ConfigurationManager,
    MigrationSettings,
    PipelineSettings,
    parse_bool,
)
from migration_system.error_handling import ConfigurationError, ErrorCodes


def write_config(config_dir: Path, data: dict) -> Path:
    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / "pipeline-config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(data, f)
    return path


class TestParseBool:
    """Test boolean parsing."""

    @pytest.mark.parametrize("value", [True, "true", "True", "yes", "1", "on", " y "])
    def test_true_values(self, value):
        """Test accepted true spellings."""
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", [False, "false", "FALSE", "no", "0", "off", ""])
    def test_false_values(self, value):
        """Test accepted false spellings."""
        assert parse_bool(value) is False

    def test_invalid_value(self):
        """Test that other strings are rejected."""
        with pytest.raises(ValueError):
            parse_bool("maybe")


class TestPipelineSettings:
    """Test settings defaults and validation."""

    def test_defaults(self):
        """Test built-in defaults."""
        settings = PipelineSettings()

        assert settings.migration.env_name == "Development"
        assert settings.migration.run_migrations is True
        assert settings.migration.rollback_on_test_failure is False
        assert settings.tests.test_format == "trx"
        assert settings.tests_env_name == "Development"

    def test_tests_env_name_override(self):
        """Test a separate environment for the test run."""
        settings = PipelineSettings()
        settings.tests.env_name = "Test"

        assert settings.tests_env_name == "Test"

    def test_validate_reports_missing_fields(self):
        """Test validation problems."""
        settings = PipelineSettings(migration=MigrationSettings(home=""))
        settings.command_timeout = 0

        problems = settings.validate(require_tests=True)

        assert "home_directory is required" in problems
        assert any("migrations_folder" in p for p in problems)
        assert "test_folder is required to run tests" in problems
        assert any("command_timeout" in p for p in problems)

    def test_migrations_folder_optional_when_skipped(self):
        """Test that skipping migrations does not require a project."""
        settings = PipelineSettings(
            migration=MigrationSettings(home="/h", run_migrations=False)
        )

        assert settings.validate() == []


class TestConfigurationManager:
    """Test configuration manager functionality."""

    def test_without_config_file(self, tmp_path):
        """Test built-in defaults when no file exists."""
        manager = ConfigurationManager(config_dir=str(tmp_path), environ={})

        settings = manager.load_settings()

        assert manager.config_file is None
        assert settings.migration.env_name == "Development"
        assert manager.list_environments() == []

    def test_yaml_defaults_and_environment_section(self, tmp_path):
        """Test that an environment section overrides file defaults."""
        write_config(
            tmp_path,
            {
                "defaults": {
                    "migrations_folder": "src/App.Data",
                    "use_global_dotnet_ef": False,
                    "command_timeout": 900,
                },
                "environments": {
                    "Staging": {
                        "use_global_dotnet_ef": True,
                        "rollback_migrations_on_test_failed": "yes",
                    }
                },
            },
        )
        manager = ConfigurationManager(config_dir=str(tmp_path), environ={})

        settings = manager.load_settings(environment="Staging")

        assert settings.migration.env_name == "Staging"
        assert settings.migration.migrations_folder == "src/App.Data"
        assert settings.migration.use_global_tool is True
        assert settings.migration.rollback_on_test_failure is True
        assert settings.command_timeout == 900.0
        assert manager.list_environments() == ["Staging"]

    def test_input_variables_override_file(self, tmp_path):
        """Test INPUT_* variables from a CI action runner."""
        write_config(tmp_path, {"defaults": {"migrations_folder": "from-file"}})
        environ = {
            "INPUT_MIGRATIONS_FOLDER": "from-input",
            "INPUT_MIGRATIONS_ENV_NAME": "Test",
            "INPUT_UPLOAD_TESTS_RESULTS": "true",
            "INPUT_TEST_FOLDER": "",
        }
        manager = ConfigurationManager(config_dir=str(tmp_path), environ=environ)

        settings = manager.load_settings()

        assert settings.migration.migrations_folder == "from-input"
        assert settings.migration.env_name == "Test"
        assert settings.tests.upload_results is True
        assert settings.tests.test_folder == ""

    def test_environment_section_selected_by_input(self, tmp_path):
        """Test that INPUT_MIGRATIONS_ENV_NAME selects the environment section."""
        write_config(
            tmp_path,
            {"environments": {"Test": {"migrations_folder": "src/Test.Data"}}},
        )
        manager = ConfigurationManager(
            config_dir=str(tmp_path), environ={"INPUT_MIGRATIONS_ENV_NAME": "Test"}
        )

        settings = manager.load_settings()

        assert settings.migration.migrations_folder == "src/Test.Data"

    def test_explicit_overrides_win(self, tmp_path):
        """Test that command-line overrides beat INPUT_* variables."""
        manager = ConfigurationManager(
            config_dir=str(tmp_path), environ={"INPUT_MIGRATIONS_FOLDER": "input"}
        )

        settings = manager.load_settings(
            overrides={"migrations_folder": "flag", "test_folder": None}
        )

        assert settings.migration.migrations_folder == "flag"
        assert settings.tests.test_folder == ""

    def test_unknown_keys_are_ignored(self, tmp_path, caplog):
        """Test that unknown keys log a warning."""
        write_config(tmp_path, {"defaults": {"not_a_setting": 1}})
        manager = ConfigurationManager(config_dir=str(tmp_path), environ={})

        manager.load_settings()

        assert "Ignoring unknown setting 'not_a_setting'" in caplog.text

    def test_invalid_boolean(self, tmp_path):
        """Test that bad boolean input raises ConfigurationError."""
        manager = ConfigurationManager(
            config_dir=str(tmp_path), environ={"INPUT_USE_GLOBAL_DOTNET_EF": "sometimes"}
        )

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_settings()

        assert exc_info.value.error_code == ErrorCodes.CONFIG_INVALID_FORMAT

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML raises ConfigurationError."""
        (tmp_path / "pipeline-config.yaml").write_text("defaults: [unclosed")

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationManager(config_dir=str(tmp_path), environ={})

        assert exc_info.value.error_code == ErrorCodes.CONFIG_INVALID_FORMAT

    def test_missing_explicit_config_file(self, tmp_path):
        """Test that a named config file must exist."""
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationManager(config_file=str(tmp_path / "missing.yaml"), environ={})

        assert exc_info.value.error_code == ErrorCodes.CONFIG_FILE_NOT_FOUND

    def test_load_validated_settings(self, tmp_path):
        """Test that validation problems raise ConfigurationError."""
        manager = ConfigurationManager(config_dir=str(tmp_path), environ={})

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_validated_settings(require_tests=True)

        assert exc_info.value.error_code == ErrorCodes.CONFIG_MISSING_REQUIRED_FIELD
        assert "test_folder is required to run tests" in exc_info.value.problems
