"""
Configuration Manager

Builds PipelineSettings from layered sources: built-in defaults, a YAML
config file, ``INPUT_*`` environment variables and explicit overrides.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..error_handling import ConfigurationError, ErrorCodes, ErrorContext
from .settings import PipelineSettings, parse_bool

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILES = ("pipeline-config.yaml", "pipeline_config.yaml")

# Input name -> (section, attribute, converter)
SETTING_KEYS = {
    "migrations_env_name": ("migration", "env_name", str),
    "home_directory": ("migration", "home", str),
    "migrations_folder": ("migration", "migrations_folder", str),
    "use_global_dotnet_ef": ("migration", "use_global_tool", parse_bool),
    "rollback_migrations_on_test_failed": (
        "migration",
        "rollback_on_test_failure",
        parse_bool,
    ),
    "run_migrations": ("migration", "run_migrations", parse_bool),
    "test_folder": ("tests", "test_folder", str),
    "tests_env_name": ("tests", "env_name", str),
    "test_output_folder": ("tests", "output_folder", str),
    "test_format": ("tests", "test_format", str),
    "test_verbosity": ("tests", "verbosity", str),
    "upload_tests_results": ("tests", "upload_results", parse_bool),
    "artifacts_dir": ("tests", "artifacts_dir", str),
    "artifact_name": ("tests", "artifact_name", str),
    "dotnet_root": (None, "dotnet_root", str),
    "command_timeout": (None, "command_timeout", float),
    "report_file": (None, "report_file", str),
}


class ConfigurationManager:
    """Loads and layers pipeline configuration."""

    def __init__(
        self,
        config_dir: str = "config",
        config_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.config_dir = Path(config_dir)
        self.environ = os.environ if environ is None else environ
        self.config_file = self._resolve_config_file(config_file)
        self._defaults: Dict[str, Any] = {}
        self._environments: Dict[str, Dict[str, Any]] = {}
        self._load_configuration()

    def _resolve_config_file(self, config_file: Optional[str]) -> Optional[Path]:
        if config_file:
            path = Path(config_file)
            if not path.exists():
                raise ConfigurationError(
                    f"Config file not found: {path}",
                    error_code=ErrorCodes.CONFIG_FILE_NOT_FOUND,
                    context=ErrorContext(file_path=str(path)),
                )
            return path

        for name in DEFAULT_CONFIG_FILES:
            candidate = self.config_dir / name
            if candidate.exists():
                return candidate
        return None

    def _load_configuration(self) -> None:
        """Load defaults and environment sections from the YAML file."""
        if self.config_file is None:
            logger.debug("No pipeline config file found; using built-in defaults")
            return

        try:
            with open(self.config_file, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {self.config_file}: {e}",
                error_code=ErrorCodes.CONFIG_INVALID_FORMAT,
                context=ErrorContext(file_path=str(self.config_file)),
                cause=e,
            ) from e

        if not isinstance(config_data, dict):
            raise ConfigurationError(
                f"Expected a mapping at the top of {self.config_file}",
                error_code=ErrorCodes.CONFIG_INVALID_FORMAT,
                context=ErrorContext(file_path=str(self.config_file)),
            )

        self._defaults = config_data.get("defaults") or {}
        self._environments = config_data.get("environments") or {}
        logger.info(f"Loaded pipeline configuration from {self.config_file}")

    def list_environments(self) -> list[str]:
        """List environments that have their own config section."""
        return list(self._environments.keys())

    def get_environment_overrides(self, environment: str) -> Dict[str, Any]:
        return dict(self._environments.get(environment) or {})

    def input_overrides(self) -> Dict[str, Any]:
        """Collect ``INPUT_<NAME>`` variables as set by CI action runners."""
        overrides = {}
        for key in SETTING_KEYS:
            value = self.environ.get(f"INPUT_{key.upper()}")
            if value is not None and value != "":
                overrides[key] = value
        return overrides

    def load_settings(
        self,
        environment: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> PipelineSettings:
        """Build settings: defaults < file < environment section < INPUT_* < overrides."""
        settings = PipelineSettings()
        explicit = {k: v for k, v in (overrides or {}).items() if v is not None}
        inputs = self.input_overrides()

        self._apply(settings, self._defaults, "defaults")

        env_name = (
            environment
            or explicit.get("migrations_env_name")
            or inputs.get("migrations_env_name")
            or self._defaults.get("migrations_env_name")
            or settings.migration.env_name
        )
        self._apply(settings, self.get_environment_overrides(env_name), env_name)
        self._apply(settings, inputs, "INPUT_* variables")
        self._apply(settings, explicit, "command line")
        if environment:
            settings.migration.env_name = environment

        return settings

    def load_validated_settings(
        self,
        environment: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        require_tests: bool = False,
    ) -> PipelineSettings:
        settings = self.load_settings(environment, overrides)
        problems = settings.validate(require_tests=require_tests)
        if problems:
            raise ConfigurationError(
                f"Invalid configuration: {'; '.join(problems)}",
                error_code=ErrorCodes.CONFIG_MISSING_REQUIRED_FIELD,
                context=ErrorContext(
                    environment=settings.migration.env_name,
                    file_path=str(self.config_file) if self.config_file else None,
                ),
                problems=problems,
            )
        return settings

    def _apply(
        self, settings: PipelineSettings, values: Mapping[str, Any], source: str
    ) -> None:
        for key, value in values.items():
            if key not in SETTING_KEYS:
                logger.warning(f"Ignoring unknown setting '{key}' from {source}")
                continue

            section, attribute, convert = SETTING_KEYS[key]
            target = getattr(settings, section) if section else settings
            try:
                converted = convert(value) if value is not None else None
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"Invalid value for '{key}' from {source}: {value!r}",
                    error_code=ErrorCodes.CONFIG_INVALID_FORMAT,
                    cause=e,
                ) from e
            setattr(target, attribute, converted)
