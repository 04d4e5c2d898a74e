"""
Configuration Management Module

Handles layered pipeline configuration.
"""

from .manager import SETTING_KEYS, ConfigurationManager
from .settings import MigrationSettings, PipelineSettings, TestSettings, parse_bool

__all__ = [
    "ConfigurationManager",
    "PipelineSettings",
    "MigrationSettings",
    "TestSettings",
    "SETTING_KEYS",
    "parse_bool",
]
