"""
Pytest configuration and shared fixtures for migration system tests.

Provides common fixtures, markers, and test utilities.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add migration_system to Python path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from migration_system.error_handling import ErrorReporter
from migration_system.test.test_utilities import (
    FakeEfDatabase,
    ScriptedCommandRunner,
    make_settings,
)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "scenario: mark test as a lifecycle scenario")
    config.addinivalue_line("markers", "cli: mark test as exercising the CLI")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "test_controller" in item.nodeid:
            item.add_marker(pytest.mark.scenario)
        elif "test_cli" in item.nodeid or "test_report_commands" in item.nodeid:
            item.add_marker(pytest.mark.cli)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def home_dir(tmp_path):
    """Provide a temporary home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def migration_settings(home_dir):
    """Provide settings for the Test environment with rollback enabled."""
    return make_settings(str(home_dir))


@pytest.fixture
def scripted_runner():
    """Provide a scripted command runner."""
    return ScriptedCommandRunner()


@pytest.fixture
def database():
    """Provide a fake database with Init applied and AddTable pending."""
    return FakeEfDatabase(["Init", "AddTable"], applied=1)


@pytest.fixture
def error_reporter():
    """Provide an error reporter without a report file."""
    return ErrorReporter()


@pytest.fixture(autouse=True)
def test_logging(caplog):
    """Configure test logging."""
    caplog.set_level(logging.DEBUG)
    yield caplog
