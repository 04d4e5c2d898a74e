"""
Tests for Tool Bootstrap

Tests first-use installation of dotnet-ef and the single retry.
"""

import os
from pathlib import Path

import pytest

from migration_system.error_handling import (
    CommandFailed,
    CommandFailureCause,
    ToolInstallFailed,
)
from migration_system.execution import ToolBootstrapper, ToolInvocation, ToolLocation
from migration_system.test.test_utilities import ScriptedCommandRunner, command_failed


def local_list_invocation(home: Path) -> ToolInvocation:
    return ToolInvocation(
        tool="dotnet",
        args=("tool", "run", "dotnet-ef", "migrations", "list"),
        cwd=str(home),
        env={"HOME": str(home)},
    )


def global_list_invocation(home: Path) -> ToolInvocation:
    return ToolInvocation(
        tool="dotnet-ef",
        args=("migrations", "list"),
        cwd=str(home),
        env={"HOME": str(home)},
    )


class TestToolLocation:
    """Test ToolLocation selection."""

    def test_from_flag(self):
        """Test flag mapping."""
        assert ToolLocation.from_flag(True) == ToolLocation.GLOBAL
        assert ToolLocation.from_flag(False) == ToolLocation.LOCAL


class TestToolBootstrapper:
    """Test cases for ToolBootstrapper."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = ScriptedCommandRunner()
        self.bootstrapper = ToolBootstrapper(self.runner, timeout=60)

    def test_available_tool_runs_once(self, home_dir):
        """Test that an available tool is never installed."""
        self.runner.respond("migrations list", output="Init [applied]")

        output = self.bootstrapper.ensure_available(
            local_list_invocation(home_dir), ToolLocation.LOCAL, str(home_dir)
        )

        assert output == "Init [applied]"
        assert len(self.runner.calls) == 1
        assert self.runner.calls[0].timeout == 60

    def test_local_install_then_single_retry(self, home_dir):
        """Test manifest creation, local install and one retry."""
        self.runner.respond(
            "migrations list",
            error=command_failed(stderr="Cannot find a manifest file."),
        )
        self.runner.respond("migrations list", output="Init [applied]")

        output = self.bootstrapper.ensure_available(
            local_list_invocation(home_dir), ToolLocation.LOCAL, str(home_dir)
        )

        assert output == "Init [applied]"
        assert self.runner.command_lines == [
            "dotnet tool run dotnet-ef migrations list",
            "dotnet new tool-manifest --force",
            "dotnet tool install --local dotnet-ef",
            "dotnet tool run dotnet-ef migrations list",
        ]
        assert self.runner.calls[1].cwd == str(home_dir)
        assert self.runner.calls[2].cwd == str(home_dir)

    def test_existing_manifest_is_reused(self, home_dir):
        """Test that an existing tool manifest is not recreated."""
        manifest = home_dir / ".config" / "dotnet-tools.json"
        manifest.parent.mkdir()
        manifest.write_text("{}")
        self.runner.respond(
            "migrations list",
            error=command_failed(
                stderr="Cannot find a tool in the manifest file that has a command named 'dotnet-ef'."
            ),
        )

        self.bootstrapper.ensure_available(
            local_list_invocation(home_dir), ToolLocation.LOCAL, str(home_dir)
        )

        assert "dotnet new tool-manifest --force" not in self.runner.command_lines
        assert "dotnet tool install --local dotnet-ef" in self.runner.command_lines

    def test_global_install_prepends_tools_path(self, home_dir):
        """Test global install and PATH update for the retried call."""
        self.runner.respond(
            "dotnet-ef migrations list",
            error=command_failed(
                tool="dotnet-ef", failure=CommandFailureCause.NOT_FOUND
            ),
        )

        self.bootstrapper.ensure_available(
            global_list_invocation(home_dir), ToolLocation.GLOBAL, str(home_dir)
        )

        assert self.runner.command_lines == [
            "dotnet-ef migrations list",
            "dotnet tool install --global dotnet-ef",
            "dotnet-ef migrations list",
        ]
        retried = self.runner.calls[-1]
        tools_dir = str(home_dir / ".dotnet" / "tools")
        assert retried.env["PATH"].startswith(tools_dir + os.pathsep)
        assert retried.env["HOME"] == str(home_dir)

    def test_later_calls_reuse_global_tools_path(self, home_dir):
        """Test that the PATH from a global install applies to later calls."""
        self.runner.respond(
            "dotnet-ef migrations list",
            error=command_failed(tool="dotnet-ef", failure=CommandFailureCause.NOT_FOUND),
        )
        invocation = global_list_invocation(home_dir)

        self.bootstrapper.ensure_available(invocation, ToolLocation.GLOBAL, str(home_dir))
        self.bootstrapper.ensure_available(invocation, ToolLocation.GLOBAL, str(home_dir))

        installs = [c for c in self.runner.command_lines if "tool install" in c]
        assert installs == ["dotnet tool install --global dotnet-ef"]
        later = self.runner.calls[-1]
        tools_dir = str(home_dir / ".dotnet" / "tools")
        assert later.env["PATH"].startswith(tools_dir + os.pathsep)

    def test_install_is_attempted_once_per_bootstrapper(self, home_dir):
        """Test that a tool missing after installation is not installed again."""
        missing = command_failed(tool="dotnet-ef", failure=CommandFailureCause.NOT_FOUND)
        self.runner.respond("dotnet-ef migrations list", error=missing)
        invocation = global_list_invocation(home_dir)
        self.bootstrapper.ensure_available(invocation, ToolLocation.GLOBAL, str(home_dir))
        self.runner.respond("dotnet-ef migrations list", error=missing)

        with pytest.raises(CommandFailed):
            self.bootstrapper.ensure_available(
                invocation, ToolLocation.GLOBAL, str(home_dir)
            )

        installs = [c for c in self.runner.command_lines if "tool install" in c]
        assert len(installs) == 1

    def test_retry_happens_at_most_once(self, home_dir):
        """Test that a second missing-tool failure propagates."""
        missing = command_failed(tool="dotnet-ef", failure=CommandFailureCause.NOT_FOUND)
        self.runner.respond("dotnet-ef migrations list", error=missing)
        self.runner.respond("dotnet-ef migrations list", error=missing)

        with pytest.raises(CommandFailed):
            self.bootstrapper.ensure_available(
                global_list_invocation(home_dir), ToolLocation.GLOBAL, str(home_dir)
            )

        lists = [c for c in self.runner.command_lines if "migrations list" in c]
        installs = [c for c in self.runner.command_lines if "tool install" in c]
        assert len(lists) == 2
        assert len(installs) == 1

    def test_unrelated_failure_is_not_retried(self, home_dir):
        """Test that ordinary failures propagate without installing."""
        self.runner.respond(
            "migrations list",
            error=command_failed(stderr="A network-related error occurred."),
        )

        with pytest.raises(CommandFailed):
            self.bootstrapper.ensure_available(
                local_list_invocation(home_dir), ToolLocation.LOCAL, str(home_dir)
            )

        assert len(self.runner.calls) == 1

    def test_timeout_is_not_treated_as_missing_tool(self, home_dir):
        """Test that a timeout propagates without installing."""
        self.runner.respond(
            "migrations list",
            error=command_failed(failure=CommandFailureCause.TIMEOUT),
        )

        with pytest.raises(CommandFailed) as exc_info:
            self.bootstrapper.ensure_available(
                local_list_invocation(home_dir), ToolLocation.LOCAL, str(home_dir)
            )

        assert exc_info.value.timed_out
        assert len(self.runner.calls) == 1

    def test_install_failure(self, home_dir):
        """Test that a failed install raises ToolInstallFailed without retrying."""
        self.runner.respond(
            "dotnet-ef migrations list",
            error=command_failed(tool="dotnet-ef", failure=CommandFailureCause.NOT_FOUND),
        )
        self.runner.respond(
            "tool install --global",
            error=command_failed(stderr="Unable to load the service index"),
        )

        with pytest.raises(ToolInstallFailed) as exc_info:
            self.bootstrapper.ensure_available(
                global_list_invocation(home_dir), ToolLocation.GLOBAL, str(home_dir)
            )

        assert isinstance(exc_info.value.__cause__, CommandFailed)
        assert len(self.runner.calls) == 2

    def test_already_installed_counts_as_success(self, home_dir):
        """Test that an 'already installed' install error is tolerated."""
        self.runner.respond(
            "dotnet-ef migrations list",
            error=command_failed(tool="dotnet-ef", failure=CommandFailureCause.NOT_FOUND),
        )
        self.runner.respond(
            "tool install --global",
            error=command_failed(stderr="Tool 'dotnet-ef' is already installed."),
        )
        self.runner.respond("dotnet-ef migrations list", output="Init [applied]")

        output = self.bootstrapper.ensure_available(
            global_list_invocation(home_dir), ToolLocation.GLOBAL, str(home_dir)
        )

        assert output == "Init [applied]"

    def test_dotnet_root_is_passed_to_installs(self, home_dir):
        """Test DOTNET_ROOT reaches the install commands."""
        bootstrapper = ToolBootstrapper(self.runner, dotnet_root="/usr/share/dotnet")

        bootstrapper.install_if_missing(ToolLocation.LOCAL, str(home_dir))

        assert all(
            call.env["DOTNET_ROOT"] == "/usr/share/dotnet" for call in self.runner.calls
        )

    @pytest.mark.parametrize(
        "failure, output, expected",
        [
            (CommandFailureCause.NOT_FOUND, "", True),
            (CommandFailureCause.EXIT_CODE, "Could not execute because the specified command or file was not found.", True),
            (CommandFailureCause.EXIT_CODE, 'Run "dotnet tool restore" to make the tool available.', True),
            (CommandFailureCause.EXIT_CODE, "Build failed.", False),
            (CommandFailureCause.TIMEOUT, "Cannot find a manifest file.", False),
            (CommandFailureCause.OS_ERROR, "", False),
        ],
    )
    def test_is_tool_missing(self, failure, output, expected):
        """Test missing-tool detection."""
        error = command_failed(failure=failure, stderr=output)

        assert self.bootstrapper.is_tool_missing(error) is expected
