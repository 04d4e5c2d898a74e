"""
Tool Bootstrap

Makes the dotnet-ef tool available on first use. A call that fails because
the tool is missing triggers one installation and exactly one retry.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from ..error_handling import (
    CommandFailed,
    CommandFailureCause,
    ErrorContext,
    ToolInstallFailed,
)
from .command_runner import CommandRunner, ToolInvocation

logger = logging.getLogger(__name__)

DOTNET = "dotnet"
EF_TOOL_NAME = "dotnet-ef"
TOOL_MANIFEST = Path(".config") / "dotnet-tools.json"


class ToolLocation(Enum):
    """Where the EF tool is installed."""

    GLOBAL = "global"
    LOCAL = "local"

    @classmethod
    def from_flag(cls, use_global_tool: bool) -> "ToolLocation":
        return cls.GLOBAL if use_global_tool else cls.LOCAL


class ToolBootstrapper:
    """Runs EF tool invocations, installing the tool once when it is missing."""

    # Messages printed by the dotnet host when a local tool cannot be resolved
    MISSING_TOOL_MARKERS = (
        "cannot find a manifest file",
        "cannot find a tool in the manifest file",
        "could not execute because the specified command or file was not found",
        "run \"dotnet tool restore\"",
    )

    ALREADY_INSTALLED_MARKER = "is already installed"

    def __init__(
        self,
        runner: CommandRunner,
        dotnet_root: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.runner = runner
        self.dotnet_root = dotnet_root
        self.timeout = timeout
        self.installed = False
        # Environment needed to reach a tool installed by this bootstrapper
        self.env_overrides: Dict[str, str] = {}

    def is_tool_missing(self, error: CommandFailed) -> bool:
        """Check whether a failed call means the tool itself is not installed."""
        if error.failure == CommandFailureCause.NOT_FOUND:
            return True
        if error.failure != CommandFailureCause.EXIT_CODE:
            return False

        output = error.output.lower()
        return any(marker in output for marker in self.MISSING_TOOL_MARKERS)

    def ensure_available(
        self, invocation: ToolInvocation, location: ToolLocation, home: str
    ) -> str:
        """Run ``invocation``; on a missing tool install it and retry once.

        Installation happens at most once per bootstrapper. Later calls reuse
        the environment that made the installed tool reachable.
        """
        if self.env_overrides:
            invocation = invocation.with_env(**self.env_overrides)

        try:
            return self.runner.run_invocation(invocation, timeout=self.timeout)
        except CommandFailed as e:
            if self.installed or not self.is_tool_missing(e):
                raise
            logger.warning(
                f"{EF_TOOL_NAME} is not available ({e.underlying_error}); installing it"
            )

        self.installed = True
        env_overrides = self.install_if_missing(location, home, invocation.env)
        self.env_overrides.update(env_overrides)
        return self.retry_once(invocation.with_env(**env_overrides))

    def install_if_missing(
        self,
        location: ToolLocation,
        home: str,
        base_env: Optional[Dict[str, str]] = None,
    ) -> Dict[str, str]:
        """Install dotnet-ef and return env overrides needed to reach it."""
        env = dict(base_env or {})
        if self.dotnet_root:
            env["DOTNET_ROOT"] = self.dotnet_root

        if location == ToolLocation.GLOBAL:
            logger.info(f"Installing {EF_TOOL_NAME} tool globally...")
            self._install(["tool", "install", "--global", EF_TOOL_NAME], home, env)

            user_home = env.get("HOME") or os.environ.get("HOME") or home
            tools_dir = str(Path(user_home) / ".dotnet" / "tools")
            current_path = env.get("PATH") or os.environ.get("PATH", "")
            logger.info(f"Added global tool path to PATH: {tools_dir}")
            return {"PATH": os.pathsep.join([tools_dir, current_path])}

        logger.info(f"Setting up local tool manifest in {home}...")
        if not (Path(home) / TOOL_MANIFEST).exists():
            self._install(["new", "tool-manifest", "--force"], home, env)
        self._install(["tool", "install", "--local", EF_TOOL_NAME], home, env)
        logger.info(f"{EF_TOOL_NAME} installed locally via tool manifest.")
        return {}

    def retry_once(self, invocation: ToolInvocation) -> str:
        """Repeat the original call a single time after installation."""
        logger.info(f"Retrying after install: {invocation.command_line}")
        return self.runner.run_invocation(invocation, timeout=self.timeout)

    def _install(self, args, home: str, env: Dict[str, str]) -> None:
        try:
            self.runner.run(DOTNET, args, cwd=home, env=env, timeout=self.timeout)
        except CommandFailed as e:
            if self.ALREADY_INSTALLED_MARKER in e.output.lower():
                logger.info(f"{EF_TOOL_NAME} is already installed")
                return
            raise ToolInstallFailed(
                f"Failed to install {EF_TOOL_NAME}: {e.message}",
                context=ErrorContext(file_path=home, operation=e.context.operation),
                cause=e,
            ) from e
