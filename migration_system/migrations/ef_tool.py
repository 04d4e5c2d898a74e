"""
EF Core Tool

Builds ``dotnet ef`` invocations for a project/environment pair and runs
them through the tool bootstrapper.
"""

import logging
import os
from typing import Dict, List, Optional

from ..execution import (
    DOTNET,
    EF_TOOL_NAME,
    ToolBootstrapper,
    ToolInvocation,
    ToolLocation,
)

logger = logging.getLogger(__name__)


class EfTool:
    """Thin wrapper around the dotnet-ef command line."""

    def __init__(self, bootstrapper: ToolBootstrapper, dotnet_root: Optional[str] = None):
        self.bootstrapper = bootstrapper
        self.dotnet_root = dotnet_root

    def list_migrations(
        self, env_name: str, home: str, migrations_folder: str, use_global_tool: bool
    ) -> str:
        """Return the raw ``migrations list`` output."""
        return self._run(
            ["migrations", "list"], env_name, home, migrations_folder, use_global_tool
        )

    def update_database(
        self,
        env_name: str,
        home: str,
        migrations_folder: str,
        use_global_tool: bool,
        target: Optional[str] = None,
    ) -> str:
        """Run ``database update``, to the latest migration unless ``target`` is set."""
        args = ["database", "update"]
        if target is not None:
            args.append(target)
        return self._run(args, env_name, home, migrations_folder, use_global_tool)

    def build_invocation(
        self,
        ef_args: List[str],
        env_name: str,
        home: str,
        migrations_folder: str,
        use_global_tool: bool,
    ) -> ToolInvocation:
        location = ToolLocation.from_flag(use_global_tool)
        if location == ToolLocation.GLOBAL:
            tool, prefix = EF_TOOL_NAME, []
        else:
            tool, prefix = DOTNET, ["tool", "run", EF_TOOL_NAME]

        args = [
            *prefix,
            *ef_args,
            "--project",
            migrations_folder,
            "--environment",
            env_name,
        ]
        return ToolInvocation(
            tool=tool,
            args=tuple(args),
            cwd=home,
            env=self._environment(env_name, home),
        )

    def _environment(self, env_name: str, home: str) -> Dict[str, str]:
        env = {
            "HOME": os.environ.get("HOME") or home,
            "ASPNETCORE_ENVIRONMENT": env_name,
        }
        if self.dotnet_root:
            env["DOTNET_ROOT"] = self.dotnet_root
        return env

    def _run(
        self,
        ef_args: List[str],
        env_name: str,
        home: str,
        migrations_folder: str,
        use_global_tool: bool,
    ) -> str:
        invocation = self.build_invocation(
            ef_args, env_name, home, migrations_folder, use_global_tool
        )
        return self.bootstrapper.ensure_available(
            invocation, ToolLocation.from_flag(use_global_tool), home
        )
