"""
Execution Module

External process execution and EF tool bootstrapping.
"""

from .command_runner import CommandRunner, ToolInvocation
from .tool_bootstrap import DOTNET, EF_TOOL_NAME, ToolBootstrapper, ToolLocation

__all__ = [
    "CommandRunner",
    "ToolInvocation",
    "ToolBootstrapper",
    "ToolLocation",
    "DOTNET",
    "EF_TOOL_NAME",
]
