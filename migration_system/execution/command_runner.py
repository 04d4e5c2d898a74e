"""
Command Runner

Runs external tools as blocking subprocesses and converts every kind of
failure into a CommandFailed error.
"""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from ..error_handling import CommandFailed, CommandFailureCause

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolInvocation:
    """A single external tool call."""

    tool: str
    args: tuple
    cwd: Optional[str] = None
    env: Mapping[str, str] = field(default_factory=dict)

    @property
    def command_line(self) -> str:
        return " ".join([self.tool, *self.args])

    def with_env(self, **overrides: str) -> "ToolInvocation":
        """Return a copy with extra environment variables."""
        env = dict(self.env)
        env.update(overrides)
        return ToolInvocation(tool=self.tool, args=self.args, cwd=self.cwd, env=env)


class CommandRunner:
    """Executes external commands and captures their output."""

    def __init__(self, timeout: Optional[float] = None, echo_output: bool = False):
        self.timeout = timeout
        self.echo_output = echo_output

    def run(
        self,
        tool: str,
        args: Sequence[str] = (),
        cwd: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Run ``tool`` with ``args`` and return its standard output.

        ``env`` entries are layered over the current process environment.
        ``timeout`` overrides the runner's default deadline for this call.
        Raises CommandFailed when the tool is missing, times out or exits
        with a non-zero status.
        """
        args = [str(arg) for arg in args]
        deadline = timeout if timeout is not None else self.timeout
        process_env = None
        if env:
            process_env = os.environ.copy()
            process_env.update(env)

        logger.info(f"Running: {' '.join([tool, *args])}")
        if cwd:
            logger.debug(f"Working directory: {cwd}")

        try:
            result = subprocess.run(
                [tool, *args],
                cwd=cwd,
                env=process_env,
                capture_output=True,
                text=True,
                timeout=deadline,
            )
        except FileNotFoundError as e:
            # subprocess reports a missing cwd the same way as a missing binary
            if cwd and not os.path.isdir(cwd):
                raise CommandFailed(
                    tool,
                    args,
                    cwd=cwd,
                    failure=CommandFailureCause.OS_ERROR,
                    underlying_error=f"working directory does not exist: {cwd}",
                    cause=e,
                ) from e
            raise CommandFailed(
                tool,
                args,
                cwd=cwd,
                failure=CommandFailureCause.NOT_FOUND,
                underlying_error=f"{tool} was not found",
                cause=e,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise CommandFailed(
                tool,
                args,
                cwd=cwd,
                failure=CommandFailureCause.TIMEOUT,
                stdout=_decode(e.stdout),
                stderr=_decode(e.stderr),
                underlying_error=f"timed out after {deadline} seconds",
                cause=e,
            ) from e
        except OSError as e:
            raise CommandFailed(
                tool,
                args,
                cwd=cwd,
                failure=CommandFailureCause.OS_ERROR,
                underlying_error=str(e),
                cause=e,
            ) from e

        if self.echo_output and result.stdout:
            logger.info(result.stdout.rstrip())
        if result.stderr:
            logger.debug(result.stderr.rstrip())

        if result.returncode != 0:
            raise CommandFailed(
                tool,
                args,
                cwd=cwd,
                failure=CommandFailureCause.EXIT_CODE,
                exit_code=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                underlying_error=f"exited with code {result.returncode}",
            )

        return result.stdout

    def run_invocation(
        self, invocation: ToolInvocation, timeout: Optional[float] = None
    ) -> str:
        """Run a prepared ToolInvocation."""
        return self.run(
            invocation.tool,
            invocation.args,
            cwd=invocation.cwd,
            env=invocation.env,
            timeout=timeout,
        )


def _decode(output) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
