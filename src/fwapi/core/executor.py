"""Command execution with output capture.

Provides:
- Safe command execution (argument lists, never a shell)
- Output capture for parsing
- Timeout support
"""

import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional

from fwapi.core.context import ExecutionContext
from fwapi.core.exceptions import SubsystemError


@dataclass
class CommandResult:
    """Result of a command execution."""
    command: list[str]
    return_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        """Check if command succeeded."""
        return self.return_code == 0


class CommandExecutor:
    """Safe command execution with output capture.

    Every call spawns a fresh process; nothing is pooled or reused
    between calls.
    """

    def __init__(self, ctx: ExecutionContext) -> None:
        """Initialize executor with context.

        Args:
            ctx: Execution context with flags
        """
        self.ctx = ctx

    def run(
        self,
        command: list[str],
        *,
        description: Optional[str] = None,
        check: bool = True,
        timeout: Optional[int] = None,
    ) -> CommandResult:
        """Execute a command safely.

        Args:
            command: Command as list of strings
            description: Human-readable description for logging
            check: Raise exception on non-zero exit
            timeout: Command timeout in seconds

        Returns:
            CommandResult with output

        Raises:
            SubsystemError: If the command cannot be run, times out, or
                fails and check=True
        """
        if description:
            self.ctx.console.step(description)

        cmd_display = shlex.join(command)
        self.ctx.console.debug(f"Running: {cmd_display}")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            raise SubsystemError(
                f"Command timed out after {timeout}s: {description or cmd_display}",
                command=cmd_display,
            )
        except FileNotFoundError:
            raise SubsystemError(
                f"Command not found: {command[0]}",
                command=cmd_display,
                hint=f"Install {command[0]} or check PATH",
            )
        except PermissionError:
            raise SubsystemError(
                f"Permission denied running: {command[0]}",
                command=cmd_display,
                hint="Run fwapi as root or grant CAP_NET_ADMIN",
            )
        except OSError as e:
            raise SubsystemError(
                f"Cannot run {command[0]}: {e}",
                command=cmd_display,
            ) from e

        cmd_result = CommandResult(
            command=command,
            return_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

        if check and result.returncode != 0:
            raise SubsystemError(
                f"Command failed: {description or cmd_display}",
                command=cmd_display,
                return_code=result.returncode,
                stderr=result.stderr,
            )

        return cmd_result
