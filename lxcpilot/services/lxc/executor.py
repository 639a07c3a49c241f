"""Synchronous execution of external commands."""
import shlex
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from lxcpilot.core.errors import ExecuteError
from lxcpilot.core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Outcome of one finished command."""
    command: List[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ProcessExecutor:
    """Runs one external command at a time and captures its output.

    Commands are always passed as argument lists, never through a shell.
    Privileged commands are prefixed with the sudo wrapper when enabled.
    """

    def __init__(self, use_sudo: bool = True, sudo_command: Sequence[str] = ("sudo",)):
        self.use_sudo = use_sudo
        self.sudo_command = list(sudo_command)

    def build_command(self, cmd: Sequence[str], privileged: bool = False) -> List[str]:
        """Return the argument list that run() would execute."""
        full = [str(part) for part in cmd]
        if privileged and self.use_sudo:
            full = self.sudo_command + full
        return full

    def run(
        self,
        cmd: Sequence[str],
        privileged: bool = False,
        check: bool = True,
        timeout: Optional[int] = None,
    ) -> CommandResult:
        """Run a command to completion.

        Args:
            cmd: Program and arguments
            privileged: Run with elevated privileges
            check: Raise ExecuteError on a non-zero exit status
            timeout: Seconds before the command is abandoned

        Returns:
            CommandResult with captured stdout/stderr

        Raises:
            ExecuteError: If the command fails (and check is True), cannot be
                found, or times out
            PermissionError: If the program exists but may not be executed
        """
        full = self.build_command(cmd, privileged=privileged)
        logger.debug(f"Command: {shlex.join(full)}")

        try:
            proc = subprocess.run(
                full,
                capture_output=True,
                text=True,
                check=False,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise ExecuteError(full, message=f"Command not found: {full[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise ExecuteError(
                full, message=f"Command timed out after {timeout}s: {shlex.join(full)}"
            ) from e

        result = CommandResult(
            command=full,
            exit_code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )

        if check and not result.ok:
            logger.debug(f"Command exited with code {result.exit_code}: {result.stderr.strip()}")
            raise ExecuteError(full, result.exit_code, result.stdout, result.stderr)

        return result
