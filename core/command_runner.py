"""
Blocking external command execution.

All synthesis and diff tool invocations go through CommandRunner so that
timeout and retry policy live in one place.
"""

import subprocess
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from .errors import CommandError


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of a finished command"""
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs external commands synchronously with a bounded timeout"""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self.logger = logging.getLogger('migration_analysis.command')

    def run(self, args: List[str], cwd: Optional[Union[str, Path]] = None,
            timeout: Optional[float] = None) -> CommandResult:
        """
        Run a command and capture its output.

        A non-zero exit is returned, not raised; callers decide what it means.

        Raises:
            CommandError: the command timed out or could not be started
        """
        args = [str(arg) for arg in args]
        timeout = timeout if timeout is not None else self.timeout

        self.logger.debug(f"Running command: {' '.join(args)} (cwd={cwd or '.'})")

        try:
            completed = subprocess.run(
                args,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except subprocess.TimeoutExpired as e:
            self.logger.error(f"✗ Command timed out after {timeout}s: {' '.join(args)}")
            raise CommandError(
                f"Command timed out after {timeout} seconds: {' '.join(args)}",
                args=args,
                stdout=_decode(e.stdout),
                stderr=_decode(e.stderr)
            ) from e
        except OSError as e:
            self.logger.error(f"✗ Command could not be started: {args[0]}: {e}")
            raise CommandError(f"Command could not be started: {args[0]}: {e}", args=args) from e

        if completed.returncode != 0:
            self.logger.debug(f"Command exited with status {completed.returncode}: {' '.join(args)}")

        return CommandResult(
            args=args,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or ""
        )


def _decode(output) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode('utf-8', errors='replace')
    return output


def expand_placeholders(template: List[str], **values) -> List[str]:
    """Replace {name} placeholders in each argument of a command template"""
    expanded = []
    for arg in template:
        for name, value in values.items():
            arg = arg.replace(f"{{{name}}}", str(value))
        expanded.append(arg)
    return expanded
