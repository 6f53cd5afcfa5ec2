"""Run external commands (envman) and report failures as values.

Usage:
    match run(["envman", "add", "--key", "FAILURE_REASON", "--value", msg], timeout=30):
        case Ok(stdout):
            ...
        case Err(error):
            console.warning(str(error))
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

from gplay.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run"]

# Command words shown in error messages; values passed to envman may be long.
_SHOWN_ARGS = 3


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not be started, timed out or exited non-zero.

    ``returncode`` is -1 when the process never produced an exit status.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    def __str__(self) -> str:
        shown = " ".join(self.command[:_SHOWN_ARGS])
        if len(self.command) > _SHOWN_ARGS:
            shown = f"{shown} ..."
        return f"{shown} failed (exit {self.returncode})"


def run(cmd: Sequence[str], *, timeout: float | None = None) -> Result[str, ProcessError]:
    """Run ``cmd`` with captured text output and return its stdout."""
    command = tuple(cmd)
    try:
        proc = subprocess.run(command, capture_output=True, text=True, timeout=timeout, check=False)
    except subprocess.TimeoutExpired:
        return Err(ProcessError(command, -1, stderr=f"Command timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError(command, -1, stderr=str(e)))

    if proc.returncode:
        return Err(ProcessError(command, proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)
