"""Run external tools (``git``, ``gh``) and hand back their stdout.

A non-zero exit, a timeout or a missing executable comes back as a
``ProcessError`` value instead of an exception.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from apkrel.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "which"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A tool that did not finish cleanly.

    ``returncode`` is -1 when the process never ran or was killed on timeout.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = list(self.command[:3])
        if len(self.command) > 3:
            shown.append("...")
        return f"{' '.join(shown)} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd``, capturing output as text; Ok(stdout) on exit 0."""
    argv = tuple(cmd)
    try:
        proc = subprocess.run(
            argv,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(ProcessError(argv, -1, "", f"Command timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError(argv, -1, "", str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(argv, proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)


def which(name: str) -> str | None:
    return shutil.which(name)
