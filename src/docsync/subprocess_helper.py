"""Safe subprocess execution for git and generator calls.

Philosophy:
- Single responsibility: Execute subprocess safely
- argv lists only, never a shell string
- Standard library only (no external dependencies)
- Self-contained and regeneratable

Public API (the "studs"):
    SubprocessResult: Result dataclass
    safe_run: Main execution function
"""

import logging
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


@dataclass
class SubprocessResult:
    """Result of subprocess execution."""

    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def safe_run(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: float | None = 30,
    env: Mapping[str, str] | None = None,
    input_text: str | None = None,
) -> SubprocessResult:
    """
    Execute subprocess and capture its output.

    communicate() drains stdout/stderr concurrently, so large outputs cannot
    deadlock the child on a full pipe.

    Args:
        cmd: Command and arguments
        cwd: Working directory
        timeout: Timeout in seconds (None = no timeout)
        env: Environment variables (None = inherit)
        input_text: Text sent to the child's stdin

    Returns:
        SubprocessResult with output and exit code

    Example:
        >>> result = safe_run(["git", "--version"])
        >>> assert result.returncode == 0
    """
    try:
        process = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE if input_text is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        # Command not found - return standard exit code 127
        return SubprocessResult(
            returncode=COMMAND_NOT_FOUND,
            stdout="",
            stderr=f"Command not found: {cmd[0] if cmd else 'unknown'}",
        )
    except OSError as e:
        return SubprocessResult(
            returncode=1,
            stdout="",
            stderr=f"Error executing command: {e!s}",
        )

    try:
        stdout, stderr = process.communicate(input=input_text, timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.warning(f"Command timed out after {timeout}s: {cmd[0]}")
        process.kill()
        stdout, stderr = process.communicate()
        return SubprocessResult(
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout or "",
            stderr=stderr or "",
            timed_out=True,
        )

    return SubprocessResult(
        returncode=process.returncode,
        stdout=stdout or "",
        stderr=stderr or "",
    )


__all__ = ["COMMAND_NOT_FOUND", "SubprocessResult", "safe_run"]
