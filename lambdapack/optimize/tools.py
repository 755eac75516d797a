"""Subprocess runner for the external JS tooling (browserify, uglifyjs).

Tools run with resource limits but no wall-clock timeout; a bundle either
completes or the CPU rlimit ends it.
"""

import logging
import subprocess
import time
from pathlib import Path

from lambdapack.sandbox.limits import apply_resource_limits

logger = logging.getLogger(__name__)


class ToolError(Exception):
    """Raised when an external tool cannot be started or exits non-zero."""

    def __init__(self, command: list[str], message: str, stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.stderr = stderr


def run_tool(command: list[str], cwd: Path) -> bytes:
    """Run `command` in `cwd` and return its stdout bytes.

    Raises:
        ToolError: The binary is missing or the process exited non-zero.
    """
    logger.debug("Running %s (cwd=%s)", " ".join(command), cwd)
    start = time.monotonic()

    try:
        result = subprocess.run(
            command,
            cwd=str(cwd),
            capture_output=True,
            preexec_fn=apply_resource_limits,
        )
    except OSError as exc:
        raise ToolError(command, f"Could not start {command[0]}: {exc}") from exc

    duration = time.monotonic() - start
    stderr = result.stderr.decode("utf-8", errors="replace")
    if result.returncode != 0:
        logger.warning(
            "%s failed (exit=%d, %.1fs) stderr (tail):\n%s",
            command[0], result.returncode, duration, truncate_output(stderr),
        )
        raise ToolError(
            command,
            f"{command[0]} exited with code {result.returncode}: {truncate_output(stderr, max_lines=5)}",
            stderr=stderr,
        )

    logger.debug("%s OK (%.1fs, %d bytes)", command[0], duration, len(result.stdout))
    return result.stdout


def truncate_output(text: str, max_lines: int = 60, max_chars: int = 4000) -> str:
    """Return a concise tail of command output for logs."""
    if not text:
        return ""
    lines = text.splitlines()
    tail = lines[-max_lines:]
    joined = "\n".join(tail)
    if len(joined) > max_chars:
        joined = joined[-max_chars:]
    return joined
