"""Short-lived encoder invocations.

Probing runs ffmpeg to completion and reads what it printed. Long-running
conversions use mco.executor.ffmpeg_runner, which streams output instead.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import time
from dataclasses import dataclass
from pathlib import Path

from mco.exceptions import ProcessSpawnError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True)
class ToolOutput:
    """Captured result of one short-lived tool run."""

    stdout: str
    stderr: str
    returncode: int
    elapsed_seconds: float

    @property
    def text(self) -> str:
        """Both streams, stderr first (ffmpeg writes its banner there)."""
        return "\n".join(part for part in (self.stderr, self.stdout) if part)


def run_tool(
    args: list[str | Path],
    timeout: float = DEFAULT_TIMEOUT,
    expect_success: bool = False,
) -> ToolOutput:
    """Run a tool to completion and capture its output.

    ffmpeg in info mode (`-i` with no output) always exits non-zero, so the
    exit status is only enforced when `expect_success` is set.

    Raises:
        ProcessSpawnError: If the binary cannot be started, times out, or
            exits non-zero while `expect_success` is set.
    """
    str_args = [str(arg) for arg in args]
    tool = Path(str_args[0]).name if str_args else "tool"
    logger.debug("Running %s", " ".join(str_args), extra={"command": tool})

    start = time.monotonic()
    try:
        result = subprocess.run(  # nosec B603 - args are a tool path and fixed flags
            str_args,
            capture_output=True,
            text=True,
            errors="replace",
            stdin=subprocess.DEVNULL,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        logger.warning("%s timed out after %ss", tool, timeout)
        raise ProcessSpawnError(f"{tool} timed out after {timeout}s") from e
    except OSError as e:
        raise ProcessSpawnError(f"Failed to start {tool}: {e}") from e

    output = ToolOutput(
        stdout=result.stdout or "",
        stderr=result.stderr or "",
        returncode=result.returncode,
        elapsed_seconds=time.monotonic() - start,
    )
    logger.debug(
        "%s exited with %d",
        tool,
        output.returncode,
        extra={"command": tool, "elapsed_seconds": round(output.elapsed_seconds, 3)},
    )
    if expect_success and output.returncode != 0:
        message = f"{tool} exited with code {output.returncode}"
        lines = output.stderr.strip().splitlines()
        if lines:
            message = f"{message}: {lines[-1]}"
        raise ProcessSpawnError(message)
    return output
