"""FFmpeg process runner.

Runs one encoder invocation to completion while draining stdout and
stderr concurrently, forwarding each line to a callback and honouring a
CancellationToken. Both pipes must be read: ffmpeg blocks once either
pipe buffer fills.
"""

from __future__ import annotations

import logging
import queue
import re
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
import time
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from mco.exceptions import (
    CancellationError,
    EncoderExitError,
    ProcessSpawnError,
    ResourceExhaustionError,
)
from mco.executor.cancellation import CancellationToken
from mco.tools.detection import require_ffmpeg

logger = logging.getLogger(__name__)

LineCallback = Callable[[str, str], None]

STDOUT = "stdout"
STDERR = "stderr"

_DISK_FULL_RE = re.compile(r"no space left on device|disk full", re.IGNORECASE)
_OUT_OF_MEMORY_RE = re.compile(
    r"cannot allocate memory|out of memory|failed to allocate", re.IGNORECASE
)


@dataclass
class EncoderRunResult:
    """Result of a successful encoder run.

    Attributes:
        returncode: Process exit status (always 0 for a returned result).
        stdout_tail: Last lines written to stdout.
        stderr_tail: Last lines written to stderr.
        duration_seconds: Wall-clock runtime.
    """

    returncode: int
    stdout_tail: str
    stderr_tail: str
    duration_seconds: float


def exit_error_for(returncode: int, stderr_tail: str) -> Exception:
    """Map a non-zero exit and its stderr tail to the matching exception."""
    if _DISK_FULL_RE.search(stderr_tail):
        return ResourceExhaustionError(
            ResourceExhaustionError.DISK_FULL,
            f"Disk full while encoding (exit code {returncode})",
        )
    if _OUT_OF_MEMORY_RE.search(stderr_tail):
        return ResourceExhaustionError(
            ResourceExhaustionError.OUT_OF_MEMORY,
            f"Out of memory while encoding (exit code {returncode})",
        )
    return EncoderExitError(returncode, stderr_tail)


class FFmpegRunner:
    """Spawn ffmpeg and supervise it until exit.

    Cancellation sends SIGTERM to the child and, if it is still running
    after `kill_grace_seconds`, kills it.
    """

    TAIL_LINES = 20
    READER_JOIN_TIMEOUT = 5.0
    DEFAULT_GLOBAL_ARGS: tuple[str, ...] = ("-hide_banner", "-nostdin")

    def __init__(
        self,
        ffmpeg_path: Path | None = None,
        kill_grace_seconds: float = 5.0,
        poll_interval: float = 0.25,
        global_args: Sequence[str] | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            ffmpeg_path: Explicit ffmpeg binary. Resolved lazily from PATH
                when not given.
            kill_grace_seconds: Time between SIGTERM and SIGKILL on cancel.
            poll_interval: Seconds between cancellation checks while the
                process is silent.
            global_args: Arguments placed before the conversion arguments.
        """
        self._tool_path = ffmpeg_path
        self.kill_grace_seconds = kill_grace_seconds
        self.poll_interval = poll_interval
        self.global_args = tuple(
            self.DEFAULT_GLOBAL_ARGS if global_args is None else global_args
        )

    @property
    def tool_path(self) -> Path:
        """Path to ffmpeg, verifying availability.

        Raises:
            ProcessSpawnError: If ffmpeg is not available.
        """
        if self._tool_path is None:
            self._tool_path = require_ffmpeg()
        return self._tool_path

    def _terminate(self, process: subprocess.Popen, description: str) -> None:
        """Send SIGTERM now and schedule SIGKILL after the grace window."""
        if process.poll() is not None:
            return
        logger.info("Cancelling %s (pid %d)", description or "ffmpeg", process.pid)
        try:
            process.terminate()
        except OSError as e:
            logger.debug("terminate() failed: %s", e)
            return

        def kill_if_running() -> None:
            if process.poll() is None:
                logger.warning(
                    "ffmpeg (pid %d) ignored SIGTERM for %.1fs, killing",
                    process.pid,
                    self.kill_grace_seconds,
                )
                try:
                    process.kill()
                except OSError as e:
                    logger.debug("kill() failed: %s", e)

        timer = threading.Timer(self.kill_grace_seconds, kill_if_running)
        timer.daemon = True
        timer.start()

    @staticmethod
    def _reader(
        stream_name: str,
        pipe: IO[str],
        lines: queue.Queue[tuple[str, str | None]],
    ) -> None:
        """Read lines from one pipe into the shared queue."""
        try:
            for line in pipe:
                lines.put((stream_name, line.rstrip("\r\n")))
        except (ValueError, OSError) as e:
            # Pipe closed or process terminated
            logger.debug("%s reader stopped: %s", stream_name, e)
        finally:
            lines.put((stream_name, None))

    def run(
        self,
        args: Sequence[str],
        token: CancellationToken | None = None,
        on_line: LineCallback | None = None,
        description: str = "",
    ) -> EncoderRunResult:
        """Run ffmpeg with the given arguments.

        Args:
            args: Conversion arguments (without the binary).
            token: Cancellation token checked before spawning and on every
                tick while the process runs.
            on_line: Called as on_line(stream, line) for every output line,
                on the calling thread. Exceptions are logged and ignored.
            description: Label for log messages.

        Returns:
            EncoderRunResult for a zero exit status.

        Raises:
            CancellationError: If cancellation was observed at any point.
            ProcessSpawnError: If the process could not be started.
            ResourceExhaustionError: If ffmpeg reported disk-full or
                out-of-memory.
            EncoderExitError: For any other non-zero exit status.
        """
        if token is not None:
            token.throw_if_cancelled()

        cmd = [str(self.tool_path), *self.global_args, *args]
        logger.debug("Starting %s: %s", description or "ffmpeg", " ".join(cmd))
        start = time.monotonic()

        try:
            process = subprocess.Popen(  # nosec B603 - args are built internally
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise ProcessSpawnError(f"Failed to start ffmpeg ({cmd[0]}): {e}") from e

        unregister = None
        if token is not None:
            unregister = token.on_cancellation(
                lambda: self._terminate(process, description)
            )

        lines: queue.Queue[tuple[str, str | None]] = queue.Queue()
        readers = [
            threading.Thread(
                target=self._reader,
                args=(name, pipe, lines),
                name=f"ffmpeg-{name}-{process.pid}",
                daemon=True,
            )
            for name, pipe in ((STDOUT, process.stdout), (STDERR, process.stderr))
        ]
        for reader in readers:
            reader.start()

        stdout_tail: deque[str] = deque(maxlen=self.TAIL_LINES)
        stderr_tail: deque[str] = deque(maxlen=self.TAIL_LINES)
        open_streams = 2
        cancelled = False

        try:
            while open_streams:
                if token is not None and token.is_cancelled:
                    cancelled = True
                try:
                    stream_name, line = lines.get(timeout=self.poll_interval)
                except queue.Empty:
                    continue
                if line is None:
                    open_streams -= 1
                    continue
                (stdout_tail if stream_name == STDOUT else stderr_tail).append(line)
                if on_line is not None:
                    try:
                        on_line(stream_name, line)
                    except Exception as e:
                        logger.warning("Output callback error: %s", e)
        except BaseException:
            process.kill()
            raise
        finally:
            for reader in readers:
                reader.join(timeout=self.READER_JOIN_TIMEOUT)
            returncode = process.wait()
            if unregister is not None:
                unregister()

        duration = time.monotonic() - start
        if token is not None and token.is_cancelled:
            cancelled = True

        if cancelled:
            logger.info(
                "%s cancelled after %.1fs (exit code %s)",
                description or "ffmpeg",
                duration,
                returncode,
            )
            raise CancellationError()

        stderr_text = "\n".join(stderr_tail)
        if returncode != 0:
            logger.debug(
                "%s exited with code %d", description or "ffmpeg", returncode
            )
            raise exit_error_for(returncode, stderr_text)

        return EncoderRunResult(
            returncode=returncode,
            stdout_tail="\n".join(stdout_tail),
            stderr_tail=stderr_text,
            duration_seconds=duration,
        )
