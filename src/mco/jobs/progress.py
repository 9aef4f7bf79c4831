"""Progress reporting for CLI and library callers.

Reporters receive ProgressSnapshot and BatchProgress values through plain
callbacks; they never influence the conversion itself.
"""

from __future__ import annotations

import sys
import threading
from typing import Protocol, TextIO

from mco.domain.models import ProgressSnapshot
from mco.jobs.models import BatchProgress

BAR_WIDTH = 24


class ProgressReporter(Protocol):
    """Protocol for conversion progress display."""

    def on_progress(self, snapshot: ProgressSnapshot) -> None:
        """Handle a single-job progress snapshot."""
        ...

    def on_batch_progress(self, progress: BatchProgress) -> None:
        """Handle a batch progress update."""
        ...

    def on_complete(self, success: bool = True) -> None:
        """Finish the display."""
        ...


def render_bar(percentage: float, width: int = BAR_WIDTH) -> str:
    """Render a fixed-width text progress bar."""
    filled = int(round(width * min(max(percentage, 0.0), 100.0) / 100))
    return "#" * filled + "-" * (width - filled)


def format_snapshot(snapshot: ProgressSnapshot) -> str:
    """One-line summary of a snapshot."""
    line = (
        f"[{render_bar(snapshot.percentage)}] {snapshot.percentage:5.1f}% "
        f"{snapshot.formatted_elapsed} elapsed, ETA {snapshot.formatted_remaining}"
    )
    if snapshot.speed is not None:
        line += f", {snapshot.speed:.2f}x"
    return line


class StderrProgressReporter:
    """Progress reporter that writes in-place updates to stderr.

    Thread-safe: batch workers report concurrently.
    """

    def __init__(self, enabled: bool = True, stream: TextIO | None = None) -> None:
        """Initialize the reporter.

        Args:
            enabled: If False, suppresses output (for JSON mode or tests).
            stream: Output stream. Defaults to sys.stderr.
        """
        self.enabled = enabled
        self._stream = stream
        self._lock = threading.Lock()
        self._last_width = 0

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stderr

    def _write(self, text: str) -> None:
        if not self.enabled:
            return
        with self._lock:
            padding = " " * max(self._last_width - len(text), 0)
            self.stream.write(f"\r{text}{padding}")
            self.stream.flush()
            self._last_width = len(text)

    def on_progress(self, snapshot: ProgressSnapshot) -> None:
        """Show single-job progress."""
        self._write(format_snapshot(snapshot))

    def on_batch_progress(self, progress: BatchProgress) -> None:
        """Show batch progress with the reporting file."""
        job_pct = progress.current_progress.percentage
        self._write(
            f"[{render_bar(progress.overall_percentage)}] "
            f"{progress.overall_percentage:5.1f}% "
            f"job {progress.current_index}/{progress.total} "
            f"({progress.current_file.name} {job_pct:.0f}%)"
        )

    def on_complete(self, success: bool = True) -> None:
        """Terminate the progress line."""
        if self.enabled and self._last_width:
            with self._lock:
                self.stream.write("\n")
                self.stream.flush()
                self._last_width = 0


class NullProgressReporter:
    """No-op progress reporter for JSON output or tests."""

    def on_progress(self, snapshot: ProgressSnapshot) -> None:
        """No-op."""
        pass

    def on_batch_progress(self, progress: BatchProgress) -> None:
        """No-op."""
        pass

    def on_complete(self, success: bool = True) -> None:
        """No-op."""
        pass
