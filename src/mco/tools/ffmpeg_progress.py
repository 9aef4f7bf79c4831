"""FFmpeg progress parsing and tracking.

This module turns the encoder's text output into ProgressSnapshot values.
Both the machine-readable `-progress pipe:1` stream (one `key=value` per
line) and the human stderr status line (`frame= 120 fps= 30 ... time=`)
are understood. Every field is optional in any given chunk.
"""

from __future__ import annotations

import math
import re
import time
from collections.abc import Callable
from dataclasses import dataclass

from mco.core.formatting import format_duration
from mco.domain.models import ProgressSnapshot

__all__ = [
    "ProgressSample",
    "ProgressTracker",
    "format_duration",
    "parse_progress",
    "parse_timestamp",
]

_FRAME_RE = re.compile(r"\bframe=\s*(\d+)")
_TIME_RE = re.compile(r"\b(?:out_)?time=\s*(\S+)")
_TIME_US_RE = re.compile(r"\bout_time_us=\s*(-?\d+)")
_FPS_RE = re.compile(r"\bfps=\s*([\d.]+)")
_BITRATE_RE = re.compile(r"\bbitrate=\s*(\S+)")
_SPEED_RE = re.compile(r"\bspeed=\s*([\d.]+)x")
_SIZE_RE = re.compile(r"\bL?size=\s*(\d+)\s*(kB|KiB|MB|MiB|B)?")
_TOTAL_SIZE_RE = re.compile(r"\btotal_size=\s*(\d+)")

_SIZE_UNITS = {
    None: 1024,  # stderr status line reports kB without a unit on some builds
    "B": 1,
    "kB": 1024,
    "KiB": 1024,
    "MB": 1024 * 1024,
    "MiB": 1024 * 1024,
}


def parse_timestamp(text: str | None) -> float | None:
    """Parse an encoder timestamp into seconds.

    Accepts "H:MM:SS.ms", "M:SS" and bare seconds ("83.5").

    Args:
        text: Timestamp text.

    Returns:
        Seconds as float, or None for "N/A", negative or malformed input.
    """
    if text is None:
        return None
    text = text.strip()
    if not text or text.upper() == "N/A" or text.startswith("-"):
        return None

    parts = text.split(":")
    if len(parts) > 3:
        return None

    total = 0.0
    for part in parts:
        try:
            value = float(part)
        except ValueError:
            return None
        if not math.isfinite(value) or value < 0:
            return None
        total = total * 60 + value
    return total


@dataclass
class ProgressSample:
    """Fields extracted from one chunk of encoder output.

    Every field is None when the chunk did not carry it.
    """

    frame: int | None = None
    current_time: float | None = None
    fps: float | None = None
    bitrate: str | None = None
    speed: float | None = None
    size_bytes: int | None = None

    @property
    def is_empty(self) -> bool:
        """True if no progress field was found."""
        return all(
            value is None
            for value in (
                self.frame,
                self.current_time,
                self.fps,
                self.bitrate,
                self.speed,
                self.size_bytes,
            )
        )


def _last(pattern: re.Pattern[str], chunk: str) -> re.Match[str] | None:
    match = None
    for match in pattern.finditer(chunk):
        pass
    return match


def _last_valid(
    pattern: re.Pattern[str], chunk: str, convert: Callable[[re.Match[str]], object]
):
    """Return the converted value of the last match that converts cleanly."""
    result = None
    for match in pattern.finditer(chunk):
        try:
            value = convert(match)
        except (ValueError, OverflowError):
            continue
        if value is not None:
            result = value
    return result


def _convert_size(match: re.Match[str]) -> int:
    return int(match.group(1)) * _SIZE_UNITS[match.group(2)]


def _convert_time_us(match: re.Match[str]) -> float | None:
    value = int(match.group(1))
    return value / 1_000_000 if value >= 0 else None


def parse_progress(chunk: str) -> ProgressSample:
    """Parse a chunk of encoder output into a partial sample.

    When a field occurs more than once the last valid occurrence wins.
    Malformed values are ignored.

    Args:
        chunk: One or more lines of encoder output.

    Returns:
        ProgressSample with the fields present in the chunk.
    """
    sample = ProgressSample()

    sample.frame = _last_valid(_FRAME_RE, chunk, lambda m: int(m.group(1)))

    sample.current_time = _last_valid(
        _TIME_RE, chunk, lambda m: parse_timestamp(m.group(1))
    )
    if sample.current_time is None:
        sample.current_time = _last_valid(_TIME_US_RE, chunk, _convert_time_us)

    sample.fps = _last_valid(_FPS_RE, chunk, lambda m: float(m.group(1)))

    bitrate = _last(_BITRATE_RE, chunk)
    if bitrate and bitrate.group(1).upper() != "N/A":
        sample.bitrate = bitrate.group(1)

    sample.speed = _last_valid(_SPEED_RE, chunk, lambda m: float(m.group(1)))

    sample.size_bytes = _last_valid(_TOTAL_SIZE_RE, chunk, lambda m: int(m.group(1)))
    if sample.size_bytes is None:
        sample.size_bytes = _last_valid(_SIZE_RE, chunk, _convert_size)

    return sample


class ProgressTracker:
    """Track the progress of one conversion attempt.

    A fresh tracker is created per attempt; elapsed time is measured from
    construction. The reported percentage never decreases.
    """

    def __init__(
        self,
        total_duration: float | None = None,
        total_frames: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the tracker.

        Args:
            total_duration: Input duration in seconds, if known.
            total_frames: Expected frame count, if known.
            clock: Monotonic clock, injectable for tests.
        """
        self.total_duration = (
            total_duration if total_duration and total_duration > 0 else None
        )
        self.total_frames = total_frames if total_frames and total_frames > 0 else None
        self._clock = clock
        self._started = clock()
        self._percentage = 0.0
        self._frame: int | None = None
        self._time: float | None = None
        self._fps: float | None = None
        self._speed: float | None = None
        self._bitrate: str | None = None
        self._size: int | None = None

    @property
    def percentage(self) -> float:
        """Highest percentage reported so far."""
        return self._percentage

    def _compute_percentage(self) -> float | None:
        candidates = []
        if self.total_frames and self._frame is not None:
            candidates.append(self._frame / self.total_frames * 100)
        if self.total_duration and self._time is not None:
            candidates.append(self._time / self.total_duration * 100)
        if not candidates:
            return None
        return min(max(max(candidates), 0.0), 100.0)

    def update(
        self,
        frame: int | None = None,
        current_time: float | None = None,
        sample: ProgressSample | None = None,
    ) -> ProgressSnapshot:
        """Record new progress and return the resulting snapshot.

        Args:
            frame: Frames encoded so far.
            current_time: Output timestamp reached, in seconds.
            sample: Parsed sample supplying the remaining fields.

        Returns:
            ProgressSnapshot with a non-decreasing percentage.
        """
        if sample is not None:
            frame = sample.frame if frame is None else frame
            if current_time is None:
                current_time = sample.current_time
            if sample.fps is not None:
                self._fps = sample.fps
            if sample.speed is not None:
                self._speed = sample.speed
            if sample.bitrate is not None:
                self._bitrate = sample.bitrate
            if sample.size_bytes is not None:
                self._size = sample.size_bytes

        if frame is not None:
            self._frame = frame
        if current_time is not None:
            self._time = current_time

        computed = self._compute_percentage()
        if computed is not None and computed > self._percentage:
            self._percentage = computed

        elapsed = max(self._clock() - self._started, 0.0)
        remaining = None
        if self._percentage > 0:
            remaining = elapsed / self._percentage * (100 - self._percentage)

        return ProgressSnapshot(
            percentage=self._percentage,
            current_frame=self._frame,
            current_time=self._time,
            total_frames=self.total_frames,
            total_duration=self.total_duration,
            elapsed_time=elapsed,
            estimated_time_remaining=remaining,
            speed=self._speed,
            fps=self._fps,
            bitrate=self._bitrate,
            size_bytes=self._size,
        )

    def feed(self, chunk: str) -> ProgressSnapshot | None:
        """Parse a chunk of output and update the tracker.

        Returns:
            The new snapshot, or None if the chunk carried no progress.
        """
        sample = parse_progress(chunk)
        if sample.is_empty:
            return None
        return self.update(sample=sample)
