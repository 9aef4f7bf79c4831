"""Domain value models for the Media Conversion Orchestrator.

These models are plain immutable values with no dependency on the encoder
process or on job scheduling.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mco.core.formatting import format_duration
from mco.domain.enums import ErrorCategory, Severity


@dataclass(frozen=True)
class ProbedMediaInfo:
    """Stream information parsed from the encoder's info banner."""

    container: str | None = None
    duration_seconds: float | None = None
    video_codec: str | None = None
    width: int | None = None
    height: int | None = None
    frame_rate: float | None = None
    audio_codec: str | None = None
    audio_sample_rate: int | None = None
    audio_channels: str | None = None  # Layout as reported: "stereo", "5.1"
    audio_bitrate_kbps: int | None = None
    video_bitrate_kbps: int | None = None
    overall_bitrate_kbps: int | None = None

    @property
    def resolution(self) -> str | None:
        """Return "WxH" when both dimensions are known."""
        if self.width and self.height:
            return f"{self.width}x{self.height}"
        return None

    @property
    def has_video(self) -> bool:
        """True if a video stream was found."""
        return self.video_codec is not None

    @property
    def estimated_total_frames(self) -> int | None:
        """Estimate total frames from duration and frame rate (30 fps default)."""
        if not self.duration_seconds:
            return None
        return round(self.duration_seconds * (self.frame_rate or 30.0))


@dataclass(frozen=True)
class ProgressSnapshot:
    """Normalized progress of a single conversion attempt.

    Superseded by the next snapshot of the same job; never persisted.
    """

    percentage: float
    current_frame: int | None = None
    current_time: float | None = None
    total_frames: int | None = None
    total_duration: float | None = None
    elapsed_time: float = 0.0
    estimated_time_remaining: float | None = None
    speed: float | None = None  # Encoder speed multiplier (2.0 == "2.0x")
    fps: float | None = None
    bitrate: str | None = None
    size_bytes: int | None = None

    @property
    def formatted_elapsed(self) -> str:
        """Elapsed wall-clock time as H:MM:SS or M:SS."""
        return format_duration(self.elapsed_time)

    @property
    def formatted_remaining(self) -> str:
        """Estimated remaining time, or "--:--" when unknown."""
        if self.estimated_time_remaining is None:
            return "--:--"
        return format_duration(self.estimated_time_remaining)


@dataclass(frozen=True)
class ErrorReport:
    """Human-facing analysis of a conversion failure.

    Attributes:
        error_type: Short machine-readable type (e.g. "permission_error").
        category: Broad category of the failure.
        severity: Severity tier.
        suggestions: Actionable hints for the user.
        retryable: Whether retrying could succeed.
        message: Original error message.
    """

    error_type: str
    category: ErrorCategory
    severity: Severity
    suggestions: tuple[str, ...] = field(default_factory=tuple)
    retryable: bool = True
    message: str = ""

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "type": self.error_type,
            "category": self.category.value,
            "severity": self.severity.value,
            "suggestions": list(self.suggestions),
            "retryable": self.retryable,
            "message": self.message,
        }
