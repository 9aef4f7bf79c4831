"""Settings recommendations derived from input characteristics.

These helpers suggest settings; they never override what a caller asked
for. The bitrate heuristic is a replaceable policy object.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from mco.domain.enums import MediaFormat
from mco.domain.models import ProbedMediaInfo

if TYPE_CHECKING:
    from mco.jobs.resources import PerformanceStats

DEFAULT_FRAME_RATE = 30.0

USE_CASE_SETTINGS: dict[str, dict[str, Any]] = {
    "web-streaming": {
        "video_codec": "h264",
        "audio_codec": "aac",
        "preset": "fast",
        "crf": 25,
        "resolution": "1280x720",
        "frame_rate": 30,
        "audio_bitrate": "128k",
    },
    "high-quality": {
        "video_codec": "h264",
        "audio_codec": "aac",
        "preset": "slow",
        "crf": 18,
        "audio_bitrate": "192k",
    },
    "mobile-optimized": {
        "video_codec": "h264",
        "audio_codec": "aac",
        "preset": "fast",
        "crf": 28,
        "resolution": "854x480",
        "frame_rate": 24,
        "audio_bitrate": "96k",
    },
    "archive": {
        "video_codec": "h265",
        "audio_codec": "aac",
        "preset": "slow",
        "crf": 20,
        "audio_bitrate": "128k",
    },
}
DEFAULT_USE_CASE = "high-quality"


class BitratePolicy(Protocol):
    """Estimate a video bitrate for a given frame size and rate."""

    def video_bitrate_kbps(self, width: int, height: int, frame_rate: float) -> int:
        """Return the suggested bitrate in kbps."""
        ...


@dataclass(frozen=True)
class BitsPerPixelPolicy:
    """Bitrate proportional to pixel throughput, with a ceiling.

    Attributes:
        bits_per_pixel: Bits spent per pixel per frame.
        cap_kbps: Upper bound on the suggestion.
    """

    bits_per_pixel: float = 0.1
    cap_kbps: int = 8000

    def video_bitrate_kbps(self, width: int, height: int, frame_rate: float) -> int:
        estimate = round(width * height * frame_rate * self.bits_per_pixel / 1000)
        return min(estimate, self.cap_kbps)


@dataclass(frozen=True)
class Recommendation:
    """One optimization hint."""

    type: str
    priority: str
    suggestion: str
    impact: str

    def to_dict(self) -> dict[str, str]:
        return {
            "type": self.type,
            "priority": self.priority,
            "suggestion": self.suggestion,
            "impact": self.impact,
        }


def get_recommended_settings(use_case: str) -> dict[str, Any]:
    """Return suggested settings for a named use case.

    Unknown use cases get the "high-quality" settings.
    """
    return dict(USE_CASE_SETTINGS.get(use_case, USE_CASE_SETTINGS[DEFAULT_USE_CASE]))


def calculate_optimal_settings(
    info: ProbedMediaInfo,
    target_format: MediaFormat,
    constraints: Mapping[str, Any] | None = None,
    policy: BitratePolicy | None = None,
) -> dict[str, Any]:
    """Suggest settings for an input.

    Args:
        info: Probed input stream information.
        target_format: Output format.
        constraints: Caller constraints. "max_width" bounds the output width;
            every other key is copied into the result unchanged and takes
            precedence over the computed suggestion.
        policy: Bitrate heuristic. Defaults to BitsPerPixelPolicy().

    Returns:
        A partial settings mapping suitable as user overrides.
    """
    constraints = dict(constraints or {})
    policy = policy or BitsPerPixelPolicy()
    max_width = constraints.pop("max_width", None)

    settings: dict[str, Any] = {}
    if target_format in (MediaFormat.MP4, MediaFormat.MOV):
        settings["video_codec"] = "h264"
        settings["audio_codec"] = "aac"

    if info.width and info.height:
        if max_width and "resolution" not in constraints and info.width > max_width:
            aspect = info.width / info.height
            settings["resolution"] = f"{max_width}x{round(max_width / aspect)}"

        if "video_bitrate" not in constraints:
            frame_rate = info.frame_rate or DEFAULT_FRAME_RATE
            kbps = policy.video_bitrate_kbps(info.width, info.height, frame_rate)
            settings["video_bitrate"] = f"{kbps}k"

    settings.update(constraints)
    return settings


def get_optimization_recommendations(
    info: ProbedMediaInfo,
    target_format: MediaFormat,
    stats: PerformanceStats | None = None,
) -> list[Recommendation]:
    """Return optimization hints for a conversion."""
    recommendations: list[Recommendation] = []

    if info.width and info.height and info.width >= 3840 and info.height >= 2160:
        recommendations.append(
            Recommendation(
                type="resolution",
                priority="high",
                suggestion=(
                    "Consider reducing resolution to 1080p for faster processing"
                ),
                impact="Significantly faster conversion, smaller file size",
            )
        )

    if (info.frame_rate or DEFAULT_FRAME_RATE) > 60:
        recommendations.append(
            Recommendation(
                type="framerate",
                priority="medium",
                suggestion="Consider reducing frame rate to 30fps or 60fps",
                impact="Faster processing, smaller file size",
            )
        )

    if (info.duration_seconds or 0) > 3600:
        recommendations.append(
            Recommendation(
                type="duration",
                priority="medium",
                suggestion="Consider splitting long videos into smaller segments",
                impact="Better memory management, easier to resume if interrupted",
            )
        )

    if stats is not None and 0 < stats.efficiency < 50:
        recommendations.append(
            Recommendation(
                type="performance",
                priority="high",
                suggestion=(
                    "System performance is low, consider closing other applications"
                ),
                impact="Faster conversion, more stable processing",
            )
        )

    if target_format == MediaFormat.MP4:
        recommendations.append(
            Recommendation(
                type="codec",
                priority="low",
                suggestion="Use H.264 codec for better compatibility",
                impact="Wider device support, good compression",
            )
        )
    elif target_format == MediaFormat.MOV:
        recommendations.append(
            Recommendation(
                type="codec",
                priority="low",
                suggestion="Consider ProRes codec for professional workflows",
                impact="Higher quality, larger file size",
            )
        )

    return recommendations
