"""Encoder tooling: binary detection, progress parsing and metrics."""

from mco.tools.detection import find_tool, require_ffmpeg
from mco.tools.ffmpeg_metrics import (
    FFmpegMetricsAggregator,
    FFmpegMetricsSummary,
    parse_bitrate_kbps,
)
from mco.tools.ffmpeg_progress import (
    ProgressSample,
    ProgressTracker,
    parse_progress,
    parse_timestamp,
)

__all__ = [
    "FFmpegMetricsAggregator",
    "FFmpegMetricsSummary",
    "ProgressSample",
    "ProgressTracker",
    "find_tool",
    "parse_bitrate_kbps",
    "parse_progress",
    "parse_timestamp",
    "require_ffmpeg",
]
