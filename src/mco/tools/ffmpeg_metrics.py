"""FFmpeg encoding metrics aggregation.

Progress samples from one attempt are folded into a summary that is
logged when the encoder finishes.
"""

import re
from dataclasses import dataclass, field

from mco.tools.ffmpeg_progress import ProgressSample

_BITRATE_VALUE_RE = re.compile(r"^([\d.]+)\s*([km]?)bits/s$")


def parse_bitrate_kbps(bitrate: str | None) -> int | None:
    """Parse an encoder bitrate string to kilobits per second.

    Args:
        bitrate: String like "5000.5kbits/s", "5.2Mbits/s" or "1200".

    Returns:
        Bitrate in kbps, or None if it cannot be parsed.
    """
    if not bitrate:
        return None
    text = bitrate.strip().lower()
    if text in ("n/a", ""):
        return None

    match = _BITRATE_VALUE_RE.match(text)
    try:
        if match:
            value = float(match.group(1))
            unit = match.group(2)
            if unit == "m":
                value *= 1000
            elif unit == "":
                value /= 1000
        else:
            value = float(text)
    except ValueError:
        return None
    result = round(value)
    return result if result >= 0 else None


@dataclass
class FFmpegMetricsSummary:
    """Aggregated encoder metrics for one attempt.

    Attributes:
        avg_fps: Average encoding frames per second.
        peak_fps: Peak encoding frames per second.
        avg_bitrate_kbps: Average output bitrate.
        avg_speed: Average speed multiplier relative to real time.
        total_frames: Last frame count reported.
        sample_count: Number of samples that carried an fps value.
    """

    avg_fps: float | None = None
    peak_fps: float | None = None
    avg_bitrate_kbps: int | None = None
    avg_speed: float | None = None
    total_frames: int | None = None
    sample_count: int = 0

    def to_log_extra(self) -> dict:
        """Return the summary as structured logging context."""
        return {
            "avg_fps": round(self.avg_fps, 2) if self.avg_fps is not None else None,
            "peak_fps": self.peak_fps,
            "avg_bitrate_kbps": self.avg_bitrate_kbps,
            "avg_speed": (
                round(self.avg_speed, 2) if self.avg_speed is not None else None
            ),
            "total_frames": self.total_frames,
            "sample_count": self.sample_count,
        }


@dataclass
class FFmpegMetricsAggregator:
    """Collect progress samples during encoding and summarize them.

    Usage:
        aggregator = FFmpegMetricsAggregator()
        aggregator.add_sample(parse_progress(chunk))
        summary = aggregator.summarize()
    """

    fps_samples: list[float] = field(default_factory=list)
    bitrate_samples: list[int] = field(default_factory=list)
    speed_samples: list[float] = field(default_factory=list)
    last_frame: int | None = None

    def add_sample(self, sample: ProgressSample) -> None:
        """Record the metric fields of a progress sample."""
        if sample.fps is not None and sample.fps > 0:
            self.fps_samples.append(sample.fps)

        bitrate_kbps = parse_bitrate_kbps(sample.bitrate)
        if bitrate_kbps:
            self.bitrate_samples.append(bitrate_kbps)

        if sample.speed is not None and sample.speed > 0:
            self.speed_samples.append(sample.speed)

        if sample.frame is not None:
            self.last_frame = sample.frame

    def summarize(self) -> FFmpegMetricsSummary:
        """Compute aggregate metrics from collected samples."""
        summary = FFmpegMetricsSummary(
            total_frames=self.last_frame, sample_count=len(self.fps_samples)
        )
        if self.fps_samples:
            summary.avg_fps = sum(self.fps_samples) / len(self.fps_samples)
            summary.peak_fps = max(self.fps_samples)
        if self.bitrate_samples:
            summary.avg_bitrate_kbps = int(
                sum(self.bitrate_samples) / len(self.bitrate_samples)
            )
        if self.speed_samples:
            summary.avg_speed = sum(self.speed_samples) / len(self.speed_samples)
        return summary

    def reset(self) -> None:
        """Clear all collected samples."""
        self.fps_samples.clear()
        self.bitrate_samples.clear()
        self.speed_samples.clear()
        self.last_frame = None
