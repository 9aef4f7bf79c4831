"""Stream information from the encoder's info banner.

ffmpeg prints the container, duration, bitrate and stream layout to stderr
when invoked with only an input. The exit status is non-zero in that mode
("At least one output file must be specified"), so it is not checked.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from mco.core.subprocess_utils import run_tool
from mco.domain.models import ProbedMediaInfo
from mco.tools.detection import require_ffmpeg
from mco.tools.ffmpeg_progress import parse_timestamp

logger = logging.getLogger(__name__)

_CONTAINER_RE = re.compile(r"Input #0, ([^,]+(?:,[^,\s]+)*), from")
_CONTAINER_SHORT_RE = re.compile(r"Input #0, ([^,]+)")
_DURATION_RE = re.compile(r"Duration: (\d{2}:\d{2}:\d{2}\.\d{2})")
_BITRATE_RE = re.compile(r"bitrate: (\d+) kb/s")
_VIDEO_RE = re.compile(
    r"Stream #\d+:\d+[^\n]*?: Video: ([^,\s]+)[^\n]*?[ ,](\d{2,5})x(\d{2,5})\b"
    r"(?:[^\n]*?, ([\d.]+) fps)?"
)
_AUDIO_RE = re.compile(
    r"Audio: ([^,\s]+)[^,]*, (\d+) Hz, ([^,]+)(?:, [^,\n]+(?:, (\d+) kb/s)?)?"
)
_VIDEO_BITRATE_RE = re.compile(r"Video: [^\n]*?, (\d+) kb/s")


def _to_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _to_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def parse_probe_output(text: str) -> ProbedMediaInfo:
    """Parse an ffmpeg info banner into ProbedMediaInfo.

    Only the first video and first audio stream are considered. Fields not
    present in the banner are left as None.

    Args:
        text: ffmpeg stderr from `ffmpeg -hide_banner -i <file>`.

    Returns:
        Parsed stream information.
    """
    container = None
    match = _CONTAINER_RE.search(text)
    if match:
        container = match.group(1).strip()
    else:
        match = _CONTAINER_SHORT_RE.search(text)
        if match:
            container = match.group(1).strip()

    duration = None
    match = _DURATION_RE.search(text)
    if match:
        duration = parse_timestamp(match.group(1))

    overall_bitrate = None
    match = _BITRATE_RE.search(text)
    if match:
        overall_bitrate = _to_int(match.group(1))

    video_codec = width = height = frame_rate = video_bitrate = None
    match = _VIDEO_RE.search(text)
    if match:
        video_codec = match.group(1)
        width = _to_int(match.group(2))
        height = _to_int(match.group(3))
        frame_rate = _to_float(match.group(4))
        bitrate_match = _VIDEO_BITRATE_RE.search(text)
        if bitrate_match:
            video_bitrate = _to_int(bitrate_match.group(1))

    audio_codec = sample_rate = channels = audio_bitrate = None
    match = _AUDIO_RE.search(text)
    if match:
        audio_codec = match.group(1)
        sample_rate = _to_int(match.group(2))
        channels = match.group(3).strip()
        audio_bitrate = _to_int(match.group(4))

    if video_bitrate is None and overall_bitrate is not None and video_codec:
        video_bitrate = max(overall_bitrate - (audio_bitrate or 0), 0)

    return ProbedMediaInfo(
        container=container,
        duration_seconds=duration,
        video_codec=video_codec,
        width=width,
        height=height,
        frame_rate=frame_rate,
        audio_codec=audio_codec,
        audio_sample_rate=sample_rate,
        audio_channels=channels,
        audio_bitrate_kbps=audio_bitrate,
        video_bitrate_kbps=video_bitrate,
        overall_bitrate_kbps=overall_bitrate,
    )


class FFmpegProber:
    """Probe media files by running ffmpeg in info mode."""

    def __init__(self, ffmpeg_path: Path | None = None, timeout: float = 60.0) -> None:
        """Initialize the prober.

        Args:
            ffmpeg_path: Explicit ffmpeg binary. Resolved lazily from PATH
                when not given.
            timeout: Seconds before the probe is abandoned.
        """
        self._ffmpeg_path = ffmpeg_path
        self._timeout = timeout

    def _run(self, path: Path) -> str:
        ffmpeg = self._ffmpeg_path or require_ffmpeg()
        output = run_tool([ffmpeg, "-hide_banner", "-i", path], timeout=self._timeout)
        return output.text

    def probe(self, path: Path) -> ProbedMediaInfo:
        """Return stream information for a file.

        Raises:
            ProcessSpawnError: If ffmpeg cannot be started or times out.
        """
        info = parse_probe_output(self._run(Path(path)))
        logger.debug(
            "Probed %s: container=%s duration=%s resolution=%s",
            Path(path).name,
            info.container,
            info.duration_seconds,
            info.resolution,
        )
        return info

    def probe_container(self, path: Path) -> str | None:
        """Return only the container string, for format resolution."""
        return self.probe(path).container
