"""FFmpeg argument building for conversions.

Arguments are emitted in a fixed order because several ffmpeg options
apply positionally to the next output stream. The encoder binary itself
is not included; the runner prepends it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mco.core.codecs import get_audio_encoder, get_video_encoder
from mco.core.formatting import format_number
from mco.domain.models import ProbedMediaInfo
from mco.settings.types import ResolvedSettings

logger = logging.getLogger(__name__)

PROGRESS_ARGS = ["-progress", "pipe:1"]


def build_video_args(settings: ResolvedSettings) -> list[str]:
    """Build codec, quality and preset arguments for the video stream.

    CRF takes precedence over a target bitrate when both are set.
    """
    args: list[str] = []
    if settings.video_codec:
        args.extend(["-c:v", get_video_encoder(settings.video_codec)])

    if settings.crf is not None:
        args.extend(["-crf", str(settings.crf)])
    elif settings.video_bitrate:
        args.extend(["-b:v", settings.video_bitrate])

    if settings.preset:
        args.extend(["-preset", settings.preset])
    return args


def build_audio_args(settings: ResolvedSettings) -> list[str]:
    """Build codec, bitrate, sample rate, channel and quality arguments."""
    args: list[str] = []
    encoder = get_audio_encoder(settings.audio_codec) if settings.audio_codec else None
    if encoder:
        args.extend(["-c:a", encoder])
    if settings.audio_bitrate:
        args.extend(["-b:a", settings.audio_bitrate])
    if settings.audio_sample_rate:
        args.extend(["-ar", str(settings.audio_sample_rate)])
    if settings.audio_channels:
        args.extend(["-ac", str(settings.audio_channels)])
    # Only the native AAC encoder understands -q:a in this form
    if settings.audio_quality is not None and encoder == "aac":
        args.extend(["-q:a", format_number(settings.audio_quality)])
    return args


def build_scale_filter(
    settings: ResolvedSettings, probed_info: ProbedMediaInfo | None = None
) -> str | None:
    """Return the scale filter for the target resolution, if any.

    With a known input size and aspect ratio maintained (the default), the
    output is fitted inside the target box. Otherwise the frame is scaled
    to exactly the target size.
    """
    if not settings.resolution:
        return None
    width, height = settings.width, settings.height
    input_known = probed_info is not None and probed_info.resolution is not None
    if input_known and settings.maintain_aspect_ratio:
        return f"scale={width}:{height}:force_original_aspect_ratio=decrease"
    return f"scale={width}:{height}"


def build_filter_chain(
    settings: ResolvedSettings, probed_info: ProbedMediaInfo | None = None
) -> str | None:
    """Join the scale filter and custom filters into one -vf chain."""
    filters: list[str] = []
    scale = build_scale_filter(settings, probed_info)
    if scale:
        filters.append(scale)
    filters.extend(settings.video_filters)
    return ",".join(filters) if filters else None


def build(
    input_path: Path,
    output_path: Path,
    settings: ResolvedSettings,
    probed_info: ProbedMediaInfo | None = None,
) -> list[str]:
    """Build ffmpeg arguments for a re-encoding conversion.

    Args:
        input_path: Source file.
        output_path: Destination file.
        settings: Resolved settings for the job.
        probed_info: Input stream information, when available.

    Returns:
        Argument list, without the ffmpeg binary.
    """
    args = ["-i", str(input_path)]
    args.extend(build_video_args(settings))
    args.extend(build_audio_args(settings))

    if settings.frame_rate is not None:
        args.extend(["-r", format_number(settings.frame_rate)])

    filter_chain = build_filter_chain(settings, probed_info)
    if filter_chain:
        args.extend(["-vf", filter_chain])

    if settings.preserve_metadata:
        args.extend(["-map_metadata", "0", "-map_chapters", "0"])
    if settings.movflags:
        args.extend(["-movflags", settings.movflags])

    if settings.profile:
        args.extend(["-profile:v", settings.profile])
    if settings.level:
        args.extend(["-level", settings.level])
    if settings.pixel_format:
        args.extend(["-pix_fmt", settings.pixel_format])

    if settings.gop_size:
        args.extend(["-g", str(settings.gop_size)])
    if settings.keyint_min:
        args.extend(["-keyint_min", str(settings.keyint_min)])
    if settings.bframes is not None:
        args.extend(["-bf", str(settings.bframes)])

    if settings.maxrate:
        args.extend(["-maxrate", settings.maxrate])
    if settings.bufsize:
        args.extend(["-bufsize", settings.bufsize])

    if settings.threads:
        args.extend(["-threads", str(settings.threads)])

    args.extend(PROGRESS_ARGS)
    args.append("-y")
    args.append(str(output_path))

    logger.debug("Built ffmpeg arguments: %s", " ".join(args))
    return args


def build_stream_copy(
    input_path: Path, output_path: Path, preserve_metadata: bool = True
) -> list[str]:
    """Build ffmpeg arguments that copy every stream without re-encoding."""
    args = ["-i", str(input_path), "-c", "copy"]
    if preserve_metadata:
        args.extend(["-map_metadata", "0"])
    args.extend(PROGRESS_ARGS)
    args.append("-y")
    args.append(str(output_path))
    return args
