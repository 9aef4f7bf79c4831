"""Codec registry: allow-lists and encoder mapping.

Single source of truth for which codec names settings may carry and which
ffmpeg encoder a logical codec name selects.
"""

from __future__ import annotations

# =============================================================================
# Allow-lists
# =============================================================================
# Settings may name either a logical codec ("h264") or a concrete encoder
# ("libx264"); both forms are accepted.

VALID_VIDEO_CODECS: frozenset[str] = frozenset(
    {
        # Logical codec names
        "h264",
        "h265",
        "hevc",
        "vp8",
        "vp9",
        "av1",
        "prores",
        "dnxhd",
        "mpeg4",
        "mjpeg",
        "copy",
        # Encoder names
        "libx264",
        "libx265",
        "h264_videotoolbox",
        "hevc_videotoolbox",
        "prores_ks",
        "libvpx",
        "libvpx-vp9",
        "libaom-av1",
        "libsvtav1",
    }
)

VALID_AUDIO_CODECS: frozenset[str] = frozenset(
    {
        "aac",
        "mp3",
        "libmp3lame",
        "ac3",
        "eac3",
        "flac",
        "alac",
        "opus",
        "libopus",
        "pcm_s16le",
        "pcm_s24le",
        "copy",
    }
)

# Speed/quality tradeoff names, fastest first.
ENCODING_PRESETS: tuple[str, ...] = (
    "ultrafast",
    "superfast",
    "veryfast",
    "faster",
    "fast",
    "medium",
    "slow",
    "slower",
    "veryslow",
)

# =============================================================================
# Encoder mapping
# =============================================================================

VIDEO_ENCODERS: dict[str, str] = {
    "h264": "libx264",
    "h265": "libx265",
    "hevc": "libx265",
    "vp8": "libvpx",
    "vp9": "libvpx-vp9",
    "av1": "libaom-av1",
    "prores": "prores_ks",
}

AUDIO_ENCODERS: dict[str, str] = {
    "mp3": "libmp3lame",
    "opus": "libopus",
}

HARDWARE_ENCODER_SUFFIXES = (
    "_nvenc",
    "_vaapi",
    "_qsv",
    "_amf",
    "_videotoolbox",
)


def get_video_encoder(codec: str) -> str:
    """Map a video codec name to the ffmpeg encoder that produces it.

    Encoder names and unknown names pass through unchanged.

    Args:
        codec: Logical codec ("h264") or encoder ("libx264") name.

    Returns:
        ffmpeg encoder name.
    """
    normalized = codec.casefold()
    return VIDEO_ENCODERS.get(normalized, normalized)


def get_audio_encoder(codec: str) -> str:
    """Map an audio codec name to the ffmpeg encoder that produces it."""
    normalized = codec.casefold()
    return AUDIO_ENCODERS.get(normalized, normalized)


def is_hardware_encoder(encoder: str) -> bool:
    """True if the encoder name denotes a hardware-accelerated encoder."""
    return any(suffix in encoder for suffix in HARDWARE_ENCODER_SUFFIXES)
