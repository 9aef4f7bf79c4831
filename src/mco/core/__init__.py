"""Core utilities package.

This package contains formatting helpers and codec knowledge with no
dependency on the rest of the orchestrator. Short-lived tool invocation
lives in mco.core.subprocess_utils and is imported directly.
"""

from mco.core.codecs import (
    ENCODING_PRESETS,
    VALID_AUDIO_CODECS,
    VALID_VIDEO_CODECS,
    get_audio_encoder,
    get_video_encoder,
    is_hardware_encoder,
)
from mco.core.formatting import format_duration, format_file_size, format_number

__all__ = [
    "ENCODING_PRESETS",
    "VALID_AUDIO_CODECS",
    "VALID_VIDEO_CODECS",
    "format_duration",
    "format_file_size",
    "format_number",
    "get_audio_encoder",
    "get_video_encoder",
    "is_hardware_encoder",
]
