"""Pipeline registry for supported container conversions.

A pipeline pairs an ordered (input, output) format with the codec policy
and default settings used to produce the output container. Descriptors are
built once and never mutated; lookup is a pure function of the pair.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from mco.domain.enums import MediaFormat
from mco.exceptions import PipelineUnsupportedError

logger = logging.getLogger(__name__)

PipelineKey = tuple[MediaFormat, MediaFormat]

QUICKTIME = "quicktime"
WEB = "web"

_QUICKTIME_VIDEO_CODECS = frozenset(
    {"libx264", "libx265", "h264_videotoolbox", "hevc_videotoolbox", "prores"}
)
_WEB_VIDEO_CODECS = frozenset(
    {"libx264", "libx265", "h264_videotoolbox", "hevc_videotoolbox"}
)
_QUICKTIME_AUDIO_CODECS = frozenset({"aac", "pcm_s16le", "alac"})
_WEB_AUDIO_CODECS = frozenset({"aac", "mp3"})


@dataclass(frozen=True)
class ContainerOptions:
    """Container-level behaviour of a pipeline's output."""

    preserve_metadata: bool = True
    fast_start: bool = True
    compatibility_mode: str = WEB


@dataclass(frozen=True)
class PipelineDescriptor:
    """Codec policy and defaults for one ordered format pair.

    Attributes:
        name: Stable identifier, e.g. "mp4_to_mov".
        label: Human-readable name, e.g. "MP4 to MOV".
        input_format: Source container format.
        output_format: Target container format.
        preferred_video_codec: Encoder chosen by default on this platform.
        preferred_audio_codec: Audio encoder chosen by default.
        supported_video_codecs: Video encoders known to suit the container.
        supported_audio_codecs: Audio encoders known to suit the container.
        default_settings: Lowest-priority settings layer.
        container_options: Container flags for the output.
    """

    name: str
    label: str
    input_format: MediaFormat
    output_format: MediaFormat
    preferred_video_codec: str
    preferred_audio_codec: str
    supported_video_codecs: frozenset[str]
    supported_audio_codecs: frozenset[str]
    default_settings: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )
    container_options: ContainerOptions = field(default_factory=ContainerOptions)

    def __post_init__(self) -> None:
        if not isinstance(self.default_settings, MappingProxyType):
            object.__setattr__(
                self, "default_settings", MappingProxyType(dict(self.default_settings))
            )

    @property
    def key(self) -> PipelineKey:
        """Ordered (input, output) pair."""
        return (self.input_format, self.output_format)

    @property
    def is_reencode(self) -> bool:
        """True for same-format pipelines."""
        return self.input_format == self.output_format

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "name": self.name,
            "label": self.label,
            "input_format": self.input_format.value,
            "output_format": self.output_format.value,
            "preferred_video_codec": self.preferred_video_codec,
            "preferred_audio_codec": self.preferred_audio_codec,
            "supported_video_codecs": sorted(self.supported_video_codecs),
            "supported_audio_codecs": sorted(self.supported_audio_codecs),
            "default_settings": dict(self.default_settings),
            "container_options": {
                "preserve_metadata": self.container_options.preserve_metadata,
                "fast_start": self.container_options.fast_start,
                "compatibility_mode": self.container_options.compatibility_mode,
            },
            "is_reencode": self.is_reencode,
        }


class PipelineRegistry:
    """Lookup table of pipelines keyed by ordered format pair.

    The registry is immutable after construction. Registering two
    descriptors for the same pair is an error.
    """

    def __init__(self, descriptors: Iterable[PipelineDescriptor]) -> None:
        """Initialize the registry.

        Args:
            descriptors: Pipelines in registration order.

        Raises:
            ValueError: If two descriptors share a format pair.
        """
        self._pipelines: dict[PipelineKey, PipelineDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.key in self._pipelines:
                raise ValueError(
                    f"Duplicate pipeline for {descriptor.input_format.value} "
                    f"-> {descriptor.output_format.value}"
                )
            self._pipelines[descriptor.key] = descriptor

    def lookup(
        self, input_format: MediaFormat, output_format: MediaFormat
    ) -> PipelineDescriptor | None:
        """Return the pipeline for a pair, or None if unsupported."""
        return self._pipelines.get((input_format, output_format))

    def require(
        self, input_format: MediaFormat, output_format: MediaFormat
    ) -> PipelineDescriptor:
        """Return the pipeline for a pair.

        Raises:
            PipelineUnsupportedError: If no pipeline is registered.
        """
        pipeline = self.lookup(input_format, output_format)
        if pipeline is None:
            raise PipelineUnsupportedError(input_format.value, output_format.value)
        return pipeline

    def is_supported(
        self, input_format: MediaFormat, output_format: MediaFormat
    ) -> bool:
        """True if a pipeline exists for the pair."""
        return (input_format, output_format) in self._pipelines

    def available(self) -> list[PipelineDescriptor]:
        """All pipelines in registration order."""
        return list(self._pipelines.values())

    def __len__(self) -> int:
        return len(self._pipelines)

    def __contains__(self, key: object) -> bool:
        return key in self._pipelines


def preferred_video_encoder(platform: str = sys.platform) -> str:
    """Return the default H.264 encoder for a platform.

    macOS builds ship VideoToolbox hardware encoding; everything else
    falls back to libx264.
    """
    return "h264_videotoolbox" if platform == "darwin" else "libx264"


def build_default_registry(platform: str = sys.platform) -> PipelineRegistry:
    """Build the registry of the four MP4/MOV pipelines.

    Platform only changes the preferred and default video encoder; the
    supported codec lists are identical everywhere.

    Args:
        platform: Value in the form of sys.platform.

    Returns:
        A populated PipelineRegistry.
    """
    video = preferred_video_encoder(platform)
    mp4, mov = MediaFormat.MP4, MediaFormat.MOV

    descriptors = [
        PipelineDescriptor(
            name="mp4_to_mov",
            label="MP4 to MOV",
            input_format=mp4,
            output_format=mov,
            preferred_video_codec=video,
            preferred_audio_codec="aac",
            supported_video_codecs=_QUICKTIME_VIDEO_CODECS,
            supported_audio_codecs=_QUICKTIME_AUDIO_CODECS,
            default_settings={
                "video_codec": video,
                "audio_codec": "aac",
                "video_bitrate": "2000k",
                "audio_bitrate": "128k",
                "movflags": "+faststart",
                "pixel_format": "yuv420p",
            },
            container_options=ContainerOptions(compatibility_mode=QUICKTIME),
        ),
        PipelineDescriptor(
            name="mov_to_mp4",
            label="MOV to MP4",
            input_format=mov,
            output_format=mp4,
            preferred_video_codec=video,
            preferred_audio_codec="aac",
            supported_video_codecs=_WEB_VIDEO_CODECS,
            supported_audio_codecs=_WEB_AUDIO_CODECS,
            default_settings={
                "video_codec": video,
                "audio_codec": "aac",
                "crf": 23,
                "preset": "medium",
                "audio_bitrate": "128k",
                "movflags": "+faststart",
                "pixel_format": "yuv420p",
            },
            container_options=ContainerOptions(compatibility_mode=WEB),
        ),
        PipelineDescriptor(
            name="mp4_to_mp4",
            label="MP4 Re-encode",
            input_format=mp4,
            output_format=mp4,
            preferred_video_codec=video,
            preferred_audio_codec="aac",
            supported_video_codecs=_WEB_VIDEO_CODECS,
            supported_audio_codecs=_WEB_AUDIO_CODECS,
            default_settings={
                "video_codec": video,
                "audio_codec": "aac",
                "crf": 23,
                "preset": "medium",
                "audio_bitrate": "128k",
                "movflags": "+faststart",
            },
            container_options=ContainerOptions(compatibility_mode=WEB),
        ),
        PipelineDescriptor(
            name="mov_to_mov",
            label="MOV Re-encode",
            input_format=mov,
            output_format=mov,
            preferred_video_codec=video,
            preferred_audio_codec="aac",
            supported_video_codecs=_QUICKTIME_VIDEO_CODECS,
            supported_audio_codecs=_QUICKTIME_AUDIO_CODECS,
            default_settings={
                "video_codec": video,
                "audio_codec": "aac",
                "video_bitrate": "2000k",
                "audio_bitrate": "128k",
                "pixel_format": "yuv420p",
            },
            container_options=ContainerOptions(compatibility_mode=QUICKTIME),
        ),
    ]
    registry = PipelineRegistry(descriptors)
    logger.debug(
        "Registered %d pipelines (video encoder: %s)", len(registry), video
    )
    return registry
