"""Resolved conversion settings."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any


@dataclass(frozen=True)
class ResolvedSettings:
    """Final, validated encoder parameters for one job.

    Produced by SettingsResolver and never mutated; a re-resolution yields
    a new value (see dataclasses.replace). Every field is within its valid
    domain.
    """

    video_codec: str | None = None
    audio_codec: str | None = None
    video_bitrate: str | None = None
    audio_bitrate: str | None = None
    crf: int | None = None
    preset: str | None = None
    frame_rate: float | int | None = None
    resolution: str | None = None
    maintain_aspect_ratio: bool = True
    video_filters: tuple[str, ...] = ()
    audio_sample_rate: int | None = None
    audio_channels: int | None = None
    audio_quality: float | int | None = None
    profile: str | None = None
    level: str | None = None
    pixel_format: str | None = None
    gop_size: int | None = None
    keyint_min: int | None = None
    bframes: int | None = None
    maxrate: str | None = None
    bufsize: str | None = None
    threads: int | None = None
    movflags: str | None = None
    preserve_metadata: bool = True
    applied_preset: str | None = None
    warnings: tuple[str, ...] = ()

    @property
    def width(self) -> int | None:
        """Target width parsed from resolution."""
        if not self.resolution:
            return None
        return int(self.resolution.lower().split("x")[0])

    @property
    def height(self) -> int | None:
        """Target height parsed from resolution."""
        if not self.resolution:
            return None
        return int(self.resolution.lower().split("x")[1])

    @property
    def uses_crf(self) -> bool:
        """True when quality is CRF-driven rather than bitrate-driven."""
        return self.crf is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output, omitting unset values."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or value == ():
                continue
            result[f.name] = list(value) if isinstance(value, tuple) else value
        return result


# Keys a caller may set. applied_preset and warnings are bookkeeping.
SETTING_KEYS: frozenset[str] = frozenset(
    f.name
    for f in fields(ResolvedSettings)
    if f.name not in ("applied_preset", "warnings")
)
