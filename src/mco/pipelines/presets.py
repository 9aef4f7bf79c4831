"""Named quality presets per output format.

A quality preset is a partial settings layer applied between a pipeline's
defaults and the user's overrides.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from mco.domain.enums import MediaFormat

PresetTable = Mapping[str, Mapping[str, Any]]


def _freeze(table: dict[str, dict[str, Any]]) -> PresetTable:
    return MappingProxyType(
        {name: MappingProxyType(dict(values)) for name, values in table.items()}
    )


MP4_PRESETS: PresetTable = _freeze(
    {
        "ultra": {
            "crf": 18,
            "preset": "slow",
            "video_bitrate": "8000k",
            "audio_bitrate": "320k",
        },
        "high": {
            "crf": 20,
            "preset": "medium",
            "video_bitrate": "4000k",
            "audio_bitrate": "192k",
        },
        "medium": {
            "crf": 23,
            "preset": "medium",
            "video_bitrate": "2000k",
            "audio_bitrate": "128k",
        },
        "low": {
            "crf": 28,
            "preset": "fast",
            "video_bitrate": "1000k",
            "audio_bitrate": "96k",
        },
        "web": {
            "crf": 25,
            "preset": "fast",
            "video_bitrate": "1500k",
            "audio_bitrate": "128k",
            "resolution": "1280x720",
        },
    }
)

MOV_PRESETS: PresetTable = _freeze(
    {
        "ultra": {
            "video_bitrate": "10000k",
            "audio_bitrate": "320k",
            "video_codec": "h264",
        },
        "high": {
            "video_bitrate": "5000k",
            "audio_bitrate": "192k",
            "video_codec": "h264",
        },
        "medium": {
            "video_bitrate": "2500k",
            "audio_bitrate": "128k",
            "video_codec": "h264",
        },
        "low": {
            "video_bitrate": "1200k",
            "audio_bitrate": "96k",
            "video_codec": "h264",
        },
        "prores": {"video_codec": "prores", "audio_bitrate": "192k"},
    }
)


class QualityPresetTable:
    """Per-format quality preset lookup.

    Formats without a table of their own fall back to the MP4 table.
    """

    def __init__(self, tables: Mapping[MediaFormat, PresetTable] | None = None) -> None:
        if tables is None:
            tables = {MediaFormat.MP4: MP4_PRESETS, MediaFormat.MOV: MOV_PRESETS}
        self._tables = dict(tables)

    def get(self, media_format: MediaFormat) -> PresetTable:
        """Return the read-only preset table for a format."""
        return self._tables.get(media_format, self._tables[MediaFormat.MP4])

    def get_preset(
        self, media_format: MediaFormat, name: str
    ) -> Mapping[str, Any] | None:
        """Return one preset's settings, or None if the name is unknown."""
        return self.get(media_format).get(name)

    def names(self, media_format: MediaFormat) -> list[str]:
        """Preset names for a format, in definition order."""
        return list(self.get(media_format))


_DEFAULT_TABLE = QualityPresetTable()


def get_preset(media_format: MediaFormat, name: str) -> Mapping[str, Any] | None:
    """Look up a built-in quality preset."""
    return _DEFAULT_TABLE.get_preset(media_format, name)
