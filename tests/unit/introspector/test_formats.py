"""Tests for format resolution."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from mco.domain.enums import MediaFormat
from mco.exceptions import UnsupportedFormatError
from mco.introspector.formats import (
    FormatResolver,
    format_from_extension,
    map_container_to_format,
)


class TestMapContainerToFormat:
    """Tests for container alias mapping."""

    def test_iso_family_maps_to_mp4(self):
        """The combined demuxer name should resolve to mp4, not mov."""
        assert map_container_to_format("mov,mp4,m4a,3gp,3g2,mj2") is MediaFormat.MP4

    def test_mov(self):
        assert map_container_to_format("mov") is MediaFormat.MOV

    def test_quicktime(self):
        assert map_container_to_format("QuickTime / MOV") is MediaFormat.MOV

    def test_unknown_and_empty(self):
        assert map_container_to_format("matroska,webm") is None
        assert map_container_to_format(None) is None
        assert map_container_to_format("") is None


class TestFormatFromExtension:
    """Tests for extension lookup."""

    def test_case_insensitive(self):
        assert format_from_extension(Path("clip.MP4")) is MediaFormat.MP4
        assert format_from_extension(Path("clip.Mov")) is MediaFormat.MOV

    def test_unknown_extension(self):
        assert format_from_extension(Path("clip.mkv")) is None
        assert format_from_extension(Path("clip")) is None


class TestFormatResolver:
    """Tests for FormatResolver."""

    def test_extension_wins_without_probe(self):
        """A known extension should not trigger probing."""
        probe = MagicMock(return_value="matroska,webm")
        resolver = FormatResolver(probe_container=probe)

        assert resolver.resolve(Path("a.mov")) is MediaFormat.MOV
        probe.assert_not_called()

    def test_unknown_extension_falls_back_to_content(self):
        """An unknown extension should be resolved from the container string."""
        probe = MagicMock(return_value="mov,mp4,m4a,3gp,3g2,mj2")
        resolver = FormatResolver(probe_container=probe)

        assert resolver.resolve(Path("download.bin")) is MediaFormat.MP4
        probe.assert_called_once_with(Path("download.bin"))

    def test_probe_true_prefers_content(self):
        """With probe=True the content should override the extension."""
        resolver = FormatResolver(probe_container=lambda path: "mov")
        assert resolver.resolve(Path("misnamed.mp4"), probe=True) is MediaFormat.MOV

    def test_probe_true_falls_back_to_extension(self):
        resolver = FormatResolver(probe_container=lambda path: None)
        assert resolver.resolve(Path("a.mp4"), probe=True) is MediaFormat.MP4

    def test_unsupported_names_container(self):
        """The error should name the raw container string."""
        resolver = FormatResolver(probe_container=lambda path: "matroska,webm")
        with pytest.raises(UnsupportedFormatError) as exc_info:
            resolver.resolve(Path("movie.mkv"))
        assert exc_info.value.value == "matroska,webm"
        assert "matroska,webm" in str(exc_info.value)

    def test_unsupported_names_extension_without_prober(self):
        resolver = FormatResolver()
        with pytest.raises(UnsupportedFormatError) as exc_info:
            resolver.resolve(Path("movie.avi"))
        assert exc_info.value.value == ".avi"

    def test_resolve_output_uses_extension_only(self):
        probe = MagicMock()
        resolver = FormatResolver(probe_container=probe)
        assert resolver.resolve_output(Path("out/new.mov")) is MediaFormat.MOV
        probe.assert_not_called()

    def test_resolve_output_unknown(self):
        with pytest.raises(UnsupportedFormatError):
            FormatResolver().resolve_output(Path("out/new.webm"))
