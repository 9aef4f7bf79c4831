"""Tests for tool detection."""

from pathlib import Path
from unittest.mock import patch

import pytest

from mco.exceptions import ProcessSpawnError
from mco.tools.detection import find_tool, require_ffmpeg


class TestFindTool:
    """Tests for find_tool."""

    def test_configured_path_used_when_file(self, tmp_path):
        binary = tmp_path / "ffmpeg"
        binary.write_text("")
        assert find_tool("ffmpeg", binary) == binary

    def test_falls_back_to_path(self, tmp_path):
        """A configured path that is not a file should fall back to PATH."""
        with patch("mco.tools.detection.shutil.which", return_value="/usr/bin/ffmpeg"):
            assert find_tool("ffmpeg", tmp_path / "missing") == Path("/usr/bin/ffmpeg")

    def test_not_found(self):
        with patch("mco.tools.detection.shutil.which", return_value=None):
            assert find_tool("ffmpeg") is None


class TestRequireFFmpeg:
    """Tests for require_ffmpeg."""

    def test_missing_raises(self):
        with patch("mco.tools.detection.shutil.which", return_value=None):
            with pytest.raises(ProcessSpawnError, match="not installed"):
                require_ffmpeg()

    def test_found(self):
        with patch("mco.tools.detection.shutil.which", return_value="/opt/ffmpeg"):
            assert require_ffmpeg() == Path("/opt/ffmpeg")
