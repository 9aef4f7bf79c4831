"""Tests for core formatting helpers."""

import pytest

from mco.core.formatting import format_duration, format_file_size, format_number


class TestFormatDuration:
    """Tests for format_duration."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (0, "0:00"),
            (5, "0:05"),
            (65, "1:05"),
            (3599, "59:59"),
            (3600, "1:00:00"),
            (3723.9, "1:02:03"),
        ],
    )
    def test_formats(self, seconds, expected):
        """Should format as M:SS below an hour and H:MM:SS above."""
        assert format_duration(seconds) == expected

    def test_none_and_negative_are_zero(self):
        """None and negative durations should render as 0:00."""
        assert format_duration(None) == "0:00"
        assert format_duration(-12) == "0:00"


class TestFormatFileSize:
    """Tests for format_file_size."""

    def test_units(self):
        """Should pick the largest fitting unit."""
        assert format_file_size(512) == "512 B"
        assert format_file_size(1536) == "1.5 KB"
        assert format_file_size(128 * 1024**2) == "128.0 MB"
        assert format_file_size(int(4.2 * 1024**3)) == "4.2 GB"


class TestFormatNumber:
    """Tests for format_number."""

    def test_integral_float_drops_fraction(self):
        """30.0 should become "30"."""
        assert format_number(30.0) == "30"

    def test_fractional_float_kept(self):
        """29.97 should stay as is."""
        assert format_number(29.97) == "29.97"

    def test_int(self):
        assert format_number(24) == "24"
