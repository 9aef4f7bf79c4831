"""Tests for settings validation."""

import pytest

from mco.settings.validation import validate_settings


class TestValidateSettings:
    """Tests for validate_settings."""

    def test_valid_settings_normalized(self):
        """Valid values should pass and be normalized."""
        result = validate_settings(
            {
                "video_codec": "H264",
                "video_bitrate": 2000,
                "resolution": "1920X1080",
                "video_filters": "hflip",
                "frame_rate": 29.97,
            }
        )

        assert result.success
        assert result.values == {
            "video_codec": "h264",
            "video_bitrate": "2000",
            "resolution": "1920x1080",
            "video_filters": ("hflip",),
            "frame_rate": 29.97,
        }

    def test_all_violations_collected(self):
        """Every failing field should be reported, not just the first."""
        result = validate_settings(
            {
                "resolution": "99999x1",
                "crf": 80,
                "video_codec": "divx",
                "audio_bitrate": "loud",
            }
        )

        assert not result.success
        fields = {v.field for v in result.violations}
        assert fields == {"resolution", "crf", "video_codec", "audio_bitrate"}
        resolution = next(v for v in result.violations if v.field == "resolution")
        assert "out of range" in resolution.message
        assert resolution.value == "99999x1"

    def test_malformed_resolution(self):
        result = validate_settings({"resolution": "1080p"})
        assert "WxH" in result.violations[0].message

    @pytest.mark.parametrize("value", ["2000k\n", "2000k ", " 2000k", "2000kb"])
    def test_bitrate_must_match_whole_value(self, value):
        """Trailing newlines or junk must not slip through to the encoder."""
        result = validate_settings({"video_bitrate": value})
        assert not result.success
        assert result.violations[0].field == "video_bitrate"

    def test_unknown_key_is_violation(self):
        result = validate_settings({"turbo": True})
        assert result.violations[0].field == "turbo"

    def test_none_values_skipped(self):
        result = validate_settings({"crf": None, "video_bitrate": "2M"})
        assert result.success
        assert result.values == {"video_bitrate": "2M"}

    def test_unknown_encoding_preset_warns(self):
        """An unknown encoding preset is passed through with a warning."""
        result = validate_settings({"preset": "ludicrous"})
        assert result.success
        assert result.values["preset"] == "ludicrous"
        assert "ludicrous" in result.warnings[0]

    def test_bool_fields_reject_strings(self):
        result = validate_settings({"preserve_metadata": "yes"})
        assert result.violations[0].field == "preserve_metadata"

    def test_crf_rejects_bool(self):
        assert not validate_settings({"crf": True}).success

    def test_frame_rate_bounds(self):
        assert not validate_settings({"frame_rate": 0}).success
        assert not validate_settings({"frame_rate": 240}).success
        assert validate_settings({"frame_rate": 120}).success

    def test_numeric_level_stringified(self):
        assert validate_settings({"level": 4.1}).values["level"] == "4.1"

    def test_violation_to_dict(self):
        violation = validate_settings({"crf": -1}).violations[0]
        assert violation.to_dict()["field"] == "crf"
