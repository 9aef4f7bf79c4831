"""Collect-all validation of merged conversion settings.

Every constraint is checked and every violation reported together, so a
caller fixing their settings sees all problems at once. Values are also
normalized (bitrates stringified, codec names lower-cased, filter lists
turned into tuples) so the result can be stored in ResolvedSettings.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from mco.core.codecs import ENCODING_PRESETS, VALID_AUDIO_CODECS, VALID_VIDEO_CODECS
from mco.settings.types import SETTING_KEYS

logger = logging.getLogger(__name__)

MAX_WIDTH = 7680
MAX_HEIGHT = 4320
MAX_FRAME_RATE = 120
CRF_MIN, CRF_MAX = 0, 51
MAX_AUDIO_CHANNELS = 8

BITRATE_PATTERN = re.compile(r"\d+[kmKM]?")
RESOLUTION_PATTERN = re.compile(r"(\d+)x(\d+)")

BITRATE_FIELDS = ("video_bitrate", "audio_bitrate", "maxrate", "bufsize")
STRING_FIELDS = ("profile", "level", "pixel_format", "movflags")
BOOL_FIELDS = ("maintain_aspect_ratio", "preserve_metadata")


@dataclass(frozen=True)
class SettingViolation:
    """A single setting that failed validation.

    Attributes:
        field: Setting name (e.g. "resolution").
        value: The rejected value.
        message: Human-readable reason.
    """

    field: str
    value: Any
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"field": self.field, "value": self.value, "message": self.message}


@dataclass
class ValidationResult:
    """Outcome of validating a settings mapping.

    Attributes:
        values: Normalized values for the fields that passed.
        violations: Every failed constraint.
        warnings: Non-fatal observations (e.g. unknown encoding preset).
    """

    values: dict[str, Any] = field(default_factory=dict)
    violations: list[SettingViolation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no constraint was violated."""
        return not self.violations


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_video_codec(value: Any) -> tuple[Any, str | None]:
    if not isinstance(value, str) or value.casefold() not in VALID_VIDEO_CODECS:
        return value, f"unsupported video codec {value!r}"
    return value.casefold(), None


def _check_audio_codec(value: Any) -> tuple[Any, str | None]:
    if not isinstance(value, str) or value.casefold() not in VALID_AUDIO_CODECS:
        return value, f"unsupported audio codec {value!r}"
    return value.casefold(), None


def _check_resolution(value: Any) -> tuple[Any, str | None]:
    match = RESOLUTION_PATTERN.fullmatch(str(value).strip().lower())
    if not isinstance(value, str) or not match:
        return value, "resolution must be in WxH format (e.g. 1920x1080)"
    width, height = int(match.group(1)), int(match.group(2))
    if not 0 < width <= MAX_WIDTH or not 0 < height <= MAX_HEIGHT:
        return value, (
            f"resolution {width}x{height} is out of range "
            f"(max {MAX_WIDTH}x{MAX_HEIGHT})"
        )
    return f"{width}x{height}", None


def _check_frame_rate(value: Any) -> tuple[Any, str | None]:
    if not _is_number(value) or not 0 < value <= MAX_FRAME_RATE:
        return value, f"frame rate must be a number in (0, {MAX_FRAME_RATE}]"
    return value, None


def _check_bitrate(value: Any) -> tuple[Any, str | None]:
    if _is_int(value) and value >= 0:
        return str(value), None
    if not isinstance(value, str) or not BITRATE_PATTERN.fullmatch(value):
        return value, "bitrate must look like 2000k, 5M or 128000"
    return value, None


def _check_crf(value: Any) -> tuple[Any, str | None]:
    if not _is_int(value) or not CRF_MIN <= value <= CRF_MAX:
        return value, f"CRF must be an integer in [{CRF_MIN}, {CRF_MAX}]"
    return value, None


def _positive_int(value: Any) -> tuple[Any, str | None]:
    if not _is_int(value) or value <= 0:
        return value, "must be a positive integer"
    return value, None


def _non_negative_int(value: Any) -> tuple[Any, str | None]:
    if not _is_int(value) or value < 0:
        return value, "must be a non-negative integer"
    return value, None


def _check_channels(value: Any) -> tuple[Any, str | None]:
    if not _is_int(value) or not 1 <= value <= MAX_AUDIO_CHANNELS:
        return value, f"audio channels must be an integer in [1, {MAX_AUDIO_CHANNELS}]"
    return value, None


def _check_audio_quality(value: Any) -> tuple[Any, str | None]:
    if not _is_number(value) or value < 0:
        return value, "audio quality must be a non-negative number"
    return value, None


def _check_filters(value: Any) -> tuple[Any, str | None]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not all(
        isinstance(item, str) and item.strip() for item in value
    ):
        return value, "video filters must be a list of non-empty strings"
    return tuple(item.strip() for item in value), None


def _check_string(value: Any) -> tuple[Any, str | None]:
    if _is_number(value):
        value = str(value)  # level=4.1 arrives as a float from YAML
    if not isinstance(value, str) or not value.strip():
        return value, "must be a non-empty string"
    return value.strip(), None


def _check_bool(value: Any) -> tuple[Any, str | None]:
    if not isinstance(value, bool):
        return value, "must be true or false"
    return value, None


_CHECKS: dict[str, Callable[[Any], tuple[Any, str | None]]] = {
    "video_codec": _check_video_codec,
    "audio_codec": _check_audio_codec,
    "resolution": _check_resolution,
    "frame_rate": _check_frame_rate,
    "crf": _check_crf,
    "gop_size": _positive_int,
    "keyint_min": _positive_int,
    "bframes": _non_negative_int,
    "threads": _non_negative_int,
    "audio_sample_rate": _positive_int,
    "audio_channels": _check_channels,
    "audio_quality": _check_audio_quality,
    "video_filters": _check_filters,
}
_CHECKS.update({name: _check_bitrate for name in BITRATE_FIELDS})
_CHECKS.update({name: _check_string for name in STRING_FIELDS})
_CHECKS.update({name: _check_bool for name in BOOL_FIELDS})


def validate_settings(settings: Mapping[str, Any]) -> ValidationResult:
    """Validate and normalize a merged settings mapping.

    None values mean "unset" and are skipped. The encoding preset is the
    one soft constraint: an unknown name is passed through with a warning.

    Args:
        settings: Merged settings keyed by ResolvedSettings field name.

    Returns:
        ValidationResult with normalized values, violations and warnings.
    """
    result = ValidationResult()

    for name, value in settings.items():
        if value is None:
            continue

        if name not in SETTING_KEYS:
            result.violations.append(
                SettingViolation(name, value, f"unknown setting {name!r}")
            )
            continue

        if name == "preset":
            if not isinstance(value, str) or not value.strip():
                result.violations.append(
                    SettingViolation(name, value, "must be a non-empty string")
                )
                continue
            if value not in ENCODING_PRESETS:
                result.warnings.append(
                    f"Unknown encoding preset {value!r}, passing through unchanged"
                )
            result.values[name] = value
            continue

        normalized, error = _CHECKS[name](value)
        if error is not None:
            result.violations.append(SettingViolation(name, value, error))
        else:
            result.values[name] = normalized

    if result.violations:
        logger.debug(
            "Settings validation found %d violation(s): %s",
            len(result.violations),
            ", ".join(v.field for v in result.violations),
        )
    return result
