"""Layered settings resolution.

Settings are merged from three layers, lowest priority first:

1. Pipeline defaults (plus the container's metadata policy)
2. Quality preset, looked up by name in the output format's table
3. User overrides

An override of None clears the value inherited from lower layers, which
is how a caller switches from CRF to bitrate mode (``crf=None``).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from mco.core.codecs import get_audio_encoder, get_video_encoder
from mco.exceptions import SettingsValidationError
from mco.pipelines.presets import QualityPresetTable
from mco.pipelines.registry import PipelineDescriptor
from mco.settings.types import ResolvedSettings
from mco.settings.validation import validate_settings

logger = logging.getLogger(__name__)


def normalize_key(key: str) -> str:
    """Normalize a user-supplied setting name ("video-bitrate" -> "video_bitrate")."""
    return key.strip().replace("-", "_").lower()


def _supports(codec: str, supported: frozenset[str], encoder: str) -> bool:
    return codec == "copy" or codec in supported or encoder in supported


class SettingsResolver:
    """Merge and validate settings for a pipeline."""

    def __init__(self, presets: QualityPresetTable | None = None) -> None:
        self._presets = presets or QualityPresetTable()

    def merge(
        self,
        pipeline: PipelineDescriptor,
        preset_name: str | None = None,
        user_overrides: Mapping[str, Any] | None = None,
    ) -> tuple[dict[str, Any], str | None, list[str]]:
        """Merge the three layers without validating.

        Returns:
            Tuple of (merged settings, applied preset name, warnings).
        """
        warnings: list[str] = []
        merged: dict[str, Any] = {
            "preserve_metadata": pipeline.container_options.preserve_metadata
        }
        merged.update(pipeline.default_settings)

        applied_preset = None
        if preset_name:
            preset = self._presets.get_preset(pipeline.output_format, preset_name)
            if preset is None:
                warnings.append(
                    f"Unknown quality preset {preset_name!r} for "
                    f"{pipeline.output_format.value}, no preset applied"
                )
                logger.warning(
                    "Unknown quality preset %r for %s",
                    preset_name,
                    pipeline.output_format.value,
                )
            else:
                merged.update(preset)
                applied_preset = preset_name

        for key, value in (user_overrides or {}).items():
            name = normalize_key(key)
            if value is None:
                merged.pop(name, None)
            else:
                merged[name] = value

        return merged, applied_preset, warnings

    def resolve(
        self,
        pipeline: PipelineDescriptor,
        preset_name: str | None = None,
        user_overrides: Mapping[str, Any] | None = None,
    ) -> ResolvedSettings:
        """Resolve final settings for a job.

        Args:
            pipeline: The pipeline selected for the job.
            preset_name: Optional quality preset name.
            user_overrides: Partial settings from the caller.

        Returns:
            Validated ResolvedSettings.

        Raises:
            SettingsValidationError: If any setting is out of its domain.
                All violations are reported together.
        """
        merged, applied_preset, warnings = self.merge(
            pipeline, preset_name, user_overrides
        )

        result = validate_settings(merged)
        warnings.extend(result.warnings)
        if not result.success:
            raise SettingsValidationError(result.violations)

        values = result.values
        video_codec = values.get("video_codec")
        if video_codec and not _supports(
            video_codec,
            pipeline.supported_video_codecs,
            get_video_encoder(video_codec),
        ):
            warnings.append(
                f"Video codec {video_codec!r} is not among the codecs known to "
                f"suit {pipeline.label}"
            )
        audio_codec = values.get("audio_codec")
        if audio_codec and not _supports(
            audio_codec,
            pipeline.supported_audio_codecs,
            get_audio_encoder(audio_codec),
        ):
            warnings.append(
                f"Audio codec {audio_codec!r} is not among the codecs known to "
                f"suit {pipeline.label}"
            )

        for warning in result.warnings:
            logger.warning("%s", warning)

        return ResolvedSettings(
            **values, applied_preset=applied_preset, warnings=tuple(warnings)
        )
