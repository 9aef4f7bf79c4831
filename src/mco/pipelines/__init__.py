"""Conversion pipelines and quality presets."""

from mco.pipelines.presets import (
    MOV_PRESETS,
    MP4_PRESETS,
    QualityPresetTable,
    get_preset,
)
from mco.pipelines.registry import (
    ContainerOptions,
    PipelineDescriptor,
    PipelineKey,
    PipelineRegistry,
    build_default_registry,
    preferred_video_encoder,
)

__all__ = [
    "MOV_PRESETS",
    "MP4_PRESETS",
    "ContainerOptions",
    "PipelineDescriptor",
    "PipelineKey",
    "PipelineRegistry",
    "QualityPresetTable",
    "build_default_registry",
    "get_preset",
    "preferred_video_encoder",
]
