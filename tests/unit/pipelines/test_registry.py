"""Tests for the pipeline registry."""

import pytest

from mco.domain.enums import MediaFormat
from mco.exceptions import PipelineUnsupportedError
from mco.pipelines.registry import (
    PipelineDescriptor,
    PipelineRegistry,
    build_default_registry,
    preferred_video_encoder,
)

MP4, MOV = MediaFormat.MP4, MediaFormat.MOV


@pytest.fixture
def registry() -> PipelineRegistry:
    return build_default_registry(platform="linux")


class TestDefaultRegistry:
    """Tests for the built-in pipelines."""

    def test_four_pipelines_in_order(self, registry):
        assert [p.name for p in registry.available()] == [
            "mp4_to_mov",
            "mov_to_mp4",
            "mp4_to_mp4",
            "mov_to_mov",
        ]

    def test_mp4_to_mov(self, registry):
        """mp4 -> mov should select the QuickTime pipeline with its defaults."""
        pipeline = registry.lookup(MP4, MOV)

        assert pipeline.name == "mp4_to_mov"
        assert pipeline.label == "MP4 to MOV"
        assert pipeline.preferred_video_codec == "libx264"
        assert pipeline.preferred_audio_codec == "aac"
        assert pipeline.default_settings["video_codec"] == "libx264"
        assert pipeline.default_settings["audio_codec"] == "aac"
        assert pipeline.default_settings["video_bitrate"] == "2000k"
        assert pipeline.container_options.compatibility_mode == "quicktime"
        assert "prores" in pipeline.supported_video_codecs
        assert not pipeline.is_reencode

    def test_pairs_are_ordered(self, registry):
        """A->B and B->A should be different pipelines."""
        assert registry.lookup(MP4, MOV) is not registry.lookup(MOV, MP4)
        assert registry.lookup(MOV, MP4).name == "mov_to_mp4"

    def test_same_format_is_reencode(self, registry):
        pipeline = registry.lookup(MP4, MP4)
        assert pipeline.is_reencode
        assert pipeline.name == "mp4_to_mp4"

    def test_lookup_returns_same_object(self, registry):
        assert registry.lookup(MOV, MOV) is registry.lookup(MOV, MOV)

    def test_default_settings_are_read_only(self, registry):
        with pytest.raises(TypeError):
            registry.lookup(MP4, MOV).default_settings["crf"] = 1

    def test_darwin_prefers_videotoolbox(self):
        """Platform should change the preferred codec only, not the allow-list."""
        darwin = build_default_registry(platform="darwin").lookup(MP4, MOV)
        linux = build_default_registry(platform="linux").lookup(MP4, MOV)

        assert darwin.preferred_video_codec == "h264_videotoolbox"
        assert darwin.default_settings["video_codec"] == "h264_videotoolbox"
        assert darwin.supported_video_codecs == linux.supported_video_codecs

    def test_preferred_video_encoder(self):
        assert preferred_video_encoder("darwin") == "h264_videotoolbox"
        assert preferred_video_encoder("win32") == "libx264"


class TestPipelineRegistry:
    """Tests for PipelineRegistry behaviour."""

    def test_require_unsupported_names_both_formats(self):
        registry = PipelineRegistry([])
        with pytest.raises(PipelineUnsupportedError) as exc_info:
            registry.require(MP4, MOV)
        assert "mp4" in str(exc_info.value)
        assert "mov" in str(exc_info.value)

    def test_lookup_missing_returns_none(self):
        assert PipelineRegistry([]).lookup(MP4, MOV) is None
        assert not PipelineRegistry([]).is_supported(MP4, MOV)

    def test_duplicate_pair_rejected(self, registry):
        pipeline = registry.lookup(MP4, MOV)
        with pytest.raises(ValueError, match="Duplicate"):
            PipelineRegistry([pipeline, pipeline])

    def test_contains_and_len(self, registry):
        assert (MP4, MOV) in registry
        assert len(registry) == 4

    def test_to_dict(self, registry):
        data = registry.lookup(MOV, MP4).to_dict()
        assert data["name"] == "mov_to_mp4"
        assert data["input_format"] == "mov"
        assert data["default_settings"]["crf"] == 23
        assert data["supported_audio_codecs"] == ["aac", "mp3"]

    def test_custom_descriptor(self):
        descriptor = PipelineDescriptor(
            name="mp4_to_mov",
            label="MP4 to MOV",
            input_format=MP4,
            output_format=MOV,
            preferred_video_codec="libx264",
            preferred_audio_codec="aac",
            supported_video_codecs=frozenset({"libx264"}),
            supported_audio_codecs=frozenset({"aac"}),
            default_settings={"crf": 20},
        )
        registry = PipelineRegistry([descriptor])
        assert registry.require(MP4, MOV).default_settings == {"crf": 20}
