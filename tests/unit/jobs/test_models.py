"""Tests for job descriptors and outcomes."""

from pathlib import Path

import pytest

from mco.domain.enums import MediaFormat
from mco.jobs.models import STREAM_COPY, BatchOutcome, ConversionOutcome, JobDescriptor
from mco.settings.types import ResolvedSettings


class TestJobDescriptor:
    """Tests for JobDescriptor."""

    def test_paths_coerced(self):
        job = JobDescriptor("in.mp4", "out.mov")
        assert job.input_path == Path("in.mp4")
        assert job.output_path == Path("out.mov")

    def test_unique_ids(self):
        first = JobDescriptor("a.mp4", "b.mov")
        second = JobDescriptor("a.mp4", "b.mov")
        assert first.job_id != second.job_id
        assert len(first.short_id) == 8

    def test_requested_settings_frozen(self):
        overrides = {"crf": 20}
        job = JobDescriptor("a.mp4", "b.mov", requested_settings=overrides)
        overrides["crf"] = 30
        assert job.requested_settings["crf"] == 20
        with pytest.raises(TypeError):
            job.requested_settings["crf"] = 1


class TestConversionOutcome:
    """Tests for ConversionOutcome."""

    def test_to_dict(self):
        outcome = ConversionOutcome(
            success=True,
            job_id="abc",
            input_path=Path("in.mp4"),
            output_path=Path("out.mov"),
            input_format=MediaFormat.MP4,
            output_format=MediaFormat.MOV,
            pipeline_name="mp4_to_mov",
            settings=ResolvedSettings(video_codec="libx264", video_filters=("hflip",)),
            duration_seconds=1.23456,
            attempts=1,
        )

        data = outcome.to_dict()

        assert data["input_format"] == "mp4"
        assert data["pipeline"] == "mp4_to_mov"
        assert data["settings"] == {
            "video_codec": "libx264",
            "maintain_aspect_ratio": True,
            "video_filters": ["hflip"],
            "preserve_metadata": True,
        }
        assert data["duration_seconds"] == 1.235
        assert data["error_report"] is None
        assert not outcome.is_stream_copy

    def test_stream_copy(self):
        outcome = ConversionOutcome(
            success=True,
            job_id="abc",
            input_path=Path("a.mp4"),
            output_path=Path("b.mp4"),
            pipeline_name=STREAM_COPY,
        )
        assert outcome.is_stream_copy
        assert outcome.to_dict()["settings"] is None


def test_batch_outcome_counts():
    results = tuple(
        ConversionOutcome(
            success=ok, job_id=str(i), input_path=Path("a"), output_path=Path("b")
        )
        for i, ok in enumerate([True, False, True])
    )
    batch = BatchOutcome(results=results, completed_count=2, total_count=3)
    assert batch.failed_count == 1
    assert len(batch.to_dict()["results"]) == 3
