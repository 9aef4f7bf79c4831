"""Tests for progress reporters."""

import io
from pathlib import Path

from mco.domain.models import ProgressSnapshot
from mco.jobs.models import BatchProgress
from mco.jobs.progress import (
    NullProgressReporter,
    StderrProgressReporter,
    format_snapshot,
    render_bar,
)


class TestRenderBar:
    def test_bounds(self):
        assert render_bar(0, width=4) == "----"
        assert render_bar(50, width=4) == "##--"
        assert render_bar(150, width=4) == "####"


class TestStderrProgressReporter:
    """Tests for StderrProgressReporter."""

    def test_progress_line(self):
        stream = io.StringIO()
        reporter = StderrProgressReporter(stream=stream)

        reporter.on_progress(
            ProgressSnapshot(percentage=25.0, elapsed_time=5.0, speed=2.0)
        )
        reporter.on_complete()

        output = stream.getvalue()
        assert output.startswith("\r[")
        assert " 25.0%" in output
        assert "2.00x" in output
        assert output.endswith("\n")

    def test_disabled_writes_nothing(self):
        stream = io.StringIO()
        reporter = StderrProgressReporter(enabled=False, stream=stream)
        reporter.on_progress(ProgressSnapshot(percentage=10.0))
        reporter.on_complete()
        assert stream.getvalue() == ""

    def test_batch_line(self):
        stream = io.StringIO()
        reporter = StderrProgressReporter(stream=stream)
        reporter.on_batch_progress(
            BatchProgress(
                current_index=2,
                total=4,
                completed_before=1,
                finished_before=1,
                current_file=Path("/in/b.mp4"),
                current_progress=ProgressSnapshot(percentage=40.0),
                overall_percentage=35.0,
            )
        )
        assert "job 2/4 (b.mp4 40%)" in stream.getvalue()

    def test_shorter_line_is_padded(self):
        stream = io.StringIO()
        reporter = StderrProgressReporter(stream=stream)
        reporter._write("long line")
        reporter._write("short")
        assert stream.getvalue().endswith("\rshort    ")


class TestNullProgressReporter:
    def test_noop(self):
        reporter = NullProgressReporter()
        reporter.on_progress(ProgressSnapshot(percentage=1.0))
        reporter.on_complete(False)


def test_format_snapshot_unknown_eta():
    assert "ETA --:--" in format_snapshot(ProgressSnapshot(percentage=0.0))
