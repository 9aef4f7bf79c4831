"""Tests for CLI output helpers."""

import json
from pathlib import Path

import pytest

from mco.cli.exit_codes import ExitCode
from mco.cli.output import echo_json, error_exit, format_outcome, warning_output
from mco.exceptions import CancellationError, PipelineUnsupportedError
from mco.jobs.classification import analyze_error
from mco.jobs.models import STREAM_COPY, ConversionOutcome


def make_outcome(**kwargs) -> ConversionOutcome:
    values = {
        "success": True,
        "job_id": "job",
        "input_path": Path("in.mp4"),
        "output_path": Path("out.mov"),
    }
    values.update(kwargs)
    return ConversionOutcome(**values)


class TestFormatOutcome:
    """Tests for format_outcome."""

    def test_success(self):
        text = format_outcome(
            make_outcome(pipeline_name="mp4_to_mov", duration_seconds=2.25, attempts=1)
        )
        assert text == "Converted in.mp4 -> out.mov (mp4_to_mov, 2.2s, 1 attempt(s))"

    def test_stream_copy(self):
        text = format_outcome(make_outcome(pipeline_name=STREAM_COPY, attempts=1))
        assert "(stream copy," in text

    def test_cancelled(self):
        report = analyze_error(CancellationError())
        text = format_outcome(
            make_outcome(success=False, cancelled=True, error_report=report)
        )
        assert text == "Cancelled in.mp4"

    def test_failure_lists_suggestions(self):
        error = PipelineUnsupportedError("mp4", "mkv")
        failed = make_outcome(
            success=False, error=str(error), error_report=analyze_error(error)
        )
        text = format_outcome(failed)
        lines = text.splitlines()
        assert lines[0] == f"Failed in.mp4: {error}"
        assert lines[1] == "  - Run 'mco pipelines' to list supported conversions"


class TestErrorExit:
    """Tests for error_exit."""

    def test_text(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            error_exit("boom", ExitCode.CONFIG_ERROR)
        assert exc_info.value.code == 11
        assert capsys.readouterr().err.strip() == "Error: boom"

    def test_json(self, capsys):
        with pytest.raises(SystemExit):
            error_exit("boom", ExitCode.MANIFEST_ERROR, json_output=True)
        data = json.loads(capsys.readouterr().err)
        assert data == {
            "status": "failed",
            "error": {"code": "MANIFEST_ERROR", "message": "boom"},
        }

    def test_plain_int_code(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            error_exit("boom", 7)
        assert exc_info.value.code == 7


def test_echo_json_serializes_paths(capsys):
    echo_json({"path": Path("/a/b.mp4")})
    assert json.loads(capsys.readouterr().out) == {"path": "/a/b.mp4"}


def test_warning_suppressed_in_json_mode(capsys):
    warning_output("careful", json_output=True)
    warning_output("careful")
    assert capsys.readouterr().err == "Warning: careful\n"
