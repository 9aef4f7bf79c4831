"""CLI output helpers for JSON and human-readable output."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING, Any, NoReturn

import click

if TYPE_CHECKING:
    from mco.jobs.models import ConversionOutcome

    from .exit_codes import ExitCode


def echo_json(data: Any) -> None:
    """Print data as indented JSON on stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


def error_exit(
    message: str,
    code: ExitCode | int,
    json_output: bool = False,
) -> NoReturn:
    """Exit with a formatted error message.

    Args:
        message: Error message to display.
        code: Exit code to use (ExitCode enum or int).
        json_output: Whether to format output as JSON.
    """
    from .exit_codes import ExitCode

    if isinstance(code, ExitCode):
        code_name = code.name
        exit_value = int(code)
    else:
        code_name = "UNKNOWN_ERROR"
        exit_value = code

    if json_output:
        click.echo(
            json.dumps(
                {"status": "failed", "error": {"code": code_name, "message": message}}
            ),
            err=True,
        )
    else:
        click.echo(f"Error: {message}", err=True)

    sys.exit(exit_value)


def warning_output(message: str, json_output: bool = False) -> None:
    """Print a warning to stderr unless JSON output is requested."""
    if not json_output:
        click.echo(f"Warning: {message}", err=True)


def format_outcome(outcome: ConversionOutcome) -> str:
    """Human-readable summary of one conversion outcome."""
    if outcome.success:
        mode = "stream copy" if outcome.is_stream_copy else outcome.pipeline_name
        return (
            f"Converted {outcome.input_path} -> {outcome.output_path} "
            f"({mode}, {outcome.duration_seconds:.1f}s, "
            f"{outcome.attempts} attempt(s))"
        )
    if outcome.cancelled:
        return f"Cancelled {outcome.input_path}"

    lines = [f"Failed {outcome.input_path}: {outcome.error}"]
    if outcome.error_report is not None:
        lines.extend(f"  - {hint}" for hint in outcome.error_report.suggestions)
    return "\n".join(lines)
