"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (config, settings, manifest)
    20-29: Input errors
    30-39: Tool errors
    40-49: Conversion errors
    50-59: Probe errors
"""

from __future__ import annotations

from enum import IntEnum

from mco.jobs.models import ConversionOutcome


class ExitCode(IntEnum):
    """Exit codes for mco commands."""

    SUCCESS = 0

    GENERAL_ERROR = 1
    INTERRUPTED = 2  # Ctrl+C / cancelled

    CONFIG_ERROR = 11
    INVALID_SETTINGS = 12
    MANIFEST_ERROR = 13

    TARGET_NOT_FOUND = 20
    UNSUPPORTED_FORMAT = 21

    TOOL_NOT_AVAILABLE = 30

    CONVERSION_FAILED = 40
    PARTIAL_FAILURE = 41

    PROBE_ERROR = 51


_ERROR_TYPE_CODES: dict[str, ExitCode] = {
    "user_cancelled": ExitCode.INTERRUPTED,
    "invalid_settings": ExitCode.INVALID_SETTINGS,
    "unsupported_format": ExitCode.UNSUPPORTED_FORMAT,
    "unsupported_conversion": ExitCode.UNSUPPORTED_FORMAT,
    "encoder_unavailable": ExitCode.TOOL_NOT_AVAILABLE,
    "file_not_found": ExitCode.TARGET_NOT_FOUND,
}


def exit_code_for(outcome: ConversionOutcome) -> ExitCode:
    """Map a conversion outcome to the process exit code."""
    if outcome.success:
        return ExitCode.SUCCESS
    if outcome.cancelled:
        return ExitCode.INTERRUPTED
    if outcome.error_report is None:
        return ExitCode.CONVERSION_FAILED
    return _ERROR_TYPE_CODES.get(
        outcome.error_report.error_type, ExitCode.CONVERSION_FAILED
    )
