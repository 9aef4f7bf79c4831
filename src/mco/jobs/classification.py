"""Error classification and analysis for conversion failures.

classify_error() decides whether a retry could help. analyze_error()
turns any exception into an ErrorReport with a category, severity and
actionable suggestions for the user.
"""

from __future__ import annotations

import re

from mco.domain.enums import ErrorCategory, ErrorClassification, Severity
from mco.domain.models import ErrorReport
from mco.exceptions import (
    CancellationError,
    ConversionError,
    EncoderExitError,
    OutputMissingError,
    PipelineUnsupportedError,
    ProcessSpawnError,
    ResourceExhaustionError,
    RetryExhaustedError,
    SettingsValidationError,
    UnsupportedFormatError,
)

# Messages matching any of these will fail the same way on every attempt.
NON_RETRYABLE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"no such file or directory",
        r"permission denied",
        r"invalid data found",
        r"corrupt",
        r"unsupported codec",
        r"conversion was cancelled",
        r"disk full",
        r"no space left on device",
        r"out of memory",
    )
)


def _diagnostic_text(exception: BaseException) -> str:
    """The exception message plus, for encoder exits, the whole stderr tail.

    ffmpeg usually ends with a generic "Conversion failed!" line, so the
    cause is only visible earlier in the tail.
    """
    message = str(exception)
    if isinstance(exception, EncoderExitError) and exception.stderr_tail:
        return f"{message}\n{exception.stderr_tail}"
    return message


def classify_error(exception: BaseException) -> ErrorClassification:
    """Classify an exception for retry decision making.

    Args:
        exception: The exception to classify.

    Returns:
        ErrorClassification indicating whether retry might succeed.

    Examples:
        >>> classify_error(PermissionError("Permission denied: out.mov"))
        ErrorClassification.PERMANENT

        >>> classify_error(EncoderExitError(1, "Conversion failed!"))
        ErrorClassification.TRANSIENT
    """
    if isinstance(exception, ConversionError) and not exception.retryable:
        return ErrorClassification.PERMANENT

    if isinstance(exception, (FileNotFoundError, IsADirectoryError, PermissionError)):
        return ErrorClassification.PERMANENT

    message = _diagnostic_text(exception)
    if any(pattern.search(message) for pattern in NON_RETRYABLE_PATTERNS):
        return ErrorClassification.PERMANENT

    return ErrorClassification.TRANSIENT


def _report(
    exception: BaseException,
    error_type: str,
    category: ErrorCategory,
    severity: Severity,
    *suggestions: str,
) -> ErrorReport:
    return ErrorReport(
        error_type=error_type,
        category=category,
        severity=severity,
        suggestions=suggestions,
        retryable=classify_error(exception) == ErrorClassification.TRANSIENT,
        message=str(exception),
    )


def _analyze_by_type(exception: BaseException) -> ErrorReport | None:
    """Analyze exceptions whose type alone determines the report."""
    if isinstance(exception, CancellationError):
        return _report(
            exception,
            "user_cancelled",
            ErrorCategory.USER_ACTION,
            Severity.LOW,
            *exception.suggestions,
        )
    if isinstance(exception, SettingsValidationError):
        return _report(
            exception,
            "invalid_settings",
            ErrorCategory.CONFIGURATION,
            Severity.MEDIUM,
            *exception.suggestions,
        )
    if isinstance(exception, UnsupportedFormatError):
        return _report(
            exception,
            "unsupported_format",
            ErrorCategory.INPUT,
            Severity.HIGH,
            *exception.suggestions,
        )
    if isinstance(exception, PipelineUnsupportedError):
        return _report(
            exception,
            "unsupported_conversion",
            ErrorCategory.CONFIGURATION,
            Severity.HIGH,
            *exception.suggestions,
        )
    if isinstance(exception, ProcessSpawnError):
        return _report(
            exception,
            "encoder_unavailable",
            ErrorCategory.CONFIGURATION,
            Severity.HIGH,
            *exception.suggestions,
        )
    if isinstance(exception, ResourceExhaustionError):
        error_type = (
            "disk_space_error"
            if exception.kind == ResourceExhaustionError.DISK_FULL
            else "memory_error"
        )
        return _report(
            exception,
            error_type,
            exception.category,
            Severity.HIGH,
            *exception.suggestions,
        )
    if isinstance(exception, OutputMissingError):
        return _report(
            exception,
            "output_missing",
            ErrorCategory.ENCODING,
            Severity.MEDIUM,
            *exception.suggestions,
        )
    if isinstance(exception, FileNotFoundError):
        return _report(
            exception,
            "file_not_found",
            ErrorCategory.INPUT,
            Severity.HIGH,
            "Verify that the input file exists and is accessible",
        )
    if isinstance(exception, PermissionError):
        return _report(
            exception,
            "permission_error",
            ErrorCategory.FILESYSTEM,
            Severity.HIGH,
            "Check file permissions and ensure write access to output directory",
        )
    return None


def _analyze_by_message(exception: BaseException) -> ErrorReport | None:
    """Analyze exceptions by their message text."""
    message = _diagnostic_text(exception).casefold()

    if "no such file" in message:
        return _report(
            exception,
            "file_not_found",
            ErrorCategory.INPUT,
            Severity.HIGH,
            "Verify that the input file exists and is accessible",
        )
    if "permission denied" in message:
        return _report(
            exception,
            "permission_error",
            ErrorCategory.FILESYSTEM,
            Severity.HIGH,
            "Check file permissions and ensure write access to output directory",
        )
    if "invalid data" in message or "corrupt" in message:
        return _report(
            exception,
            "corrupted_input",
            ErrorCategory.INPUT,
            Severity.HIGH,
            "Input file may be corrupted or in an unsupported format",
        )
    if "unsupported codec" in message:
        return _report(
            exception,
            "codec_error",
            ErrorCategory.ENCODING,
            Severity.MEDIUM,
            "Try using a different codec or quality preset",
        )
    if "memory" in message:
        return _report(
            exception,
            "memory_error",
            ErrorCategory.RESOURCES,
            Severity.HIGH,
            "Reduce video resolution or quality settings",
            "Close other applications to free memory",
        )
    if "disk full" in message or "no space" in message:
        return _report(
            exception,
            "disk_space_error",
            ErrorCategory.FILESYSTEM,
            Severity.HIGH,
            "Free up disk space before retrying conversion",
        )
    if "timeout" in message or "timed out" in message or "killed" in message:
        return _report(
            exception,
            "timeout_error",
            ErrorCategory.PERFORMANCE,
            Severity.MEDIUM,
            "Try with lower quality settings",
            "Increase timeout duration",
        )
    if "cancelled" in message:
        return _report(
            exception,
            "user_cancelled",
            ErrorCategory.USER_ACTION,
            Severity.LOW,
            "Conversion was cancelled by user",
        )
    return None


def analyze_error(exception: BaseException) -> ErrorReport:
    """Build a human-facing report for a conversion failure.

    Retry exhaustion is analyzed through its last underlying error, so the
    report describes what actually went wrong.

    Args:
        exception: The failure to analyze.

    Returns:
        ErrorReport with type, category, severity and suggestions.
    """
    if isinstance(exception, RetryExhaustedError):
        inner = analyze_error(exception.last_error)
        return ErrorReport(
            error_type=inner.error_type,
            category=inner.category,
            severity=inner.severity,
            suggestions=inner.suggestions,
            retryable=False,
            message=str(exception),
        )

    report = _analyze_by_type(exception) or _analyze_by_message(exception)
    if report is not None:
        return report

    if isinstance(exception, EncoderExitError):
        return _report(
            exception,
            "encoder_error",
            ErrorCategory.ENCODING,
            Severity.MEDIUM,
            "Check the FFmpeg output for details",
            "Try a different codec or quality preset",
        )
    return _report(exception, "unknown", ErrorCategory.GENERAL, Severity.MEDIUM)
