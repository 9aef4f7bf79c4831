"""Custom exceptions for conversion operations.

Every failure the orchestrator can report derives from ConversionError,
which carries the category, severity, suggestions and retryability used
by error analysis and retry decisions.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from mco.domain.enums import ErrorCategory, Severity

if TYPE_CHECKING:
    from mco.settings.validation import SettingViolation


class ConversionError(Exception):
    """Base exception for conversion errors.

    All orchestrator exceptions inherit from this class, allowing callers
    to catch every conversion failure with a single except clause.

    Attributes:
        category: Broad category of the failure.
        severity: Severity tier.
        suggestions: Actionable hints for the user.
        retryable: Whether retrying the same job could succeed.
    """

    category: ErrorCategory = ErrorCategory.GENERAL
    severity: Severity = Severity.MEDIUM
    retryable: bool = True
    default_suggestions: tuple[str, ...] = ()

    def __init__(self, message: str, suggestions: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestions = (
            tuple(suggestions) if suggestions is not None else self.default_suggestions
        )


class UnsupportedFormatError(ConversionError):
    """Raised when a path's extension or container is not a known format.

    Attributes:
        value: The raw extension or container string that failed to match.
    """

    category = ErrorCategory.INPUT
    severity = Severity.HIGH
    retryable = False
    default_suggestions = (
        "Use an MP4 or MOV file",
        "Check that the file extension matches its content",
    )

    def __init__(self, value: str, path: str | None = None) -> None:
        self.value = value
        self.path = path
        where = f" ({path})" if path else ""
        super().__init__(f"Unsupported format: {value!r}{where}")


class PipelineUnsupportedError(ConversionError):
    """Raised when no pipeline exists for a (source, target) format pair."""

    category = ErrorCategory.CONFIGURATION
    severity = Severity.HIGH
    retryable = False

    def __init__(self, input_format: str, output_format: str) -> None:
        self.input_format = input_format
        self.output_format = output_format
        super().__init__(
            f"Conversion from {input_format} to {output_format} is not supported",
            suggestions=("Run 'mco pipelines' to list supported conversions",),
        )


class SettingsValidationError(ConversionError):
    """Raised when merged settings fail validation.

    All violations are collected before raising, so the caller sees every
    problem at once rather than the first one.

    Attributes:
        violations: The SettingViolation entries that failed.
    """

    category = ErrorCategory.CONFIGURATION
    severity = Severity.MEDIUM
    retryable = False

    def __init__(self, violations: Sequence[SettingViolation]) -> None:
        self.violations = list(violations)
        details = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        super().__init__(
            f"Invalid conversion settings: {details}",
            suggestions=tuple(f"Fix '{v.field}': {v.message}" for v in self.violations),
        )


class ProcessSpawnError(ConversionError):
    """Raised when the encoder binary cannot be found or started."""

    category = ErrorCategory.CONFIGURATION
    severity = Severity.HIGH
    retryable = False
    default_suggestions = (
        "Install FFmpeg or set MCO_FFMPEG_PATH to its location",
        "Check that the configured binary is executable",
    )


class EncoderExitError(ConversionError):
    """Raised when the encoder exits with a non-zero status.

    Attributes:
        returncode: The encoder's exit status.
        stderr_tail: The last lines of the encoder's stderr.
    """

    category = ErrorCategory.ENCODING
    severity = Severity.MEDIUM
    retryable = True

    def __init__(self, returncode: int, stderr_tail: str = "") -> None:
        self.returncode = returncode
        self.stderr_tail = stderr_tail
        last_line = stderr_tail.strip().splitlines()[-1] if stderr_tail.strip() else ""
        message = f"FFmpeg exited with code {returncode}"
        if last_line:
            message = f"{message}: {last_line}"
        super().__init__(message)


class OutputMissingError(ConversionError):
    """Raised when the encoder exited cleanly but left no output file."""

    category = ErrorCategory.ENCODING
    severity = Severity.MEDIUM
    retryable = True
    default_suggestions = (
        "Check that the output location is writable",
        "Check the FFmpeg output for details",
    )

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Output file was not created: {path}")


class CancellationError(ConversionError):
    """Raised when a job observes its cancellation token."""

    category = ErrorCategory.USER_ACTION
    severity = Severity.LOW
    retryable = False
    default_suggestions = ("Conversion was cancelled by user",)

    def __init__(self, message: str = "Conversion was cancelled") -> None:
        super().__init__(message)


class ResourceExhaustionError(ConversionError):
    """Raised when the encoder reports disk-full or out-of-memory.

    Attributes:
        kind: "disk_full" or "out_of_memory".
    """

    retryable = False
    severity = Severity.HIGH

    DISK_FULL = "disk_full"
    OUT_OF_MEMORY = "out_of_memory"

    def __init__(self, kind: str, message: str | None = None) -> None:
        self.kind = kind
        if kind == self.DISK_FULL:
            self.category = ErrorCategory.FILESYSTEM
            default = "Insufficient disk space"
            suggestions = (
                "Free up disk space",
                "Choose a different output location",
                "Use higher compression settings",
            )
        else:
            self.category = ErrorCategory.RESOURCES
            default = "Out of memory"
            suggestions = (
                "Close other applications to free memory",
                "Process smaller files",
                "Reduce concurrent conversions",
            )
        super().__init__(message or default, suggestions=suggestions)


class RetryExhaustedError(ConversionError):
    """Raised when every retry attempt failed.

    Attributes:
        last_error: The exception raised by the final attempt.
        attempts: Number of attempts made.
    """

    retryable = False

    def __init__(self, last_error: BaseException, attempts: int) -> None:
        self.last_error = last_error
        self.attempts = attempts
        if isinstance(last_error, ConversionError):
            self.category = last_error.category
            self.severity = last_error.severity
            suggestions: Sequence[str] | None = last_error.suggestions
        else:
            suggestions = None
        super().__init__(
            f"Conversion failed after {attempts} attempt(s): {last_error}",
            suggestions=suggestions,
        )
