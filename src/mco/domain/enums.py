"""Domain enums for the Media Conversion Orchestrator.

This module contains enums shared across the format, pipeline and error
handling layers.
"""

from enum import Enum


class MediaFormat(Enum):
    """Canonical container format tags understood by the orchestrator."""

    MP4 = "mp4"
    MOV = "mov"

    @classmethod
    def from_value(cls, value: "str | MediaFormat") -> "MediaFormat":
        """Coerce a tag such as "MP4" or ".mov" to a MediaFormat.

        Raises:
            ValueError: If the value is not a known format tag.
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).casefold().lstrip("."))


class Severity(Enum):
    """Severity tier attached to every reported conversion error."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ErrorCategory(Enum):
    """Human-readable category of a conversion error."""

    INPUT = "input"  # Missing, corrupt or unsupported input
    FILESYSTEM = "filesystem"  # Permissions, disk space
    ENCODING = "encoding"  # Codec or encoder failures
    RESOURCES = "resources"  # Memory pressure
    PERFORMANCE = "performance"  # Timeouts, killed processes
    USER_ACTION = "user_action"  # Cancelled by the caller
    CONFIGURATION = "configuration"  # Invalid settings or pipeline choice
    GENERAL = "general"  # Anything else


class ErrorClassification(Enum):
    """Classification of conversion errors for retry decisions.

    Values:
        TRANSIENT: Retry may succeed (encoder crash, I/O hiccup).
        PERMANENT: Retry won't help (missing file, bad settings, cancelled).
    """

    TRANSIENT = "transient"
    PERMANENT = "permanent"
