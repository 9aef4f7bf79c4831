"""Formatting utilities.

This module provides pure functions for formatting data for display.
These utilities are used across the codebase for consistent presentation.
"""


def format_duration(seconds: float | None) -> str:
    """Format a duration as H:MM:SS, or M:SS below one hour.

    Args:
        seconds: Duration in seconds. Negative or None is treated as 0.

    Returns:
        Formatted string (e.g., "1:02:03", "4:05").
    """
    total = int(seconds) if seconds and seconds > 0 else 0
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes.

    Returns:
        Formatted string (e.g., "4.2 GB", "128 MB", "1.5 KB").
    """
    if size_bytes >= 1024**3:
        return f"{size_bytes / (1024**3):.1f} GB"
    elif size_bytes >= 1024**2:
        return f"{size_bytes / (1024**2):.1f} MB"
    elif size_bytes >= 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes} B"


def format_number(value: int | float) -> str:
    """Format a number for a command-line argument.

    Integral floats drop their fractional part ("30.0" -> "30") so that
    generated arguments are stable regardless of how a value was supplied.

    Args:
        value: Number to format.

    Returns:
        String form of the number.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
