"""External tool detection.

The encoder binary is resolved from an explicit path, then from PATH.
"""

import logging
import shutil
from pathlib import Path

from mco.exceptions import ProcessSpawnError

logger = logging.getLogger(__name__)


def find_tool(name: str, configured_path: Path | None = None) -> Path | None:
    """Find a tool executable.

    Args:
        name: Tool name (e.g., "ffmpeg").
        configured_path: Optional configured path override.

    Returns:
        Path to tool executable, or None if not found.
    """
    # Try configured path first
    if configured_path:
        if configured_path.is_file():
            return configured_path
        logger.warning(
            "Configured path for %s is not a file: %s", name, configured_path
        )

    # Fall back to PATH lookup
    which_result = shutil.which(name)
    if which_result:
        return Path(which_result)

    return None


def require_ffmpeg(configured_path: Path | None = None) -> Path:
    """Return the ffmpeg executable or fail.

    Raises:
        ProcessSpawnError: If ffmpeg cannot be located.
    """
    path = find_tool("ffmpeg", configured_path)
    if path is None:
        raise ProcessSpawnError(
            "ffmpeg is not installed or not in PATH. "
            "Set MCO_FFMPEG_PATH or tools.ffmpeg in ~/.mco/config.toml"
        )
    return path
