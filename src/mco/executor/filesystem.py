"""File system collaborator used by the orchestrator.

Existence and permission checks go through this seam so tests can
substitute an in-memory implementation.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol


class FileSystem(Protocol):
    """File operations needed around a conversion."""

    def exists(self, path: Path) -> bool:
        """True if the path exists."""
        ...

    def is_readable(self, path: Path) -> bool:
        """True if the file can be opened for reading."""
        ...

    def ensure_directory(self, path: Path) -> None:
        """Create a directory and its parents if missing."""
        ...

    def size(self, path: Path) -> int:
        """Size of a file in bytes."""
        ...


class LocalFileSystem:
    """FileSystem backed by the local disk."""

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_readable(self, path: Path) -> bool:
        return Path(path).is_file() and os.access(path, os.R_OK)

    def ensure_directory(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def size(self, path: Path) -> int:
        return Path(path).stat().st_size
