"""Format resolution from file extensions and container strings."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from mco.domain.enums import MediaFormat
from mco.exceptions import UnsupportedFormatError

logger = logging.getLogger(__name__)

# Substring aliases checked in order. The demuxer's combined name for the
# ISO family is listed first so that "mov,mp4,m4a,..." resolves to mp4.
CONTAINER_ALIASES: tuple[tuple[str, MediaFormat], ...] = (
    ("mov,mp4,m4a,3gp,3g2,mj2", MediaFormat.MP4),
    ("mov", MediaFormat.MOV),
    ("mp4", MediaFormat.MP4),
    ("quicktime", MediaFormat.MOV),
)

ContainerProbe = Callable[[Path], "str | None"]


def map_container_to_format(container: str | None) -> MediaFormat | None:
    """Map an encoder-reported container string to a MediaFormat.

    Args:
        container: Container string as reported in the info banner
            (e.g. "mov,mp4,m4a,3gp,3g2,mj2").

    Returns:
        The first alias whose key is contained in the string, or None.
    """
    if not container:
        return None
    normalized = container.casefold()
    for alias, media_format in CONTAINER_ALIASES:
        if alias in normalized:
            return media_format
    return None


def format_from_extension(path: Path) -> MediaFormat | None:
    """Return the format named by a path's extension, if known."""
    suffix = path.suffix.casefold().lstrip(".")
    if not suffix:
        return None
    try:
        return MediaFormat(suffix)
    except ValueError:
        return None


class FormatResolver:
    """Determine the canonical format of input and output paths.

    Extensions are trusted first. When the extension is unknown, or when
    the caller asks for it, the file content is probed and the reported
    container string is mapped through CONTAINER_ALIASES.
    """

    def __init__(self, probe_container: ContainerProbe | None = None) -> None:
        """Initialize the resolver.

        Args:
            probe_container: Callable returning the container string for a
                path, or None when it cannot be determined. Without one,
                only extensions are consulted.
        """
        self._probe_container = probe_container

    def resolve(self, path: Path, probe: bool = False) -> MediaFormat:
        """Resolve the format of an existing input file.

        Args:
            path: Input file path.
            probe: Inspect the content even when the extension is known.

        Returns:
            The resolved MediaFormat.

        Raises:
            UnsupportedFormatError: Neither extension nor content matched.
        """
        path = Path(path)
        by_extension = format_from_extension(path)
        if by_extension is not None and not probe:
            return by_extension

        container = None
        if self._probe_container is not None:
            container = self._probe_container(path)
            by_content = map_container_to_format(container)
            if by_content is not None:
                if by_extension is not None and by_content != by_extension:
                    logger.debug(
                        "Content of %s is %s despite its extension",
                        path.name,
                        by_content.value,
                    )
                return by_content

        if by_extension is not None:
            return by_extension

        raise UnsupportedFormatError(container or path.suffix or path.name, str(path))

    def resolve_output(self, path: Path) -> MediaFormat:
        """Resolve the target format from an output path's extension.

        Raises:
            UnsupportedFormatError: The extension is not a known format.
        """
        path = Path(path)
        media_format = format_from_extension(path)
        if media_format is None:
            raise UnsupportedFormatError(path.suffix or path.name, str(path))
        return media_format
