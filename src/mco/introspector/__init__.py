"""Media introspection: format resolution and stream probing.

- FormatResolver: Map paths to canonical formats (extension, then content)
- FFmpegProber: Read stream information from the ffmpeg info banner
- parse_probe_output: Pure banner parser
"""

from mco.introspector.formats import (
    CONTAINER_ALIASES,
    FormatResolver,
    format_from_extension,
    map_container_to_format,
)
from mco.introspector.probe import FFmpegProber, parse_probe_output

__all__ = [
    "CONTAINER_ALIASES",
    "FFmpegProber",
    "FormatResolver",
    "format_from_extension",
    "map_container_to_format",
    "parse_probe_output",
]
