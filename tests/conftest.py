"""Shared test fixtures for the media conversion orchestrator."""

import sys
import textwrap
from pathlib import Path

import pytest

# Banner printed by `ffmpeg -hide_banner -i clip.mp4`
SAMPLE_PROBE_OUTPUT = textwrap.dedent(
    """\
    Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'clip.mp4':
      Metadata:
        major_brand     : isom
        encoder         : Lavf60.3.100
      Duration: 00:01:30.50, start: 0.000000, bitrate: 2500 kb/s
      Stream #0:0[0x1](und): Video: h264 (High) (avc1 / 0x31637661), yuv420p(tv, bt709, progressive), 1920x1080 [SAR 1:1 DAR 16:9], 2360 kb/s, 29.97 fps, 29.97 tbr, 30k tbn (default)
      Stream #0:1[0x2](und): Audio: aac (LC) (mp4a / 0x6134706D), 48000 Hz, stereo, fltp, 128 kb/s (default)
    At least one output file must be specified
    """
)


@pytest.fixture
def probe_output() -> str:
    """Realistic ffmpeg info banner for a 1080p H.264/AAC MP4."""
    return SAMPLE_PROBE_OUTPUT


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    """An existing (dummy) input file."""
    path = tmp_path / "input.mp4"
    path.write_bytes(b"\x00" * 1024)
    return path


@pytest.fixture
def python_script(tmp_path: Path):
    """Write a Python script standing in for the encoder.

    Returns a factory taking the script body and returning the argument list
    that runs it (to be passed to FFmpegRunner.run with ffmpeg_path set to
    sys.executable).
    """

    def _write(body: str, name: str = "fake_ffmpeg.py") -> list[str]:
        script = tmp_path / name
        script.write_text(textwrap.dedent(body))
        return [str(script)]

    return _write


@pytest.fixture
def python_executable() -> Path:
    return Path(sys.executable)
