"""Tests for encoder progress parsing and tracking."""

import pytest

from mco.tools.ffmpeg_progress import (
    ProgressTracker,
    parse_progress,
    parse_timestamp,
)

PROGRESS_BLOCK = (
    "frame=60\n"
    "fps=30.00\n"
    "bitrate=2000.5kbits/s\n"
    "total_size=524288\n"
    "out_time_us=2000000\n"
    "out_time=00:00:02.000000\n"
    "speed=1.5x\n"
    "progress=continue\n"
)

STATUS_LINE = (
    "frame=  120 fps= 29 q=28.0 size=    1024kB time=00:00:04.00 "
    "bitrate=2097.2kbits/s speed=1.02x"
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("00:00:02.50", 2.5),
            ("01:02:03.00", 3723.0),
            ("4:05", 245.0),
            ("83.5", 83.5),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_timestamp(text) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "text", [None, "", "N/A", "-00:00:01.00", "aa:bb", "1:2:3:4"]
    )
    def test_invalid(self, text):
        """Malformed, negative and N/A timestamps should give None."""
        assert parse_timestamp(text) is None


class TestParseProgress:
    """Tests for parse_progress."""

    def test_progress_block(self):
        """Should parse the -progress key=value stream."""
        sample = parse_progress(PROGRESS_BLOCK)

        assert sample.frame == 60
        assert sample.current_time == pytest.approx(2.0)
        assert sample.fps == pytest.approx(30.0)
        assert sample.bitrate == "2000.5kbits/s"
        assert sample.speed == pytest.approx(1.5)
        assert sample.size_bytes == 524288

    def test_status_line(self):
        """Should parse the human stderr status line."""
        sample = parse_progress(STATUS_LINE)

        assert sample.frame == 120
        assert sample.current_time == pytest.approx(4.0)
        assert sample.fps == pytest.approx(29.0)
        assert sample.speed == pytest.approx(1.02)
        assert sample.size_bytes == 1024 * 1024

    def test_last_occurrence_wins(self):
        sample = parse_progress("frame=10 time=00:00:01.00\nframe=20 time=00:00:02.00")
        assert sample.frame == 20
        assert sample.current_time == pytest.approx(2.0)

    def test_out_time_us_fallback(self):
        """out_time_us should be used when no textual time is present."""
        sample = parse_progress("out_time_us=1500000\nout_time=N/A\n")
        assert sample.current_time == pytest.approx(1.5)

    def test_na_bitrate_ignored(self):
        assert parse_progress("bitrate=N/A\nframe=1").bitrate is None

    def test_no_progress(self):
        assert parse_progress("Stream mapping:\n  Stream #0:0 -> #0:0").is_empty


class TestProgressTracker:
    """Tests for ProgressTracker."""

    def test_percentage_from_time(self):
        tracker = ProgressTracker(total_duration=10.0, clock=FakeClock())
        snapshot = tracker.update(current_time=2.5)
        assert snapshot.percentage == pytest.approx(25.0)
        assert snapshot.total_duration == 10.0

    def test_uses_larger_of_frame_and_time_estimates(self):
        tracker = ProgressTracker(total_duration=10.0, total_frames=100)
        snapshot = tracker.update(frame=50, current_time=2.0)
        assert snapshot.percentage == pytest.approx(50.0)

    def test_clamped_to_100(self):
        tracker = ProgressTracker(total_duration=10.0)
        assert tracker.update(current_time=12.0).percentage == 100.0

    def test_percentage_never_decreases(self):
        """A lower reading after a higher one should not move progress back."""
        tracker = ProgressTracker(total_duration=100.0)
        readings = [10.0, 40.0, 30.0, 35.0, 60.0, 5.0]
        percentages = [tracker.update(current_time=t).percentage for t in readings]

        assert percentages == sorted(percentages)
        assert percentages[-1] == pytest.approx(60.0)

    def test_unknown_totals_stay_at_zero(self):
        tracker = ProgressTracker()
        snapshot = tracker.update(frame=100, current_time=4.0)
        assert snapshot.percentage == 0.0
        assert snapshot.estimated_time_remaining is None
        assert snapshot.current_frame == 100

    def test_eta(self):
        """ETA should be elapsed / pct * (100 - pct)."""
        clock = FakeClock(start=50.0)
        tracker = ProgressTracker(total_duration=100.0, clock=clock)
        clock.now = 60.0  # 10 seconds elapsed
        snapshot = tracker.update(current_time=25.0)

        assert snapshot.elapsed_time == pytest.approx(10.0)
        assert snapshot.estimated_time_remaining == pytest.approx(30.0)

    def test_eta_unknown_at_zero(self):
        tracker = ProgressTracker(total_duration=100.0, clock=FakeClock())
        assert tracker.update(current_time=0.0).estimated_time_remaining is None

    def test_feed(self):
        """feed() should parse a chunk and carry fps, speed and size forward."""
        tracker = ProgressTracker(total_duration=4.0, clock=FakeClock())
        snapshot = tracker.feed(PROGRESS_BLOCK)

        assert snapshot is not None
        assert snapshot.percentage == pytest.approx(50.0)
        assert snapshot.speed == pytest.approx(1.5)
        assert snapshot.fps == pytest.approx(30.0)
        assert snapshot.size_bytes == 524288

    def test_feed_without_progress_returns_none(self):
        tracker = ProgressTracker(total_duration=4.0)
        assert tracker.feed("Press [q] to stop") is None

    def test_non_positive_totals_ignored(self):
        tracker = ProgressTracker(total_duration=0.0, total_frames=-1)
        assert tracker.total_duration is None
        assert tracker.total_frames is None
