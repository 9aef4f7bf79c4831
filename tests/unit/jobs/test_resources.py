"""Tests for resource monitoring and checks."""

from types import SimpleNamespace

import pytest

from mco.jobs import resources
from mco.jobs.resources import ResourceMonitor, check_system_resources


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestResourceMonitor:
    """Tests for ResourceMonitor."""

    def test_updates_are_monotonic(self):
        """Smaller late values must never lower the aggregate."""
        monitor = ResourceMonitor(clock=FakeClock())
        monitor.update_stats(300, 10.0, 500)
        monitor.update_stats(100, 2.0, 200)
        monitor.update_stats(None, None, None)

        assert monitor.total_processed_frames == 300
        assert monitor.total_processed_duration == 10.0
        assert monitor.peak_memory_usage == 500

    def test_performance_stats(self):
        clock = FakeClock()
        monitor = ResourceMonitor(clock=clock)
        monitor.update_stats(600, 5.0)
        clock.now += 10.0

        stats = monitor.get_performance_stats()

        assert stats.elapsed_time == pytest.approx(10.0)
        assert stats.frames_per_second == pytest.approx(60.0)
        assert stats.time_processing_ratio == pytest.approx(0.5)
        assert stats.efficiency == pytest.approx(50.0)

    def test_efficiency_capped(self):
        clock = FakeClock()
        monitor = ResourceMonitor(clock=clock)
        monitor.update_stats(current_time=40.0)
        clock.now += 10.0
        assert monitor.get_performance_stats().efficiency == 100.0

    def test_zero_elapsed(self):
        stats = ResourceMonitor(clock=FakeClock()).get_performance_stats()
        assert stats.frames_per_second == 0.0
        assert stats.efficiency == 0.0
        assert stats.to_dict()["elapsed_time"] == 0.0


@pytest.fixture
def system(monkeypatch):
    """Patch psutil and disk usage with controllable values."""
    state = SimpleNamespace(available=8 * 1024**3, free=100 * 1024**3, load=0.5)
    monkeypatch.setattr(
        resources.psutil,
        "virtual_memory",
        lambda: SimpleNamespace(available=state.available),
    )
    monkeypatch.setattr(
        resources.shutil, "disk_usage", lambda path: SimpleNamespace(free=state.free)
    )
    monkeypatch.setattr(
        resources.psutil, "getloadavg", lambda: (state.load, state.load, state.load)
    )
    monkeypatch.setattr(resources.psutil, "cpu_count", lambda logical=True: 4)
    return state


class TestCheckSystemResources:
    """Tests for check_system_resources."""

    def test_all_good(self, system, media_file):
        validation = check_system_resources(media_file)
        assert validation.sufficient
        assert validation.warnings == []

    def test_insufficient_disk(self, system, media_file):
        system.free = 100
        validation = check_system_resources(media_file, media_file.with_suffix(".mov"))
        assert not validation.sufficient
        assert "Insufficient disk space for conversion" in validation.warnings

    def test_low_memory_and_high_load_are_warnings(self, system, media_file):
        system.available = 1024
        system.load = 16.0
        validation = check_system_resources(media_file)
        assert validation.sufficient
        assert "Low available memory detected" in validation.warnings
        assert "High CPU load detected" in validation.warnings

    def test_missing_input(self, system, tmp_path):
        validation = check_system_resources(tmp_path / "missing.mp4")
        assert validation.sufficient
        assert validation.warnings[0].startswith("Resource validation failed")

    def test_missing_output_directory_checks_parent(self, system, media_file):
        validation = check_system_resources(
            media_file, media_file.parent / "new" / "dir" / "out.mov"
        )
        assert validation.sufficient
