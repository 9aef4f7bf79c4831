"""Resource monitoring and system resource checks.

ResourceMonitor aggregates progress across the jobs of a batch. It is
updated from several worker threads without a lock: every field only
ever grows (monotonic max), so a lost update is overwritten by the next
larger value and never corrupts the aggregate.
"""

from __future__ import annotations

import logging
import os
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import psutil

from mco.core.formatting import format_file_size

logger = logging.getLogger(__name__)

LOW_MEMORY_BYTES = 512 * 1024 * 1024
OUTPUT_SIZE_ESTIMATE_RATIO = 1.5


def process_memory_rss() -> int:
    """Resident set size of the current process in bytes."""
    return psutil.Process(os.getpid()).memory_info().rss


@dataclass(frozen=True)
class PerformanceStats:
    """Snapshot of batch throughput.

    Attributes:
        elapsed_time: Seconds since the monitor started.
        total_processed_frames: Largest frame count reported.
        total_processed_duration: Largest media time reported, in seconds.
        frames_per_second: Frames per wall-clock second.
        time_processing_ratio: Media seconds per wall-clock second.
        peak_memory_usage: Largest memory sample in bytes.
        efficiency: Ratio as a percentage, capped at 100.
    """

    elapsed_time: float
    total_processed_frames: int
    total_processed_duration: float
    frames_per_second: float
    time_processing_ratio: float
    peak_memory_usage: int
    efficiency: float

    def to_dict(self) -> dict:
        return {
            "elapsed_time": round(self.elapsed_time, 3),
            "total_processed_frames": self.total_processed_frames,
            "total_processed_duration": round(self.total_processed_duration, 3),
            "frames_per_second": round(self.frames_per_second, 2),
            "time_processing_ratio": round(self.time_processing_ratio, 3),
            "peak_memory_usage": self.peak_memory_usage,
            "efficiency": round(self.efficiency, 1),
        }


class ResourceMonitor:
    """Monotonic-max accumulator of batch progress and memory."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self.start_time = clock()
        self.total_processed_frames = 0
        self.total_processed_duration = 0.0
        self.peak_memory_usage = 0

    def update_stats(
        self,
        current_frame: int | None = None,
        current_time: float | None = None,
        memory_usage: int | None = None,
    ) -> None:
        """Fold one progress observation into the aggregate."""
        if current_frame is not None:
            self.total_processed_frames = max(
                self.total_processed_frames, current_frame
            )
        if current_time is not None:
            self.total_processed_duration = max(
                self.total_processed_duration, current_time
            )
        if memory_usage is not None:
            self.peak_memory_usage = max(self.peak_memory_usage, memory_usage)

    def get_performance_stats(self) -> PerformanceStats:
        """Compute throughput figures from the aggregate."""
        elapsed = max(self._clock() - self.start_time, 0.0)
        fps = self.total_processed_frames / elapsed if elapsed > 0 else 0.0
        ratio = self.total_processed_duration / elapsed if elapsed > 0 else 0.0
        return PerformanceStats(
            elapsed_time=elapsed,
            total_processed_frames=self.total_processed_frames,
            total_processed_duration=self.total_processed_duration,
            frames_per_second=fps,
            time_processing_ratio=ratio,
            peak_memory_usage=self.peak_memory_usage,
            efficiency=min(100.0, ratio * 100) if ratio > 0 else 0.0,
        )


@dataclass
class ResourceValidation:
    """Outcome of a pre-flight resource check.

    Attributes:
        sufficient: False when the conversion cannot fit on disk.
        warnings: Observed problems.
        recommendations: Suggested remedies.
    """

    sufficient: bool = True
    warnings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


def check_system_resources(
    input_path: Path, output_path: Path | None = None
) -> ResourceValidation:
    """Check free memory, disk space and CPU load before a conversion.

    Only a disk-space shortfall marks the result insufficient; memory and
    load problems are warnings.

    Args:
        input_path: Source file; its size drives the output estimate.
        output_path: Destination; its directory is checked for space.

    Returns:
        ResourceValidation describing any problems found.
    """
    validation = ResourceValidation()

    if psutil.virtual_memory().available < LOW_MEMORY_BYTES:
        validation.warnings.append("Low available memory detected")
        validation.recommendations.append("Close other applications to free memory")

    try:
        input_size = Path(input_path).stat().st_size
    except OSError as e:
        validation.warnings.append(f"Resource validation failed: {e}")
        return validation

    estimated_size = int(input_size * OUTPUT_SIZE_ESTIMATE_RATIO)
    target_dir = Path(output_path or input_path).parent
    while not target_dir.exists() and target_dir != target_dir.parent:
        target_dir = target_dir.parent
    try:
        free = shutil.disk_usage(target_dir).free
        if free < estimated_size:
            validation.sufficient = False
            validation.warnings.append("Insufficient disk space for conversion")
            validation.recommendations.append(
                f"Free at least {format_file_size(estimated_size)} of disk space"
            )
    except OSError as e:
        logger.warning("Could not check disk space: %s", e)
        validation.warnings.append("Could not check disk space")

    try:
        load_1m = psutil.getloadavg()[0]
    except (AttributeError, OSError):
        load_1m = None
    cpu_count = psutil.cpu_count(logical=True) or 1
    if load_1m is not None and load_1m > cpu_count:
        validation.warnings.append("High CPU load detected")
        validation.recommendations.append(
            "Consider waiting for system load to decrease"
        )

    return validation
