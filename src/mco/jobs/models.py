"""Job descriptors and conversion outcomes."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from mco.domain.enums import MediaFormat
from mco.domain.models import ErrorReport, ProbedMediaInfo, ProgressSnapshot
from mco.executor.cancellation import CancellationToken
from mco.settings.types import ResolvedSettings

if TYPE_CHECKING:
    from mco.jobs.resources import PerformanceStats

STREAM_COPY = "stream_copy"

ProgressCallback = Callable[[ProgressSnapshot], None]


def _new_job_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class JobDescriptor:
    """A single conversion request.

    Created by the caller and never modified by the orchestrator.

    Attributes:
        input_path: Source media file.
        output_path: Destination file; its extension selects the format.
        requested_settings: Partial settings overriding presets and defaults.
        quality_preset: Optional quality preset name for the output format.
        cancellation_token: Token the caller can use to stop the job.
        force_reencode: Re-encode even when formats match.
        on_progress: Called with each progress snapshot.
        job_id: Identifier used in logs and outcomes.
    """

    input_path: Path
    output_path: Path
    requested_settings: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )
    quality_preset: str | None = None
    cancellation_token: CancellationToken = field(default_factory=CancellationToken)
    force_reencode: bool = False
    on_progress: ProgressCallback | None = None
    job_id: str = field(default_factory=_new_job_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "input_path", Path(self.input_path))
        object.__setattr__(self, "output_path", Path(self.output_path))
        if not isinstance(self.requested_settings, MappingProxyType):
            object.__setattr__(
                self,
                "requested_settings",
                MappingProxyType(dict(self.requested_settings)),
            )

    @property
    def short_id(self) -> str:
        """First 8 characters of the job ID, for log tags."""
        return self.job_id[:8]


@dataclass(frozen=True)
class ConversionOutcome:
    """Terminal result of one job, returned exactly once."""

    success: bool
    job_id: str
    input_path: Path
    output_path: Path
    input_format: MediaFormat | None = None
    output_format: MediaFormat | None = None
    pipeline_name: str | None = None
    settings: ResolvedSettings | None = None
    started_at: datetime | None = None
    duration_seconds: float = 0.0
    attempts: int = 0
    error: str | None = None
    error_report: ErrorReport | None = None
    cancelled: bool = False
    warnings: tuple[str, ...] = ()
    probed_info: ProbedMediaInfo | None = None

    @property
    def is_stream_copy(self) -> bool:
        """True if streams were copied without re-encoding."""
        return self.pipeline_name == STREAM_COPY

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "success": self.success,
            "job_id": self.job_id,
            "input_path": str(self.input_path),
            "output_path": str(self.output_path),
            "input_format": self.input_format.value if self.input_format else None,
            "output_format": self.output_format.value if self.output_format else None,
            "pipeline": self.pipeline_name,
            "settings": self.settings.to_dict() if self.settings else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "duration_seconds": round(self.duration_seconds, 3),
            "attempts": self.attempts,
            "error": self.error,
            "error_report": self.error_report.to_dict() if self.error_report else None,
            "cancelled": self.cancelled,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class BatchProgress:
    """Progress of a batch, reported on every job progress tick.

    Attributes:
        current_index: 1-based index of the job reporting progress.
        total: Number of jobs in the batch.
        completed_before: Successful jobs when the job's chunk started.
        finished_before: Jobs finished, successfully or not, when the job's
            chunk started.
        current_file: Input path of the reporting job.
        current_progress: The job's latest snapshot.
        overall_percentage: Batch-wide completion estimate in [0, 100].
        performance_stats: Batch resource statistics so far.
    """

    current_index: int
    total: int
    completed_before: int
    finished_before: int
    current_file: Path
    current_progress: ProgressSnapshot
    overall_percentage: float
    performance_stats: PerformanceStats | None = None


@dataclass(frozen=True)
class BatchOutcome:
    """Result of a batch run.

    Jobs never started because the batch was cancelled are absent from
    `results`.
    """

    results: tuple[ConversionOutcome, ...]
    completed_count: int
    total_count: int
    cancelled: bool = False
    performance_stats: PerformanceStats | None = None

    @property
    def failed_count(self) -> int:
        """Jobs that ran and did not succeed."""
        return sum(1 for result in self.results if not result.success)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "completed_count": self.completed_count,
            "failed_count": self.failed_count,
            "total_count": self.total_count,
            "cancelled": self.cancelled,
            "performance_stats": (
                self.performance_stats.to_dict() if self.performance_stats else None
            ),
            "results": [result.to_dict() for result in self.results],
        }
