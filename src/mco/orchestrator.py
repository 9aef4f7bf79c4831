"""Conversion orchestrator.

ConversionOrchestrator is the single entry point for callers. It wires the
format resolver, pipeline registry, settings resolver, argument builder,
encoder runner, retry executor and batch scheduler together and turns every
failure into a ConversionOutcome.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from mco.config.models import MCOConfig
from mco.domain.enums import MediaFormat
from mco.domain.models import ProbedMediaInfo, ProgressSnapshot
from mco.exceptions import CancellationError, OutputMissingError
from mco.executor import command
from mco.executor.ffmpeg_runner import STDOUT, FFmpegRunner
from mco.executor.filesystem import FileSystem, LocalFileSystem
from mco.introspector.formats import FormatResolver
from mco.introspector.probe import FFmpegProber
from mco.jobs.classification import analyze_error
from mco.jobs.models import STREAM_COPY, BatchOutcome, ConversionOutcome, JobDescriptor
from mco.jobs.resources import (
    PerformanceStats,
    ResourceValidation,
    check_system_resources,
)
from mco.jobs.retry import RetryExecutor, RetryPolicy
from mco.jobs.scheduler import BatchOptions, BatchScheduler
from mco.pipelines.presets import QualityPresetTable
from mco.pipelines.registry import (
    PipelineDescriptor,
    PipelineRegistry,
    build_default_registry,
)
from mco.settings.recommendations import (
    BitratePolicy,
    Recommendation,
    calculate_optimal_settings,
    get_optimization_recommendations,
    get_recommended_settings,
)
from mco.settings.resolver import SettingsResolver
from mco.settings.types import ResolvedSettings
from mco.tools.ffmpeg_metrics import FFmpegMetricsAggregator
from mco.tools.ffmpeg_progress import ProgressTracker, parse_progress

logger = logging.getLogger(__name__)

# Marks the end of one -progress block on stdout
_PROGRESS_END = "progress="


class _AttemptProgress:
    """Route encoder output lines of one attempt into a ProgressTracker."""

    def __init__(self, job: JobDescriptor, info: ProbedMediaInfo) -> None:
        self._job = job
        self.tracker = ProgressTracker(
            total_duration=info.duration_seconds,
            total_frames=info.estimated_total_frames,
        )
        self.metrics = FFmpegMetricsAggregator()
        self._block: list[str] = []
        self._last_reported: float | None = None

    def _emit(self, snapshot: ProgressSnapshot, force: bool) -> None:
        if self._job.on_progress is None:
            return
        if not force and snapshot.percentage == self._last_reported:
            return
        self._last_reported = snapshot.percentage
        self._job.on_progress(snapshot)

    def on_line(self, stream: str, line: str) -> None:
        if stream == STDOUT:
            self._block.append(line)
            if not line.startswith(_PROGRESS_END):
                return
            sample = parse_progress("\n".join(self._block))
            self._block.clear()
            if sample.is_empty:
                return
            self.metrics.add_sample(sample)
            self._emit(self.tracker.update(sample=sample), force=True)
        elif "time=" in line:
            snapshot = self.tracker.feed(line)
            if snapshot is not None:
                self._emit(snapshot, force=False)


class ConversionOrchestrator:
    """Convert media files between container formats.

    Example:
        orchestrator = ConversionOrchestrator()
        outcome = orchestrator.convert(
            JobDescriptor(Path("in.mp4"), Path("out.mov"), quality_preset="high")
        )
        if not outcome.success:
            print(outcome.error_report.suggestions)
    """

    def __init__(
        self,
        config: MCOConfig | None = None,
        registry: PipelineRegistry | None = None,
        presets: QualityPresetTable | None = None,
        runner: FFmpegRunner | None = None,
        prober: FFmpegProber | None = None,
        filesystem: FileSystem | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Configuration. Defaults to MCOConfig().
            registry: Pipeline registry. Defaults to the built-in pipelines
                for the current platform.
            presets: Quality preset tables.
            runner: Encoder runner.
            prober: Media prober.
            filesystem: Filesystem collaborator for input and output checks.
            sleep: Replacement for retry backoff and memory pauses, for tests.
        """
        self.config = config or MCOConfig()
        self.registry = registry or build_default_registry()
        self.presets = presets or QualityPresetTable()
        ffmpeg_path = self.config.tools.ffmpeg
        self.runner = runner or FFmpegRunner(
            ffmpeg_path=ffmpeg_path,
            kill_grace_seconds=self.config.process.kill_grace_seconds,
        )
        self.prober = prober or FFmpegProber(ffmpeg_path=ffmpeg_path)
        self.filesystem = filesystem or LocalFileSystem()
        self.formats = FormatResolver(probe_container=self.prober.probe_container)
        self.settings_resolver = SettingsResolver(self.presets)
        self._sleep = sleep

    def default_retry_policy(self) -> RetryPolicy:
        """Retry policy built from the [retry] configuration."""
        retry = self.config.retry
        return RetryPolicy(
            max_retries=retry.max_retries,
            base_delay=retry.base_delay,
            backoff_multiplier=retry.backoff_multiplier,
            max_delay=retry.max_delay,
        )

    def default_batch_options(self, **overrides: Any) -> BatchOptions:
        """Batch options built from the [batch] and [retry] configuration."""
        batch = self.config.batch
        values: dict[str, Any] = {
            "max_concurrent": batch.max_concurrent,
            "memory_threshold": batch.memory_threshold_bytes,
            "memory_pause_seconds": batch.memory_pause_seconds,
            "retry": self.default_retry_policy(),
        }
        values.update(overrides)
        return BatchOptions(**values)

    # -- single job -------------------------------------------------------

    def _plan(
        self, job: JobDescriptor
    ) -> tuple[
        MediaFormat,
        MediaFormat,
        ProbedMediaInfo,
        PipelineDescriptor | None,
        ResolvedSettings | None,
        list[str],
        list[str],
    ]:
        """Validate a job and build its encoder arguments.

        Every error raised here is raised before any encoder process starts.
        """
        fs = self.filesystem
        if not fs.exists(job.input_path):
            raise FileNotFoundError(f"Input file not found: {job.input_path}")
        if not fs.is_readable(job.input_path):
            raise PermissionError(f"Input file is not readable: {job.input_path}")
        fs.ensure_directory(job.output_path.parent)

        input_format = self.formats.resolve(job.input_path)
        output_format = self.formats.resolve_output(job.output_path)
        info = self.prober.probe(job.input_path)

        if input_format == output_format and not job.force_reencode:
            logger.info(
                "Formats match (%s), copying streams without re-encoding",
                input_format.value,
            )
            args = command.build_stream_copy(job.input_path, job.output_path)
            return input_format, output_format, info, None, None, args, []

        pipeline = self.registry.require(input_format, output_format)
        settings = self.settings_resolver.resolve(
            pipeline, job.quality_preset, job.requested_settings
        )
        args = command.build(job.input_path, job.output_path, settings, info)
        return (
            input_format,
            output_format,
            info,
            pipeline,
            settings,
            args,
            list(settings.warnings),
        )

    def convert(
        self, job: JobDescriptor, retry: RetryPolicy | None = None
    ) -> ConversionOutcome:
        """Run one conversion job to completion.

        Never raises for conversion failures: every error is captured in the
        returned outcome together with an ErrorReport. Once cancellation is
        observed the outcome is marked cancelled, whatever else failed.

        Args:
            job: The job to run.
            retry: Retry policy. Defaults to the configured policy.

        Returns:
            The terminal ConversionOutcome for the job.
        """
        token = job.cancellation_token
        started_at = datetime.now(timezone.utc)
        start = time.monotonic()
        attempts = 0
        input_format: MediaFormat | None = None
        output_format: MediaFormat | None = None
        pipeline: PipelineDescriptor | None = None
        settings: ResolvedSettings | None = None
        info: ProbedMediaInfo | None = None
        warnings: list[str] = []

        logger.info(
            "Converting %s -> %s",
            job.input_path,
            job.output_path,
            extra={"job_id": job.job_id},
        )

        try:
            token.throw_if_cancelled()
            (
                input_format,
                output_format,
                info,
                pipeline,
                settings,
                args,
                warnings,
            ) = self._plan(job)
            token.throw_if_cancelled()

            pipeline_name = pipeline.name if pipeline else STREAM_COPY
            probed = info

            def attempt(number: int) -> None:
                nonlocal attempts
                attempts = number
                progress = _AttemptProgress(job, probed)
                self.runner.run(
                    args,
                    token=token,
                    on_line=progress.on_line,
                    description=f"{pipeline_name} attempt {number}",
                )
                if not self.filesystem.exists(job.output_path):
                    raise OutputMissingError(str(job.output_path))
                summary = progress.metrics.summarize()
                if summary.sample_count:
                    logger.info(
                        "Encoding metrics for %s",
                        job.output_path.name,
                        extra=summary.to_log_extra(),
                    )

            executor = RetryExecutor(retry or self.default_retry_policy(), self._sleep)
            executor.run(attempt, token=token)
        except Exception as e:
            cancelled = token.is_cancelled or isinstance(e, CancellationError)
            error: Exception = CancellationError() if cancelled else e
            report = analyze_error(error)
            if cancelled:
                logger.info("Conversion of %s was cancelled", job.input_path)
            else:
                logger.error(
                    "Conversion of %s failed: %s",
                    job.input_path,
                    e,
                    extra={"error_type": report.error_type},
                )
            return ConversionOutcome(
                success=False,
                job_id=job.job_id,
                input_path=job.input_path,
                output_path=job.output_path,
                input_format=input_format,
                output_format=output_format,
                pipeline_name=pipeline.name if pipeline else None,
                settings=settings,
                started_at=started_at,
                duration_seconds=time.monotonic() - start,
                attempts=attempts,
                error=str(error),
                error_report=report,
                cancelled=cancelled,
                warnings=tuple(warnings),
                probed_info=info,
            )

        duration = time.monotonic() - start
        logger.info(
            "Converted %s in %.1fs (%d attempt(s))",
            job.output_path.name,
            duration,
            attempts,
        )
        return ConversionOutcome(
            success=True,
            job_id=job.job_id,
            input_path=job.input_path,
            output_path=job.output_path,
            input_format=input_format,
            output_format=output_format,
            pipeline_name=pipeline_name,
            settings=settings,
            started_at=started_at,
            duration_seconds=duration,
            attempts=attempts,
            warnings=tuple(warnings),
            probed_info=info,
        )

    def convert_batch(
        self,
        jobs: Sequence[JobDescriptor],
        options: BatchOptions | None = None,
    ) -> BatchOutcome:
        """Run jobs with bounded concurrency. Failures are isolated per job."""
        scheduler = BatchScheduler(self.convert, sleep=self._sleep)
        return scheduler.run_batch(jobs, options or self.default_batch_options())

    # -- queries ----------------------------------------------------------

    def get_available_pipelines(self) -> list[PipelineDescriptor]:
        return self.registry.available()

    def get_quality_presets(
        self, media_format: MediaFormat | str
    ) -> dict[str, dict[str, Any]]:
        table = self.presets.get(MediaFormat.from_value(media_format))
        return {name: dict(values) for name, values in table.items()}

    def is_conversion_supported(
        self, input_format: MediaFormat | str, output_format: MediaFormat | str
    ) -> bool:
        try:
            source = MediaFormat.from_value(input_format)
            target = MediaFormat.from_value(output_format)
        except ValueError:
            return False
        return self.registry.is_supported(source, target)

    def probe(self, path: Path) -> ProbedMediaInfo:
        return self.prober.probe(Path(path))

    def get_recommended_settings(self, use_case: str) -> dict[str, Any]:
        return get_recommended_settings(use_case)

    def calculate_optimal_settings(
        self,
        path: Path,
        target_format: MediaFormat | str,
        constraints: Mapping[str, Any] | None = None,
        policy: BitratePolicy | None = None,
    ) -> dict[str, Any]:
        """Probe a file and suggest settings for converting it."""
        info = self.probe(path)
        return calculate_optimal_settings(
            info, MediaFormat.from_value(target_format), constraints, policy
        )

    def get_optimization_recommendations(
        self,
        path: Path,
        target_format: MediaFormat | str,
        stats: PerformanceStats | None = None,
    ) -> list[Recommendation]:
        """Probe a file and list hints for converting it faster or smaller."""
        info = self.probe(path)
        return get_optimization_recommendations(
            info, MediaFormat.from_value(target_format), stats
        )

    def check_system_resources(
        self, input_path: Path, output_path: Path | None = None
    ) -> ResourceValidation:
        return check_system_resources(Path(input_path), output_path)
