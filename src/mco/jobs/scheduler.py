"""Batch scheduling under a concurrency and memory budget.

Jobs run in chunks of `max_concurrent`. Before each chunk the batch token
is checked and process memory is sampled; above the threshold a garbage
collection is requested and scheduling pauses briefly. One job's failure
never affects its siblings.
"""

from __future__ import annotations

import dataclasses
import gc
import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone

from mco.domain.models import ProgressSnapshot
from mco.executor.cancellation import CancellationToken
from mco.jobs.classification import analyze_error
from mco.jobs.models import (
    BatchOutcome,
    BatchProgress,
    ConversionOutcome,
    JobDescriptor,
)
from mco.jobs.resources import ResourceMonitor, process_memory_rss
from mco.jobs.retry import RetryPolicy
from mco.logging.context import job_context

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_THRESHOLD = 1024 * 1024 * 1024  # 1 GiB

ConvertOne = Callable[[JobDescriptor, RetryPolicy], ConversionOutcome]
BatchProgressCallback = Callable[[BatchProgress], None]


@dataclass
class BatchOptions:
    """Options for a batch run.

    Attributes:
        max_concurrent: Jobs per chunk, run in parallel.
        memory_threshold: Process RSS in bytes above which scheduling pauses.
        retry: Retry policy applied to each job independently.
        cancellation_token: Stops scheduling of unstarted jobs and cancels
            in-flight ones.
        on_batch_progress: Called on every progress tick of any job.
        memory_pause_seconds: Pause after a high-memory sample.
    """

    max_concurrent: int = 2
    memory_threshold: int = DEFAULT_MEMORY_THRESHOLD
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    cancellation_token: CancellationToken | None = None
    on_batch_progress: BatchProgressCallback | None = None
    memory_pause_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.max_concurrent < 1:
            raise ValueError(
                f"max_concurrent must be at least 1, got {self.max_concurrent}"
            )


class BatchScheduler:
    """Fan a list of jobs out over a bounded thread pool."""

    def __init__(
        self,
        convert_one: ConvertOne,
        memory_sampler: Callable[[], int] | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            convert_one: Runs one job with a retry policy and returns its
                outcome.
            memory_sampler: Returns current process memory in bytes.
                Defaults to the process RSS.
            sleep: Replacement for the high-memory pause, for tests.
        """
        self._convert_one = convert_one
        self._memory_sampler = memory_sampler or process_memory_rss
        self._sleep = sleep

    def _pause(self, seconds: float, token: CancellationToken) -> None:
        if self._sleep is not None:
            self._sleep(seconds)
        else:
            token.wait(seconds)

    def _check_memory(self, options: BatchOptions, token: CancellationToken) -> None:
        try:
            usage = self._memory_sampler()
        except Exception as e:
            logger.debug("Memory sampling failed: %s", e)
            return
        if usage > options.memory_threshold:
            logger.warning(
                "High memory usage detected (%d MB > %d MB), collecting garbage",
                usage // (1024 * 1024),
                options.memory_threshold // (1024 * 1024),
            )
            gc.collect()
            self._pause(options.memory_pause_seconds, token)

    def _sample_memory(self) -> int | None:
        try:
            return self._memory_sampler()
        except Exception:
            return None

    def _run_job(
        self,
        job: JobDescriptor,
        index: int,
        total: int,
        worker_id: str,
        completed_before: int,
        finished_before: int,
        batch_token: CancellationToken,
        monitor: ResourceMonitor,
        options: BatchOptions,
    ) -> ConversionOutcome:
        child = job.cancellation_token.child()
        unregister = batch_token.on_cancellation(child.cancel)

        def on_progress(snapshot: ProgressSnapshot) -> None:
            monitor.update_stats(
                snapshot.current_frame, snapshot.current_time, self._sample_memory()
            )
            if job.on_progress is not None:
                job.on_progress(snapshot)
            if options.on_batch_progress is not None:
                overall = (finished_before + snapshot.percentage / 100) / total * 100
                options.on_batch_progress(
                    BatchProgress(
                        current_index=index + 1,
                        total=total,
                        completed_before=completed_before,
                        finished_before=finished_before,
                        current_file=job.input_path,
                        current_progress=snapshot,
                        overall_percentage=min(max(overall, 0.0), 100.0),
                        performance_stats=monitor.get_performance_stats(),
                    )
                )

        scoped = dataclasses.replace(
            job, cancellation_token=child, on_progress=on_progress
        )
        with job_context(worker_id, job.short_id, job.input_path):
            try:
                return self._convert_one(scoped, options.retry)
            except Exception as e:
                logger.exception("Unexpected failure converting %s", job.input_path)
                return ConversionOutcome(
                    success=False,
                    job_id=job.job_id,
                    input_path=job.input_path,
                    output_path=job.output_path,
                    started_at=datetime.now(timezone.utc),
                    error=str(e),
                    error_report=analyze_error(e),
                    cancelled=child.is_cancelled,
                )
            finally:
                unregister()

    def run_batch(
        self,
        jobs: Sequence[JobDescriptor],
        options: BatchOptions | None = None,
    ) -> BatchOutcome:
        """Run every job and collect the outcomes.

        Never raises for job failures. If the batch token is cancelled,
        unstarted jobs are left out of the results and the outcome is
        marked cancelled.

        Args:
            jobs: Jobs in submission order.
            options: Batch options. Defaults to BatchOptions().

        Returns:
            BatchOutcome with one result per started job, in job order.
        """
        options = options or BatchOptions()
        batch_token = options.cancellation_token or CancellationToken()
        monitor = ResourceMonitor()
        total = len(jobs)
        results: list[ConversionOutcome] = []
        completed = 0
        chunk_size = options.max_concurrent

        logger.info(
            "Starting batch of %d job(s), %d at a time", total, chunk_size
        )

        with ThreadPoolExecutor(
            max_workers=chunk_size, thread_name_prefix="mco-batch"
        ) as executor:
            for start in range(0, total, chunk_size):
                if batch_token.is_cancelled:
                    logger.info(
                        "Batch cancelled, %d job(s) not started", total - start
                    )
                    break

                self._check_memory(options, batch_token)
                if batch_token.is_cancelled:
                    logger.info(
                        "Batch cancelled, %d job(s) not started", total - start
                    )
                    break

                chunk = jobs[start : start + chunk_size]
                futures = [
                    executor.submit(
                        self._run_job,
                        job,
                        start + offset,
                        total,
                        f"{offset + 1:02d}",
                        completed,
                        len(results),
                        batch_token,
                        monitor,
                        options,
                    )
                    for offset, job in enumerate(chunk)
                ]
                for future in futures:
                    outcome = future.result()
                    results.append(outcome)
                    if outcome.success:
                        completed += 1

                logger.info(
                    "Batch progress: %d/%d conversions completed", completed, total
                )

        stats = monitor.get_performance_stats()
        logger.info(
            "Batch finished: %d/%d completed, %d failed%s",
            completed,
            total,
            sum(1 for r in results if not r.success),
            " (cancelled)" if batch_token.is_cancelled else "",
            extra={"performance_stats": stats.to_dict()},
        )
        return BatchOutcome(
            results=tuple(results),
            completed_count=completed,
            total_count=total,
            cancelled=batch_token.is_cancelled,
            performance_stats=stats,
        )
