"""Job context for structured logging.

Batch workers run jobs on pool threads; contextvars carry the worker slot,
job ID and input path into every log record emitted while a job runs.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_worker_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "worker_id", default=None
)
_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)
_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)


def get_job_context() -> tuple[str | None, str | None, str | None]:
    """Get current job context.

    Returns:
        Tuple of (worker_id, job_id, file_path), any may be None.
    """
    return _worker_id.get(), _job_id.get(), _file_path.get()


@contextmanager
def job_context(
    worker_id: str | None,
    job_id: str | None = None,
    file_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager scoping log records to one job.

    The previous context is restored on exit, so nested use is safe.

    Example:
        with job_context("01", "3f2a9c1b", "/media/clip.mp4"):
            logger.info("Converting")  # tagged [W01:3f2a9c1b]
    """
    tokens = (
        _worker_id.set(worker_id),
        _job_id.set(job_id),
        _file_path.set(str(file_path) if file_path is not None else None),
    )
    try:
        yield
    finally:
        _file_path.reset(tokens[2])
        _job_id.reset(tokens[1])
        _worker_id.reset(tokens[0])


class JobContextFilter(logging.Filter):
    """Logging filter that injects job context into log records.

    Adds worker_id, job_id and file_path attributes, plus a compact
    job_tag ("[W01:3f2a9c1b] ", "[W01] ", "[3f2a9c1b] " or "") for text
    output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        worker_id, job_id, file_path = get_job_context()
        record.worker_id = worker_id
        record.job_id = job_id
        record.file_path = file_path

        if worker_id and job_id:
            record.job_tag = f"[W{worker_id}:{job_id}] "
        elif worker_id:
            record.job_tag = f"[W{worker_id}] "
        elif job_id:
            record.job_tag = f"[{job_id}] "
        else:
            record.job_tag = ""
        return True  # Never filter out records
