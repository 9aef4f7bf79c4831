"""Structured logging with JSON output, file rotation and job context."""

from mco.logging.config import configure_logging
from mco.logging.context import JobContextFilter, get_job_context, job_context
from mco.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "JobContextFilter",
    "configure_logging",
    "get_job_context",
    "job_context",
]
