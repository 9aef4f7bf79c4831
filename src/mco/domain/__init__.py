"""Domain enums and value models shared across the orchestrator."""

from mco.domain.enums import ErrorCategory, ErrorClassification, MediaFormat, Severity
from mco.domain.models import ErrorReport, ProbedMediaInfo, ProgressSnapshot

__all__ = [
    "ErrorCategory",
    "ErrorClassification",
    "ErrorReport",
    "MediaFormat",
    "ProbedMediaInfo",
    "ProgressSnapshot",
    "Severity",
]
