"""Data layer - records, verdict types and HTML extraction."""

from .models import (
    Severity,
    PipeRecord,
    ScheduledTaskRecord,
    JobDetail,
    PipeEvaluation,
    Verdict,
)

__all__ = [
    "Severity",
    "PipeRecord",
    "ScheduledTaskRecord",
    "JobDetail",
    "PipeEvaluation",
    "Verdict",
]
