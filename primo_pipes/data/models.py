"""Data models for Primo pipe monitoring.

Records are created per scrape, owned by the single evaluation pass that
created them and discarded afterwards. Nothing here is persisted.

Status values are the console's own strings, normalised to lower case with
collapsed whitespace (e.g. 'running', 'completed', 'stopped error').
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


# =============================================================================
# Severity
# =============================================================================


class Severity(str, Enum):
    """Monitoring supervisor severity of a probe result."""

    OK = "OK"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    UNKNOWN = "UNKNOWN"

    @property
    def exit_code(self) -> int:
        return SEVERITY_EXIT_CODES[self]

    @property
    def rank(self) -> int:
        """Ordering used when combining findings (CRITICAL > WARNING > OK)."""
        return SEVERITY_RANK[self]


SEVERITY_EXIT_CODES = {
    Severity.OK: 0,
    Severity.WARNING: 1,
    Severity.CRITICAL: 2,
    Severity.UNKNOWN: 3,
}

SEVERITY_RANK = {
    Severity.OK: 0,
    Severity.WARNING: 1,
    Severity.CRITICAL: 2,
    Severity.UNKNOWN: 3,
}


# Pipe statuses that make the whole run CRITICAL
CRITICAL_STATUSES = frozenset({
    "stopped error",
    "stopped harvest error",
    "threshold exceeded error",
})

RUNNING_STATUS = "running"
ENABLED = "Enabled"
PIPE_TASK_TYPE = "PIPE"


# =============================================================================
# Scraped records
# =============================================================================


@dataclass
class PipeRecord:
    """One row of the pipe list page."""

    name: str
    owner: str
    status: str
    type: Optional[str] = None
    stage: Optional[str] = None
    status_page_url: Optional[str] = None
    history_page_url: Optional[str] = None
    extended_status: Optional[str] = None  # first line of the status icon tooltip

    @property
    def is_running(self) -> bool:
        return self.status == RUNNING_STATUS

    @property
    def label(self) -> str:
        """Name as shown in verbose output, with the extended status if any."""
        if self.extended_status:
            return f"{self.name} ({self.extended_status})"
        return self.name


@dataclass
class ScheduledTaskRecord:
    """One PIPE row of the scheduled tasks page."""

    owner: str
    process_name: str
    enabled: str  # 'Enabled', 'Disabled', ...

    @property
    def is_enabled(self) -> bool:
        return self.enabled == ENABLED


@dataclass
class JobDetail:
    """Fields read from a pipe's status page."""

    start_time: Optional[float] = None  # Unix timestamp

    def elapsed_hours(self, now: float) -> Optional[float]:
        if self.start_time is None:
            return None
        return (now - self.start_time) / 3600


# =============================================================================
# Evaluation results
# =============================================================================


@dataclass
class PipeEvaluation:
    """Outcome of evaluating the pipe list.

    ``stalled_finding`` holds at most one sentence: when several running
    pipes exceed the threshold only the last one in page order is kept.
    """

    histogram: Dict[str, int] = field(default_factory=dict)
    pipe_by_status: Dict[str, List[str]] = field(default_factory=dict)
    stalled_finding: Optional[str] = None


@dataclass
class Verdict:
    """Aggregate severity plus the single-line message."""

    severity: Severity
    message: str

    @property
    def exit_code(self) -> int:
        return self.severity.exit_code
