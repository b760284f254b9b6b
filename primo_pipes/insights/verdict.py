"""Verdict aggregation.

Combines the pipe histogram, the stalled-pipe finding and the disabled
scheduled tasks into one severity and one message line.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

from ..data.models import CRITICAL_STATUSES, Severity, Verdict


def compact_status_message(histogram: Mapping[str, int]) -> str:
    return ", ".join(f"status '{status}': {histogram[status]}" for status in sorted(histogram))


def verbose_status_message(pipe_by_status: Mapping[str, Sequence[str]]) -> str:
    return "".join(
        f"status '{status}': {', '.join(pipe_by_status[status])} "
        for status in sorted(pipe_by_status)
    )


def severity_of(
    histogram: Mapping[str, int],
    stalled_finding: Optional[str],
    disabled_tasks: Sequence[str],
) -> Severity:
    findings: List[Severity] = [Severity.OK]
    if any(status in CRITICAL_STATUSES for status in histogram):
        findings.append(Severity.CRITICAL)
    if stalled_finding:
        findings.append(Severity.WARNING)
    if disabled_tasks:
        findings.append(Severity.WARNING)
    return max(findings, key=lambda s: s.rank)


def aggregate(
    histogram: Mapping[str, int],
    pipe_by_status: Optional[Mapping[str, Sequence[str]]] = None,
    stalled_finding: Optional[str] = None,
    disabled_tasks: Sequence[str] = (),
    verbose: bool = False,
) -> Verdict:
    """Build the verdict for one probe run.

    Message layout: stalled-pipe sentence, then the disabled scheduled task
    count (names when verbose), then the per-status summary. Verbose output
    falls back to the compact counts when no pipe names are given.
    """
    parts: List[str] = []
    if stalled_finding:
        parts.append(stalled_finding)
    if disabled_tasks:
        detail = ", ".join(disabled_tasks) if verbose else str(len(disabled_tasks))
        parts.append(f"scheduled job disabled: {detail}")

    if verbose and pipe_by_status:
        parts.append(verbose_status_message(pipe_by_status))
    else:
        parts.append(compact_status_message(histogram))

    return Verdict(
        severity=severity_of(histogram, stalled_finding, disabled_tasks),
        message=", ".join(parts),
    )
