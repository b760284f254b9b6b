"""Pipe list evaluation: status histogram and stall detection."""

from __future__ import annotations

import logging
import math
import time
from collections import Counter
from typing import Callable, Dict, List, Optional, Sequence

from ..data.models import JobDetail, PipeEvaluation, PipeRecord

logger = logging.getLogger(__name__)

JobDetailFetcher = Callable[[PipeRecord], Optional[JobDetail]]


def stalled_message(pipe: PipeRecord, elapsed_hours: float) -> str:
    return (
        f"possible stalled pipe {pipe.name} running in stage '{pipe.stage or ''}' "
        f"for {math.floor(elapsed_hours)} hours"
    )


def evaluate_pipes(
    pipes: Sequence[PipeRecord],
    stale_threshold_hours: Optional[float] = None,
    job_detail_fetcher: Optional[JobDetailFetcher] = None,
    now: Optional[float] = None,
) -> PipeEvaluation:
    """Build the status histogram and look for stalled pipes.

    Args:
        pipes: Records from the pipe list, in page order.
        stale_threshold_hours: Running pipes whose job started at least this
            many hours ago are reported. None disables stall detection and
            no job detail is fetched.
        job_detail_fetcher: Called once per running pipe when stall
            detection is enabled; may return None.
        now: Reference Unix time, defaults to the current time.

    Returns:
        PipeEvaluation. Only the last stalled pipe in page order is kept in
        ``stalled_finding``.
    """
    histogram: Counter = Counter()
    pipe_by_status: Dict[str, List[str]] = {}
    stalled_finding: Optional[str] = None
    check_stalls = stale_threshold_hours is not None and job_detail_fetcher is not None

    for pipe in pipes:
        histogram[pipe.status] += 1
        pipe_by_status.setdefault(pipe.status, []).append(pipe.label)

        if not check_stalls or not pipe.is_running:
            continue
        detail = job_detail_fetcher(pipe)
        if detail is None:
            continue
        elapsed = detail.elapsed_hours(now if now is not None else time.time())
        if elapsed is None:
            logger.debug("No start time for running pipe %s", pipe.name)
            continue
        logger.debug("Pipe %s running for %.2f hours", pipe.name, elapsed)
        if elapsed >= stale_threshold_hours:
            stalled_finding = stalled_message(pipe, elapsed)

    return PipeEvaluation(
        histogram=dict(histogram),
        pipe_by_status=pipe_by_status,
        stalled_finding=stalled_finding,
    )
