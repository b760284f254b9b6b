"""Scheduled task evaluation."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from ..data.models import ScheduledTaskRecord


def watches(watch_list: Iterable[str], process_name: str) -> bool:
    """True if any watched entry occurs inside ``process_name``."""
    return any(entry in process_name for entry in watch_list)


def evaluate_schedule(tasks: Sequence[ScheduledTaskRecord], watch_list: Iterable[str]) -> List[str]:
    """Return the process names of watched tasks that are not enabled."""
    watch_list = [entry for entry in watch_list if entry]
    return [
        task.process_name
        for task in tasks
        if not task.is_enabled and watches(watch_list, task.process_name)
    ]
