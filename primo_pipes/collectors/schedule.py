"""Scheduled tasks collector."""

from __future__ import annotations

import logging
from typing import List

from ..data.extraction import extract_scheduled_tasks
from ..data.models import ScheduledTaskRecord
from .base import BaseCollector
from .session import SessionHandle, fetch

logger = logging.getLogger(__name__)

SCHEDULE_PATH = "/primo_publishing/admin/action/schedule.do?menuKey=com.exlibris.primo.publishing.menu.Scheduler"


class ScheduleCollector(BaseCollector):
    """Collector for the scheduled tasks page (PIPE tasks only)."""

    def __init__(self, session: SessionHandle):
        self.session = session

    @property
    def name(self) -> str:
        return "schedule"

    @property
    def path(self) -> str:
        return SCHEDULE_PATH

    def collect(self) -> List[ScheduledTaskRecord]:
        url = self.session.url(self.path)
        tasks = extract_scheduled_tasks(fetch(url, self.session))
        logger.info("[%s] Collected %d scheduled pipe tasks", self.name, len(tasks))
        return tasks
