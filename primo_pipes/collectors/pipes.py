"""Pipe list collector.

Fetches the Back Office pipe list and, for stall detection, the status
page of individual running pipes.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..data.extraction import extract_job_start_time, extract_pipes
from ..data.models import JobDetail, PipeRecord
from ..exceptions import EmptyResultError, FetchError
from .base import BaseCollector
from .session import SessionHandle, fetch

logger = logging.getLogger(__name__)

PIPE_LIST_PATH = (
    "/primo_publishing/admin/action/pipeList.do"
    "?listCurrentAction=list&menuKey=com.exlibris.primo.publishing.menu.PipeMonitoring"
)


class PipeCollector(BaseCollector):
    """Collector for the pipe list page."""

    def __init__(self, session: SessionHandle, name_filter: Optional[str] = None):
        self.session = session
        self.name_filter = name_filter

    @property
    def name(self) -> str:
        return "pipes"

    @property
    def path(self) -> str:
        return PIPE_LIST_PATH

    def collect(self) -> List[PipeRecord]:
        """Fetch and extract the pipe list.

        Raises:
            EmptyResultError: If no pipe (or not the filtered pipe) was found.
        """
        url = self.session.url(self.path)
        html = fetch(url, self.session)
        pipes = extract_pipes(html, name_filter=self.name_filter, base_url=url)
        if not pipes:
            if self.name_filter:
                raise EmptyResultError(f"no pipe named '{self.name_filter}' found", url=url)
            raise EmptyResultError("no pipes found in pipe list", url=url)
        logger.info("[%s] Collected %d pipes", self.name, len(pipes))
        return pipes

    def job_detail(self, pipe: PipeRecord) -> Optional[JobDetail]:
        """Fetch the status page of ``pipe``.

        A failed fetch is logged and yields None so one unreachable detail
        page does not fail the run.
        """
        if not pipe.status_page_url:
            logger.debug("[%s] Pipe %s has no status page link", self.name, pipe.name)
            return None
        try:
            html = fetch(pipe.status_page_url, self.session)
        except FetchError as e:
            logger.warning("[%s] Job detail for %s unavailable: %s", self.name, pipe.name, e)
            return None
        return JobDetail(start_time=extract_job_start_time(html))
