"""HTML extraction for Primo Back Office pages.

The Back Office only offers HTML, so pipes, scheduled tasks and job details
are scraped from markup. Row discovery is separated from field parsing:
a ``RowSchema`` walks the document and yields lazy row handles until its
termination condition fires, and the extract functions only ask a row for
named fields. Swapping id-based scanning for CSS selectors (or back) does not
touch the field parsing or anything downstream.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Optional
from urllib.parse import parse_qs, urljoin, urlparse

from bs4 import BeautifulSoup, Tag
from dateutil import parser as dateparser

from ..exceptions import ExtractionError
from .models import PIPE_TASK_TYPE, PipeRecord, ScheduledTaskRecord

logger = logging.getLogger(__name__)

ELLIPSIS_MARKERS = ("...", "…")
START_TIME_LABEL = re.compile(r"^\s*start\s+time\s*:?\s*$", re.IGNORECASE)


# --- Row schemas --------------------------------------------------------------

class Row(ABC):
    """Handle on one repeated row of a page."""

    @abstractmethod
    def field(self, name: str) -> Optional[Tag]:
        """Return the element holding ``name`` for this row, if present."""
        pass


class RowSchema(ABC):
    """Strategy that discovers the repeated rows of a page."""

    @abstractmethod
    def rows(self, soup: BeautifulSoup) -> Iterator[Row]:
        pass


class SelectorRow(Row):
    def __init__(self, element: Tag, fields: Dict[str, str]):
        self.element = element
        self._fields = fields

    def field(self, name: str) -> Optional[Tag]:
        selector = self._fields.get(name)
        if not selector:
            return None
        return self.element.select_one(selector)


class SelectorRowSchema(RowSchema):
    """Rows are elements matching a CSS selector; fields are sub-selectors."""

    def __init__(self, row_selector: str, fields: Dict[str, str]):
        self.row_selector = row_selector
        self.fields = fields

    def rows(self, soup: BeautifulSoup) -> Iterator[Row]:
        for element in soup.select(self.row_selector):
            yield SelectorRow(element, self.fields)


class IndexedRow(Row):
    def __init__(self, soup: BeautifulSoup, index: int, id_format: str):
        self.soup = soup
        self.index = index
        self._id_format = id_format

    def field(self, name: str) -> Optional[Tag]:
        return self.soup.find(id=self._id_format.format(field=name, index=self.index))


class IndexedRowSchema(RowSchema):
    """Rows are numbered through element ids (``owner-0``, ``owner-1``, ...).

    Scanning stops at the first index whose anchor element is missing, so
    rows after a gap in the numbering are never reached.
    """

    def __init__(self, anchor: str, id_format: str = "{field}-{index}"):
        self.anchor = anchor
        self.id_format = id_format

    def rows(self, soup: BeautifulSoup) -> Iterator[Row]:
        index = 0
        while soup.find(id=self.id_format.format(field=self.anchor, index=index)) is not None:
            yield IndexedRow(soup, index, self.id_format)
            index += 1


PIPE_ROWS = SelectorRowSchema(
    "tr.pipeRow",
    {
        "name": "td.pipeName",
        "owner": "td.pipeOwner",
        "type": "td.pipeType",
        "stage": "td.pipeStage",
        "status": "td.pipeStatus",
        "history": "a.pipeHistory",
    },
)

SCHEDULE_ROWS = IndexedRowSchema("owner")


# --- Field helpers ------------------------------------------------------------

def _clean(text: Optional[str]) -> str:
    return " ".join((text or "").split())


def _optional_text(row: Row, name: str) -> Optional[str]:
    element = row.field(name)
    if element is None:
        return None
    return _clean(element.get_text(" ")) or None


def _required_text(row: Row, name: str) -> str:
    text = _optional_text(row, name)
    if text is None:
        raise ExtractionError(f"missing required field '{name}'")
    return text


def normalize_status(text: str) -> str:
    return _clean(text).lower()


def first_line(text: Optional[str]) -> Optional[str]:
    """Keep only the first line of a (possibly multi-line) tooltip."""
    lines = (text or "").strip().splitlines()
    if not lines:
        return None
    return lines[0].strip() or None


def is_truncated(name: str) -> bool:
    return name.endswith(ELLIPSIS_MARKERS)


def name_from_history_url(url: Optional[str]) -> Optional[str]:
    """Read the ``name=`` query parameter of a pipe history link."""
    if not url:
        return None
    try:
        values = parse_qs(urlparse(url).query).get("name")
    except ValueError:
        return None
    if not values or not values[0].strip():
        return None
    return values[0].strip()


def _href(element: Optional[Tag], base_url: Optional[str]) -> Optional[str]:
    if element is None:
        return None
    href = (element.get("href") or "").strip()
    if not href:
        return None
    return urljoin(base_url, href) if base_url else href


# --- Pipe list ----------------------------------------------------------------

def _pipe_from_row(row: Row, base_url: Optional[str]) -> PipeRecord:
    name = _required_text(row, "name")
    owner = _required_text(row, "owner")

    status_cell = row.field("status")
    if status_cell is None:
        raise ExtractionError(f"pipe {name}: missing status cell")

    link = status_cell.find("a")
    status = normalize_status(link.get_text(" ") if link is not None else status_cell.get_text(" "))
    if not status:
        raise ExtractionError(f"pipe {name}: empty status")

    icon = status_cell.find("img", title=True)
    extended_status = first_line(icon.get("title")) if icon is not None else None

    history_url = _href(row.field("history"), base_url)
    if is_truncated(name):
        full_name = name_from_history_url(history_url)
        if full_name:
            name = full_name
        else:
            logger.debug("Could not recover truncated pipe name %r", name)

    return PipeRecord(
        name=name,
        owner=owner,
        type=_optional_text(row, "type"),
        stage=_optional_text(row, "stage"),
        status=status,
        status_page_url=_href(link, base_url),
        history_page_url=history_url,
        extended_status=extended_status,
    )


def extract_pipes(
    html: str,
    name_filter: Optional[str] = None,
    base_url: Optional[str] = None,
    schema: RowSchema = PIPE_ROWS,
) -> List[PipeRecord]:
    """Extract pipe records from the pipe list page.

    Args:
        html: Raw page markup.
        name_filter: If given, only the pipe with exactly this name is kept.
            All rows are still scanned.
        base_url: URL the page was fetched from; row links are resolved
            against it.
        schema: Row discovery strategy.

    Rows missing a name, owner or status are dropped; missing optional
    fields are left as None.
    """
    soup = BeautifulSoup(html, "html.parser")
    records: List[PipeRecord] = []
    for row in schema.rows(soup):
        try:
            record = _pipe_from_row(row, base_url)
        except ExtractionError as e:
            logger.debug("Skipping pipe row: %s", e)
            continue
        if name_filter is not None and record.name != name_filter:
            continue
        records.append(record)
    logger.debug("Extracted %d pipe rows", len(records))
    return records


# --- Scheduled tasks ----------------------------------------------------------

def extract_scheduled_tasks(html: str, schema: RowSchema = SCHEDULE_ROWS) -> List[ScheduledTaskRecord]:
    """Extract the PIPE rows of the scheduled tasks page."""
    soup = BeautifulSoup(html, "html.parser")
    tasks: List[ScheduledTaskRecord] = []
    for row in schema.rows(soup):
        if _optional_text(row, "type") != PIPE_TASK_TYPE:
            continue
        try:
            tasks.append(ScheduledTaskRecord(
                owner=_required_text(row, "owner"),
                process_name=_required_text(row, "processName"),
                enabled=_required_text(row, "enabled"),
            ))
        except ExtractionError as e:
            logger.debug("Skipping scheduled task row: %s", e)
    return tasks


# --- Job detail ---------------------------------------------------------------

def parse_timestamp(text: Optional[str]) -> Optional[float]:
    """Parse a free-form date-time string into a Unix timestamp.

    Times without a zone are taken as local time.
    """
    text = _clean(text)
    if not text:
        return None
    try:
        return dateparser.parse(text).timestamp()
    except (ValueError, OverflowError) as e:
        logger.debug("Unparsable start time %r: %s", text, e)
        return None


def extract_job_start_time(html: str) -> Optional[float]:
    """Read the 'Start Time' cell of a pipe status page."""
    soup = BeautifulSoup(html, "html.parser")
    label = soup.find(
        lambda tag: tag.name in ("th", "td", "span", "label")
        and START_TIME_LABEL.match(tag.get_text(" ", strip=True)) is not None
    )
    if label is None:
        return None
    value = label.find_next_sibling(["td", "span"])
    if value is None:
        value = label.find_next("td")
    if value is None:
        return None
    return parse_timestamp(value.get_text(" "))
