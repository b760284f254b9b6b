"""Error hierarchy for the probe.

Each kind maps to one UNKNOWN output line in the driver; only per-row
extraction problems and job-detail fetch failures are recovered locally.
"""

from typing import Optional


class ProbeError(Exception):
    """Base exception for every failure the probe can report."""

    def __init__(self, message: str, url: Optional[str] = None, cause: Optional[Exception] = None):
        self.url = url
        self.cause = cause
        super().__init__(message)


class AuthError(ProbeError):
    """Login was not answered with the main-menu redirect."""


class FetchError(ProbeError):
    """Network or HTTP failure while retrieving a console page."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        cause: Optional[Exception] = None,
        status_code: Optional[int] = None,
    ):
        self.status_code = status_code
        super().__init__(message, url=url, cause=cause)


class ExtractionError(ProbeError):
    """A required element was missing from the scraped markup."""


class EmptyResultError(ProbeError):
    """An authenticated scrape produced no pipes."""


class ProbeTimeoutError(ProbeError):
    """The run deadline expired before the pipeline finished."""


