"""Base collector interface for Back Office pages."""

from abc import ABC, abstractmethod
from typing import Any


class BaseCollector(ABC):
    """Abstract base class for console page collectors.

    A collector fetches one kind of Back Office page through an
    authenticated session and turns it into records.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in log messages (e.g. 'pipes')."""
        pass

    @property
    @abstractmethod
    def path(self) -> str:
        """Console path of the page, relative to the host."""
        pass

    @abstractmethod
    def collect(self) -> Any:
        """Fetch the page and extract its records.

        Raises:
            FetchError: If the page could not be retrieved.
            ProbeTimeoutError: If the run deadline expired.
        """
        pass
