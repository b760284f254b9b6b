"""Back Office collectors - session handling, pipe list and scheduled tasks."""

from .base import BaseCollector
from .pipes import PipeCollector
from .schedule import ScheduleCollector
from .session import Deadline, SessionHandle, fetch, login

__all__ = [
    "BaseCollector",
    "PipeCollector",
    "ScheduleCollector",
    "Deadline",
    "SessionHandle",
    "fetch",
    "login",
]
