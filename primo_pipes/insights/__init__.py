"""Insights module - pipe and schedule evaluation, verdict aggregation."""

from .pipes import evaluate_pipes
from .schedule import evaluate_schedule
from .verdict import aggregate

__all__ = [
    "evaluate_pipes",
    "evaluate_schedule",
    "aggregate",
]
