"""Primo Back Office pipe health probe."""

__version__ = "1.0.0"
