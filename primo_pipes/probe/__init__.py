"""Probe driver - configuration and command line entry point."""

from .config import ConfigError, ProbeConfig
from .main import check, main, run_probe

__all__ = [
    "ConfigError",
    "ProbeConfig",
    "check",
    "main",
    "run_probe",
]
