"""Utility functions and helpers."""

from secret_sweep.utils.config import (
    LoggingSettings,
    ScannerSettings,
    Settings,
    load_config,
)
from secret_sweep.utils.log import configure_logging

__all__ = [
    "LoggingSettings",
    "ScannerSettings",
    "Settings",
    "configure_logging",
    "load_config",
]
