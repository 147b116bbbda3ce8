"""Reporter module for draining the report queue and printing results."""

from secret_sweep.reporter.console import (
    ConsoleReporter,
    ReportSummary,
    create_console_reporter,
)

__all__ = [
    "ConsoleReporter",
    "ReportSummary",
    "create_console_reporter",
]
