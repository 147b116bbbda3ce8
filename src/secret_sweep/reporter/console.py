"""Console output reporter using Rich.

This module drains the reporting queue filled by the executor and the
detection engine, printing each finding as it arrives and a summary once
the end-of-stream marker is received.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from secret_sweep.core.models import BytesProcessed, SecretFound

if TYPE_CHECKING:
    import queue

    from secret_sweep.core.models import ReportInput, Secret


@dataclass
class ReportSummary:
    """Summary statistics collected while draining the report queue.

    Attributes:
        files_processed: Number of progress messages received.
        bytes_processed: Total bytes handed to the detection engine.
        secrets: Findings in arrival order.
        findings_by_detector: Count of findings per detector.
    """

    files_processed: int = 0
    bytes_processed: int = 0
    secrets: list[Secret] = field(default_factory=list)
    findings_by_detector: dict[str, int] = field(default_factory=dict)

    @property
    def total_findings(self) -> int:
        return len(self.secrets)

    @property
    def verified_count(self) -> int:
        return sum(1 for s in self.secrets if s.verified)

    def add(self, message: ReportInput) -> None:
        """Fold one report message into the summary."""
        if isinstance(message, BytesProcessed):
            self.files_processed += 1
            self.bytes_processed += message.size
        elif isinstance(message, SecretFound):
            secret = message.secret
            self.secrets.append(secret)
            self.findings_by_detector[secret.detector_type] = (
                self.findings_by_detector.get(secret.detector_type, 0) + 1
            )


class ConsoleReporter:
    """Rich console reporter for scan results.

    Example:
        ```python
        reporter = ConsoleReporter()
        summary = reporter.consume(report_queue)
        reporter.print_summary(summary)
        ```
    """

    def __init__(
        self,
        console: Console | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialize the console reporter.

        Args:
            console: Rich Console instance (creates one if None).
            verbose: Whether to show verbose output.
        """
        self.console = console or Console()
        self.verbose = verbose

    def consume(self, report_queue: queue.Queue[ReportInput | None]) -> ReportSummary:
        """Drain the queue until the end-of-stream marker.

        Findings are printed as they arrive.

        Returns:
            Summary of everything received.
        """
        summary = ReportSummary()
        while True:
            message = report_queue.get()
            if message is None:
                break
            summary.add(message)
            if isinstance(message, SecretFound):
                self.print_secret(message.secret)
        return summary

    def print_secret(self, secret: Secret) -> None:
        """Print a single finding block."""
        style = "bold red" if secret.verified else "bold yellow"
        self.console.print(Text(str(secret), style=style))

    def print_summary(self, summary: ReportSummary) -> None:
        """Print summary statistics.

        Args:
            summary: Summary statistics to display.
        """
        self.console.print()

        if summary.total_findings == 0:
            self.console.print(
                Panel(
                    f"[green]✓ No secrets detected[/green] "
                    f"[dim]({summary.files_processed} files, "
                    f"{summary.bytes_processed} bytes)[/dim]",
                    title="Scan Complete",
                    border_style="green",
                )
            )
            return

        table = Table(
            title="Scan Summary",
            show_header=True,
            header_style="bold",
            border_style="yellow",
        )

        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right", style="yellow")

        table.add_row("Files Processed", str(summary.files_processed))
        table.add_row("Bytes Processed", str(summary.bytes_processed))
        table.add_row(
            "Secrets Found",
            Text(str(summary.total_findings), style="bold red"),
        )
        table.add_row("Verified", str(summary.verified_count))

        self.console.print(table)

        if self.verbose and summary.findings_by_detector:
            self.console.print()
            detector_table = Table(
                title="Findings by Detector",
                show_header=True,
                header_style="bold",
                border_style="blue",
            )
            detector_table.add_column("Detector", style="cyan")
            detector_table.add_column("Count", justify="right", style="yellow")

            for detector, count in sorted(
                summary.findings_by_detector.items(),
                key=lambda x: x[1],
                reverse=True,
            ):
                detector_table.add_row(detector, str(count))

            self.console.print(detector_table)

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[bold red]Error:[/bold red] {message}")


def create_console_reporter(verbose: bool = False) -> ConsoleReporter:
    """Create a console reporter."""
    return ConsoleReporter(verbose=verbose)
