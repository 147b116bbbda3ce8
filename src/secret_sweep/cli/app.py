"""CLI application entry point."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Annotated

import typer

from secret_sweep import __version__
from secret_sweep.core.executor import (
    BranchLevel,
    DataSource,
    Executor,
    ExecutorConfig,
    ReadFailurePolicy,
)
from secret_sweep.core.models import new_report_queue
from secret_sweep.errors import SecretSweepError
from secret_sweep.reporter.console import create_console_reporter
from secret_sweep.utils.config import load_config
from secret_sweep.utils.log import configure_logging

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="secretsweep",
    help="Secret Sweep - scan filesystems and Git branches for secrets",
    no_args_is_help=True,
    add_completion=False,
)


def _is_repository_url(target: str) -> bool:
    """Check if target is a repository URL."""
    return target.startswith(("http://", "https://", "git@", "ssh://", "file://"))


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"Secret Sweep v{__version__}")


@app.command()
def scan(
    target: Annotated[
        str,
        typer.Argument(help="Local path or Git repository URL"),
    ],
    rules: Annotated[
        Path | None,
        typer.Option(
            "--rules",
            "-r",
            help="Detector rules file (TOML)",
        ),
    ] = None,
    source: Annotated[
        DataSource,
        typer.Option(
            "--source",
            "-s",
            help="Data source: filesystem or git",
        ),
    ] = DataSource.FILE_SYSTEM,
    branch_level: Annotated[
        BranchLevel | None,
        typer.Option(
            "--branch-level",
            "-b",
            help="Branches to scan: head, local, remote, all",
        ),
    ] = None,
    branches: Annotated[
        list[str] | None,
        typer.Option(
            "--branch",
            help="Only scan this branch (repeatable)",
        ),
    ] = None,
    omit: Annotated[
        str | None,
        typer.Option(
            "--omit",
            "-o",
            help="Space-separated path substrings to skip",
        ),
    ] = None,
    nodeps: Annotated[
        str | None,
        typer.Option(
            "--nodeps",
            help="Space-separated dependency directories to skip",
        ),
    ] = None,
    read_failure: Annotated[
        ReadFailurePolicy | None,
        typer.Option(
            "--on-read-failure",
            help="abort the branch walk or skip the file",
        ),
    ] = None,
    settings_file: Annotated[
        Path | None,
        typer.Option(
            "--settings",
            help="Settings file (TOML)",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show verbose output",
        ),
    ] = False,
) -> None:
    """Scan a directory or Git repository for secrets.

    Examples:
        secretsweep scan ./project --rules rules.toml
        secretsweep scan . --source git --branch-level local --rules rules.toml
        secretsweep scan https://github.com/user/repo -s git -b all -r rules.toml
    """
    reporter = create_console_reporter(verbose=verbose)
    try:
        settings = load_config(settings_file)
    except SecretSweepError as e:
        reporter.print_error(str(e))
        raise typer.Exit(code=2) from None

    configure_logging(settings.logging, verbose=verbose)
    scanner = settings.scanner

    url: str | None = None
    path: Path | None = None
    if source is DataSource.GIT and _is_repository_url(target):
        url = target
    else:
        path = Path(target)

    report_queue = new_report_queue()
    config = ExecutorConfig(
        data_source=source,
        report_queue=report_queue,
        path=path,
        url=url,
        config=rules,
        omit=omit if omit is not None else scanner.omit,
        nodeps=nodeps if nodeps is not None else scanner.nodeps,
        branch_level=branch_level or scanner.branch_level,
        branches=branches or scanner.branches,
        read_failure_policy=read_failure or scanner.read_failure_policy,
        max_pending_payloads=scanner.max_pending_payloads,
        max_workers=scanner.max_workers,
        temp_root=scanner.temp_root,
    )

    try:
        executor = Executor(config)
    except SecretSweepError as e:
        reporter.print_error(str(e))
        raise typer.Exit(code=2) from None

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="executor") as runner:
        run = runner.submit(executor.execute)
        summary = reporter.consume(report_queue)
        run.result()

    reporter.print_summary(summary)
    logger.info("Scanned branches: %s", ", ".join(executor.scanned_branches))

    if summary.total_findings > 0:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
