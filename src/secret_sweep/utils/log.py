"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from secret_sweep.utils.config import LoggingSettings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def configure_logging(settings: LoggingSettings, verbose: bool = False) -> None:
    """Configure the root logger once per process.

    Args:
        settings: Logging settings (level and optional file).
        verbose: Force DEBUG level regardless of settings.
    """
    level = logging.DEBUG if verbose else logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING

    kwargs: dict[str, object] = {"level": level, "format": LOG_FORMAT}
    if settings.file:
        kwargs["filename"] = settings.file
    logging.basicConfig(**kwargs)  # type: ignore[arg-type]
