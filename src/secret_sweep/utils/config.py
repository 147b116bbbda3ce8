"""Configuration management for Secret Sweep.

This module provides configuration loading and management using
Pydantic Settings with support for environment variables and TOML files.
"""

import os
import tomllib
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from secret_sweep.core.executor import BranchLevel, ReadFailurePolicy
from secret_sweep.errors import ConfigurationError

# Matches the repository metadata directory only, not .github or .gitignore
GIT_METADATA_DIR = f"{os.sep}.git{os.sep}"


class ScannerSettings(BaseSettings):
    """Scanner configuration settings."""

    model_config = SettingsConfigDict(env_prefix="SSW_SCANNER_")

    omit: str = Field(
        default="",
        description="Space-separated path substrings to skip",
    )
    nodeps: str = Field(
        default=f"node_modules vendor {GIT_METADATA_DIR}",
        description="Space-separated dependency directories to skip",
    )
    branch_level: BranchLevel = Field(
        default=BranchLevel.HEAD,
        description="Branches to scan: head, local, remote or all",
    )
    branches: list[str] | None = Field(
        default=None,
        description="Only scan these branches",
    )
    read_failure_policy: ReadFailurePolicy = Field(
        default=ReadFailurePolicy.ABORT,
        description="On unreadable files: 'abort' the branch walk or 'skip' the file",
    )
    max_pending_payloads: int = Field(
        default=0,
        ge=0,
        description="Files read but not yet inspected (0 = unbounded)",
    )
    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Inspection threads (default: CPU count)",
    )
    temp_root: Path | None = Field(
        default=None,
        description="Directory for remote clones (default: system temp)",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="SSW_LOGGING_")

    level: str = Field(default="WARNING", description="Log level")
    file: str | None = Field(default=None, description="Log file path")


class Settings(BaseSettings):
    """Main application settings container."""

    model_config = SettingsConfigDict(
        env_prefix="SSW_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    scanner: ScannerSettings = Field(default_factory=ScannerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_config(config_path: Path | None = None) -> Settings:
    """Load configuration from file and environment.

    Priority (highest to lowest):
    1. Config file
    2. Environment variables
    3. Defaults

    Args:
        config_path: Optional path to a TOML configuration file.

    Returns:
        Loaded Settings instance.

    Raises:
        ConfigurationError: If the file is unreadable, not TOML, or holds
            invalid values.
    """
    config_data: dict[str, object] = {}

    if config_path and config_path.exists():
        try:
            with config_path.open("rb") as f:
                config_data = tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read settings file {config_path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

    try:
        return Settings(**config_data)  # type: ignore[arg-type]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
