"""Exception hierarchy for Secret Sweep."""

from __future__ import annotations


class SecretSweepError(Exception):
    """Base class for all errors raised by Secret Sweep."""


class ConfigurationError(SecretSweepError):
    """The scan cannot start because its configuration is incomplete or invalid."""


class SourceError(SecretSweepError):
    """A data source could not be opened, queried or released."""


class CloneError(SourceError):
    """Cloning a remote repository failed."""


class RepositoryNotFoundError(SourceError):
    """No Git repository contains the given path."""


class BranchNotAccessibleError(SourceError):
    """A branch name could not be resolved as text."""


class BranchSwitchError(SourceError):
    """Checking out a branch failed."""


class SourceNotReadyError(SourceError):
    """The repository is flushed or was never opened."""


class UnsupportedOperationError(SourceError):
    """The backend has no version control semantics."""


class FlushError(SourceError):
    """Releasing backend resources failed."""
