"""Data sources: filesystem trees and Git repositories."""

from secret_sweep.source.base import Source, SourceKind
from secret_sweep.source.git import (
    CHARSET,
    TEMP_DIR_REPO,
    GitAdapter,
    default_temp_root,
    random_clone_name,
)

__all__ = [
    "CHARSET",
    "TEMP_DIR_REPO",
    "GitAdapter",
    "Source",
    "SourceKind",
    "default_temp_root",
    "random_clone_name",
]
