"""Data source abstraction.

A :class:`Source` is exactly one of three backends: a plain filesystem
tree, a freshly cloned remote repository, or the caller's local
repository. The backend kind is fixed for the lifetime of a scan; only
the Git adapter's working tree changes as branches are checked out.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from secret_sweep.errors import UnsupportedOperationError
from secret_sweep.source.git import GitAdapter

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

_NO_BRANCHES = "No access to branches on filesystem"


class SourceKind(str, Enum):
    """Backend variant of a source."""

    FILE_SYSTEM = "filesystem"
    REMOTE_GIT = "remote_git"
    LOCAL_GIT = "local_git"


class Source:
    """Source provider over a single backend.

    Every operation dispatches on :attr:`kind`; callers never need to
    know which backend is active.
    """

    def __init__(
        self,
        kind: SourceKind,
        root: Path | None = None,
        adapter: GitAdapter | None = None,
    ) -> None:
        if kind is SourceKind.FILE_SYSTEM and root is None:
            raise ValueError("Filesystem source requires a root path")
        if kind is not SourceKind.FILE_SYSTEM and adapter is None:
            raise ValueError("Git source requires an adapter")
        self.kind = kind
        self._root = root
        self._adapter = adapter

    @classmethod
    def filesystem(cls, root: Path) -> Source:
        return cls(SourceKind.FILE_SYSTEM, root=root)

    @classmethod
    def remote(cls, url: str, temp_root: Path | None = None) -> Source:
        """Clone ``url`` and wrap the clone. Raises ``CloneError``."""
        return cls(SourceKind.REMOTE_GIT, adapter=GitAdapter.from_remote(url, temp_root))

    @classmethod
    def local(cls, path: Path) -> Source:
        """Discover the repository containing ``path``."""
        return cls(SourceKind.LOCAL_GIT, adapter=GitAdapter.from_local(path))

    @property
    def is_git(self) -> bool:
        return self.kind is not SourceKind.FILE_SYSTEM

    def _git(self) -> GitAdapter:
        if self._adapter is None:
            raise UnsupportedOperationError(_NO_BRANCHES)
        return self._adapter

    def root_path(self) -> Path | None:
        """Directory to recurse from, or None if there is no working tree."""
        if self.kind is SourceKind.FILE_SYSTEM:
            return self._root
        return self._git().path()

    def enumerate(self) -> Iterator[Path]:
        """Walk every directory and file below the root.

        Each call starts a fresh walk. Yields nothing when there is no
        usable working tree.
        """
        root = self.root_path()
        if root is None:
            return
        yield from root.rglob("*")

    def list_local_branches(self) -> list[str]:
        if self.kind is SourceKind.FILE_SYSTEM:
            raise UnsupportedOperationError(_NO_BRANCHES)
        return self._git().local_branches()

    def list_remote_branches(self) -> list[str]:
        if self.kind is SourceKind.FILE_SYSTEM:
            raise UnsupportedOperationError(_NO_BRANCHES)
        return self._git().remote_branches()

    def switch_branch(self, name: str) -> None:
        """Force-checkout ``name``, discarding local modifications."""
        if self.kind is SourceKind.FILE_SYSTEM:
            raise UnsupportedOperationError(_NO_BRANCHES)
        self._git().switch_branch(name)

    def flush(self) -> None:
        """Release backend-owned resources.

        Only a remote clone owns anything; for the other backends this
        is a no-op and may be called any number of times.
        """
        if self.kind is SourceKind.REMOTE_GIT:
            self._git().flush()
