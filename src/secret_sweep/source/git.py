"""Git repository access for scanning.

This module wraps a GitPython repository handle and manages the lifecycle
of its working tree: either the caller's own repository, discovered from a
path, or an ephemeral clone of a remote URL that is deleted on flush.
"""

from __future__ import annotations

import logging
import random
import shutil
import string
import tempfile
from pathlib import Path

from git import RemoteReference, Repo
from git.exc import (
    BadName,
    GitCommandError,
    InvalidGitRepositoryError,
    NoSuchPathError,
)

from secret_sweep.errors import (
    BranchNotAccessibleError,
    BranchSwitchError,
    CloneError,
    FlushError,
    RepositoryNotFoundError,
    SourceNotReadyError,
)

logger = logging.getLogger(__name__)

# Subdirectory of the system temp root holding ephemeral clones
TEMP_DIR_REPO = "secret_sweep_repos"
CHARSET = string.ascii_lowercase + string.digits
CLONE_NAME_LENGTH = 12

_NOT_READY = "Repository is flushed or doesn't exist."


def random_clone_name(length: int = CLONE_NAME_LENGTH) -> str:
    """Generate a random directory name for a clone."""
    return "".join(random.choices(CHARSET, k=length))


def default_temp_root() -> Path:
    """Directory under which remote repositories are cloned."""
    return Path(tempfile.gettempdir()) / TEMP_DIR_REPO


class GitAdapter:
    """Git backend owning an on-disk working tree.

    Local repositories belong to the caller and are never deleted. Remote
    repositories are cloned into their own randomly named directory and
    that directory, and only that directory, is deleted on :meth:`flush`.

    Example:
        >>> adapter = GitAdapter.from_remote("https://github.com/user/repo")
        >>> for branch in adapter.local_branches():
        ...     adapter.switch_branch(branch)
        >>> adapter.flush()
    """

    def __init__(
        self,
        repo: Repo,
        is_local: bool,
        clone_dir: Path | None = None,
    ) -> None:
        """Wrap an open repository.

        Args:
            repo: Open GitPython repository.
            is_local: True if the repository belongs to the caller.
            clone_dir: Directory owned by this adapter (remote clones only).
        """
        self.is_local = is_local
        self._repo: Repo | None = repo
        self._clone_dir = clone_dir

    @classmethod
    def from_remote(cls, url: str, temp_root: Path | None = None) -> GitAdapter:
        """Clone a remote repository into a fresh temporary directory.

        Args:
            url: Repository URL (HTTPS, SSH or anything git accepts).
            temp_root: Parent directory for clones. Defaults to
                ``<tempdir>/secret_sweep_repos``.

        Returns:
            Adapter owning the clone.

        Raises:
            CloneError: If cloning fails for any reason.
        """
        root = temp_root or default_temp_root()
        clone_dir = root / random_clone_name()
        logger.info("Cloning %s into %s", url, clone_dir)

        try:
            root.mkdir(parents=True, exist_ok=True)
            repo = Repo.clone_from(url, str(clone_dir))
        except (GitCommandError, OSError, ValueError) as e:
            shutil.rmtree(clone_dir, ignore_errors=True)
            raise CloneError(f"Failed to clone repository {url}: {e}") from e

        return cls(repo, is_local=False, clone_dir=clone_dir)

    @classmethod
    def from_local(cls, path: Path) -> GitAdapter:
        """Open the repository containing ``path``.

        Parent directories are searched the same way ``git`` itself
        discovers a repository.

        Raises:
            RepositoryNotFoundError: If no repository contains the path.
        """
        try:
            repo = Repo(path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryNotFoundError(
                f"Not a git repository (or any parent): {path}"
            ) from e

        return cls(repo, is_local=True)

    @property
    def is_flushed(self) -> bool:
        """Whether the handle has been released."""
        return self._repo is None

    def path(self) -> Path | None:
        """Working tree directory, or None if flushed or bare."""
        if self._repo is None or self._repo.working_tree_dir is None:
            return None
        return Path(self._repo.working_tree_dir)

    def _require_repo(self) -> Repo:
        if self._repo is None:
            raise SourceNotReadyError(_NOT_READY)
        return self._repo

    def local_branches(self) -> list[str]:
        """Names of all local branches.

        Raises:
            SourceNotReadyError: If the adapter is flushed.
            BranchNotAccessibleError: If any branch name is not valid text.
        """
        repo = self._require_repo()
        try:
            return [head.name for head in repo.heads]
        except (UnicodeDecodeError, ValueError) as e:
            raise BranchNotAccessibleError(f"Local branch name unreadable: {e}") from e

    def remote_branches(self) -> list[str]:
        """Names of all remote-tracking branches (e.g. ``origin/main``).

        Raises:
            SourceNotReadyError: If the adapter is flushed.
            BranchNotAccessibleError: If any branch name is not valid text.
        """
        repo = self._require_repo()
        try:
            return [ref.name for ref in repo.refs if isinstance(ref, RemoteReference)]
        except (UnicodeDecodeError, ValueError) as e:
            raise BranchNotAccessibleError(f"Remote branch name unreadable: {e}") from e

    def switch_branch(self, branch: str) -> None:
        """Force the index and working tree to the tree of ``branch``.

        This is destructive: uncommitted changes to tracked files are
        discarded without any way to recover them. HEAD is left untouched.

        Raises:
            SourceNotReadyError: If the adapter is flushed.
            BranchSwitchError: If the name does not resolve or checkout fails.
        """
        repo = self._require_repo()
        try:
            commit = repo.commit(branch)
        except (BadName, ValueError) as e:
            raise BranchSwitchError(f"Cannot resolve branch '{branch}': {e}") from e

        try:
            repo.git.read_tree("--reset", "-u", commit.tree.hexsha)
        except GitCommandError as e:
            raise BranchSwitchError(f"Failed to check out '{branch}': {e}") from e

        logger.debug("Checked out %s at %s", branch, commit.hexsha[:8])

    def flush(self) -> None:
        """Release the repository.

        No-op for local repositories. For remote clones, deletes the clone
        directory and invalidates the handle; flushing twice raises.

        Raises:
            SourceNotReadyError: If a remote clone was already flushed.
            FlushError: If the clone directory cannot be deleted.
        """
        if self.is_local:
            return
        repo = self._require_repo()
        repo.close()
        self._repo = None

        if self._clone_dir is None:
            return
        try:
            shutil.rmtree(self._clone_dir)
        except OSError as e:
            raise FlushError(f"Failed to remove {self._clone_dir}: {e}") from e
        logger.info("Removed clone %s", self._clone_dir)
