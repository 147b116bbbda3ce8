"""Unit tests for the Git adapter."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003
from unittest.mock import patch

import pytest
from git.exc import GitCommandError

from secret_sweep.errors import (
    BranchSwitchError,
    CloneError,
    RepositoryNotFoundError,
    SourceNotReadyError,
)
from secret_sweep.source.git import (
    CHARSET,
    CLONE_NAME_LENGTH,
    TEMP_DIR_REPO,
    GitAdapter,
    default_temp_root,
    random_clone_name,
)


class TestCloneNames:
    """Tests for temp directory naming."""

    def test_random_clone_name_length(self) -> None:
        assert len(random_clone_name()) == CLONE_NAME_LENGTH == 12

    def test_random_clone_name_charset(self) -> None:
        assert set(random_clone_name()) <= set(CHARSET)

    def test_names_differ(self) -> None:
        names = {random_clone_name() for _ in range(20)}
        assert len(names) > 1

    def test_default_temp_root(self) -> None:
        assert default_temp_root().name == TEMP_DIR_REPO


class TestLocalAdapter:
    """Tests for adapters over a caller-owned repository."""

    def test_from_local(self, local_git_repo: Path) -> None:
        adapter = GitAdapter.from_local(local_git_repo)

        assert adapter.is_local is True
        assert adapter.path() == local_git_repo

    def test_discovers_from_subdirectory(self, local_git_repo: Path) -> None:
        """Parent directories are searched for the repository."""
        subdir = local_git_repo / "nested" / "deeper"
        subdir.mkdir(parents=True)

        adapter = GitAdapter.from_local(subdir)

        assert adapter.path() == local_git_repo

    def test_not_a_repository(self, tmp_path: Path) -> None:
        with pytest.raises(RepositoryNotFoundError):
            GitAdapter.from_local(tmp_path / "missing")

    def test_local_branches(self, local_git_repo: Path) -> None:
        adapter = GitAdapter.from_local(local_git_repo)
        assert sorted(adapter.local_branches()) == ["dev", "main"]

    def test_no_remote_branches(self, local_git_repo: Path) -> None:
        adapter = GitAdapter.from_local(local_git_repo)
        assert adapter.remote_branches() == []

    def test_remote_branches(self, cloned_git_repo: Path) -> None:
        adapter = GitAdapter.from_local(cloned_git_repo)
        branches = adapter.remote_branches()

        assert "origin/main" in branches
        assert "origin/dev" in branches
        assert adapter.local_branches() == ["main"]

    def test_switch_branch(self, local_git_repo: Path) -> None:
        """Switching brings the working tree to the branch's files."""
        adapter = GitAdapter.from_local(local_git_repo)

        adapter.switch_branch("dev")
        assert (local_git_repo / "secrets.env").exists()

        adapter.switch_branch("main")
        assert not (local_git_repo / "secrets.env").exists()

    def test_switch_branch_discards_local_changes(self, local_git_repo: Path) -> None:
        """Checkout is forced: modified tracked files are overwritten."""
        (local_git_repo / "app.py").write_text("print('modified')\n")
        adapter = GitAdapter.from_local(local_git_repo)

        adapter.switch_branch("main")

        assert (local_git_repo / "app.py").read_text() == "print('hello')\n"

    def test_switch_remote_branch(self, cloned_git_repo: Path) -> None:
        adapter = GitAdapter.from_local(cloned_git_repo)
        adapter.switch_branch("origin/dev")
        assert (cloned_git_repo / "secrets.env").exists()

    def test_switch_unknown_branch(self, local_git_repo: Path) -> None:
        adapter = GitAdapter.from_local(local_git_repo)
        with pytest.raises(BranchSwitchError, match="no-such-branch"):
            adapter.switch_branch("no-such-branch")

    def test_flush_is_noop(self, local_git_repo: Path) -> None:
        """Local repositories are never deleted; flushing twice is fine."""
        adapter = GitAdapter.from_local(local_git_repo)

        adapter.flush()
        adapter.flush()

        assert local_git_repo.exists()
        assert adapter.path() == local_git_repo
        assert adapter.local_branches()


class TestRemoteAdapter:
    """Tests for adapters over an ephemeral clone."""

    def test_from_remote_clones_under_temp_root(
        self, local_git_repo: Path, tmp_path: Path
    ) -> None:
        temp_root = tmp_path / "clones"
        adapter = GitAdapter.from_remote(str(local_git_repo), temp_root=temp_root)

        path = adapter.path()
        assert adapter.is_local is False
        assert path is not None
        assert path.parent == temp_root
        assert len(path.name) == 12
        assert (path / "README.md").exists()

        adapter.flush()

    def test_flush_removes_only_own_clone(
        self, local_git_repo: Path, tmp_path: Path
    ) -> None:
        """Concurrent scans sharing a temp root do not delete each other."""
        temp_root = tmp_path / "clones"
        first = GitAdapter.from_remote(str(local_git_repo), temp_root=temp_root)
        second = GitAdapter.from_remote(str(local_git_repo), temp_root=temp_root)
        first_path = first.path()
        second_path = second.path()

        first.flush()

        assert first_path is not None and not first_path.exists()
        assert second_path is not None and second_path.exists()
        assert first.path() is None
        assert first.is_flushed

        second.flush()

    def test_operations_after_flush_fail(
        self, local_git_repo: Path, tmp_path: Path
    ) -> None:
        adapter = GitAdapter.from_remote(str(local_git_repo), temp_root=tmp_path / "c")
        adapter.flush()

        with pytest.raises(SourceNotReadyError):
            adapter.local_branches()
        with pytest.raises(SourceNotReadyError):
            adapter.remote_branches()
        with pytest.raises(SourceNotReadyError):
            adapter.switch_branch("main")
        with pytest.raises(SourceNotReadyError):
            adapter.flush()

    def test_clone_failure(self, tmp_path: Path) -> None:
        """Clone errors become CloneError and leave no directory behind."""
        temp_root = tmp_path / "clones"

        with pytest.raises(CloneError, match="Failed to clone"):
            GitAdapter.from_remote(str(tmp_path / "does-not-exist"), temp_root=temp_root)

        assert list(temp_root.iterdir()) == []

    def test_clone_failure_cleans_partial_directory(self, tmp_path: Path) -> None:
        temp_root = tmp_path / "clones"

        def fake_clone(url: str, to_path: str, **_kwargs: object) -> None:
            Path(to_path).mkdir(parents=True)
            (Path(to_path) / "partial").write_text("x")
            raise GitCommandError(["git", "clone", url], 128)

        with patch("secret_sweep.source.git.Repo.clone_from", side_effect=fake_clone):
            with pytest.raises(CloneError):
                GitAdapter.from_remote("https://example.com/repo.git", temp_root=temp_root)

        assert list(temp_root.iterdir()) == []
