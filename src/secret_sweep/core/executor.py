"""Scan executor that walks a source branch by branch.

For every branch to visit, a dedicated walker thread enumerates and reads
files and feeds them through a payload queue, while the calling thread
drains that queue into a shared thread pool where each file is reported
as processed and handed to the detection engine.

Branches run strictly one after another: a branch's pool work is fully
drained before the next checkout touches the working tree.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from secret_sweep.core.inspector import PatternInspector
from secret_sweep.core.models import BytesProcessed
from secret_sweep.errors import ConfigurationError, SecretSweepError, SourceError
from secret_sweep.source import Source

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from secret_sweep.core.inspector import Inspector, InspectorFactory
    from secret_sweep.core.models import ReportInput

logger = logging.getLogger(__name__)

# Pseudo-branch meaning "scan the working tree as it is, no checkout"
HEAD_BRANCH = "------ FILE SYSTEM ------"


class BranchLevel(str, Enum):
    """Which branches of a repository are scanned."""

    HEAD = "head"
    LOCAL = "local"
    REMOTE = "remote"
    ALL = "all"


class DataSource(str, Enum):
    """Kind of data source to scan."""

    FILE_SYSTEM = "filesystem"
    GIT = "git"


class ReadFailurePolicy(str, Enum):
    """What the walker does when a file cannot be read as text.

    ABORT stops the walk of the current branch; SKIP drops the file and
    carries on.
    """

    ABORT = "abort"
    SKIP = "skip"


@dataclass
class FilePayload:
    """One file's content in flight between the walker and the pool."""

    content: str
    file_name: str


@dataclass
class ExecutorConfig:
    """Configuration for a single scan.

    Attributes:
        data_source: Filesystem or Git.
        report_queue: Reporting channel shared with the detection engine.
        path: Root directory, or a path inside a local repository.
        url: Remote repository URL; takes precedence over ``path`` for Git.
        config: Path to the detection engine's configuration file.
        omit: Space-separated substrings; matching paths are skipped.
        nodeps: Space-separated substrings merged into ``omit``.
        branch_level: Which branches to visit.
        branches: Optional allow-list of branch names.
        read_failure_policy: Behaviour on unreadable files.
        max_pending_payloads: Bound on files read but not yet inspected
            (0 means unbounded).
        max_workers: Pool size; defaults to the number of CPUs.
        temp_root: Parent directory for remote clones.
        inspector_factory: Builds the detection engine from ``config``.
    """

    data_source: DataSource
    report_queue: queue.Queue[ReportInput | None]
    path: Path | None = None
    url: str | None = None
    config: Path | None = None
    omit: str | None = None
    nodeps: str | None = None
    branch_level: BranchLevel = BranchLevel.HEAD
    branches: list[str] | None = None
    read_failure_policy: ReadFailurePolicy = ReadFailurePolicy.ABORT
    max_pending_payloads: int = 0
    max_workers: int | None = None
    temp_root: Path | None = None
    inspector_factory: InspectorFactory = PatternInspector.from_config


def build_source(
    data_source: DataSource,
    path: Path | None,
    url: str | None,
    temp_root: Path | None = None,
) -> Source:
    """Resolve configuration into a concrete source.

    Raises:
        ConfigurationError: If neither a path nor a URL is usable.
        SourceError: If cloning or repository discovery fails.
    """
    if data_source is DataSource.GIT:
        if url:
            return Source.remote(url, temp_root)
        if path is not None:
            return Source.local(path)
        raise ConfigurationError("Path to a root directory should be specified.")

    if path is None:
        raise ConfigurationError("Path to a root directory should be specified.")
    return Source.filesystem(path)


def merge_omit_patterns(*pattern_strings: str | None) -> list[str]:
    """Split space-separated pattern strings into one ordered list.

    Empty tokens are dropped; an empty substring would match every path.
    """
    patterns: list[str] = []
    for value in pattern_strings:
        if value:
            patterns.extend(value.split())
    return patterns


class Executor:
    """Runs a scan over every requested branch of a source.

    Example:
        >>> reports = new_report_queue()
        >>> executor = Executor(ExecutorConfig(
        ...     data_source=DataSource.FILE_SYSTEM,
        ...     report_queue=reports,
        ...     path=Path("."),
        ...     config=Path("rules.toml"),
        ... ))
        >>> executor.execute()
    """

    def __init__(self, config: ExecutorConfig) -> None:
        """Build the source and detection engine.

        Raises:
            ConfigurationError: If no root/URL or no detector config is given.
            SourceError: If the source cannot be opened.
        """
        source = build_source(config.data_source, config.path, config.url, config.temp_root)

        try:
            if config.config is None:
                raise ConfigurationError("Config path is not specified.")
            inspector = config.inspector_factory(config.config, config.report_queue)
        except SecretSweepError:
            _flush_quietly(source)
            raise

        self._source = source
        self._inspector: Inspector = inspector
        self._report_queue = config.report_queue
        self.omit = merge_omit_patterns(config.omit, config.nodeps)
        self.branch_level = config.branch_level
        self.allowed_branches = set(config.branches) if config.branches is not None else None
        self.read_failure_policy = config.read_failure_policy
        self.max_pending_payloads = max(0, config.max_pending_payloads)
        self.max_workers = config.max_workers or os.cpu_count() or 1
        self.scanned_branches: list[str] = []

    @property
    def source(self) -> Source:
        return self._source

    def branches_to_scan(self) -> list[str]:
        """Ordered branch names for the configured level.

        ALL is local followed by remote, duplicates kept: a local branch
        and its remote counterpart may point at different commits.
        """
        if self.branch_level is BranchLevel.HEAD:
            return [HEAD_BRANCH]

        branches: list[str] = []
        if self.branch_level in (BranchLevel.LOCAL, BranchLevel.ALL):
            branches.extend(self._list_branches("local", self._source.list_local_branches))
        if self.branch_level in (BranchLevel.REMOTE, BranchLevel.ALL):
            branches.extend(self._list_branches("remote", self._source.list_remote_branches))
        return branches

    def _list_branches(self, kind: str, lister: Callable[[], list[str]]) -> list[str]:
        try:
            return lister()
        except SourceError as e:
            print(e)
            logger.warning("Cannot list %s branches: %s", kind, e)
            return []

    def execute(self) -> None:
        """Scan all branches, then end the report stream and flush the source.

        The end-of-stream marker is sent exactly once, after every branch
        has been drained, however many branches failed.
        """
        try:
            with ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="secret-sweep",
            ) as pool:
                for branch in self.branches_to_scan():
                    if branch == HEAD_BRANCH:
                        self._scan_branch(pool, branch)
                        break

                    if self.allowed_branches is not None and branch not in self.allowed_branches:
                        logger.debug("Skipping branch %s: not in allow-list", branch)
                        continue

                    try:
                        self._source.switch_branch(branch)
                    except SourceError as e:
                        print(e)
                        logger.warning("Skipping branch %s: %s", branch, e)
                        continue

                    self._scan_branch(pool, branch)
        finally:
            self._report_queue.put(None)
            _flush_quietly(self._source)

    def _scan_branch(self, pool: ThreadPoolExecutor, branch: str) -> None:
        """Walk the current working tree and inspect everything it yields."""
        logger.info("Scanning branch %s", branch)
        payloads: queue.Queue[FilePayload | None] = queue.Queue(
            maxsize=self.max_pending_payloads
        )
        walker = threading.Thread(
            target=self._walk,
            args=(payloads,),
            name=f"walker-{branch}",
            daemon=True,
        )
        walker.start()
        self._process(pool, payloads, branch)
        walker.join()
        self.scanned_branches.append(branch)

    def _walk(self, payloads: queue.Queue[FilePayload | None]) -> None:
        """Producer: read every non-omitted file and queue it.

        Always finishes by queueing ``None``.
        """
        try:
            for entry in self._iter_candidates(self._source.enumerate()):
                try:
                    content = entry.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    if self.read_failure_policy is ReadFailurePolicy.SKIP:
                        logger.warning("Skipping unreadable file %s: %s", entry, e)
                        continue
                    logger.warning("Stopping walk at unreadable file %s: %s", entry, e)
                    break

                payloads.put(FilePayload(content=content, file_name=str(entry.absolute())))
        except OSError as e:
            logger.warning("Walk of %s failed: %s", self._source.root_path(), e)
        finally:
            payloads.put(None)

    def _iter_candidates(self, entries: Iterable[Path]) -> Iterable[Path]:
        for entry in entries:
            path_str = str(entry)
            if any(pattern in path_str for pattern in self.omit):
                continue
            if entry.is_dir():
                continue
            yield entry

    def _process(
        self,
        pool: ThreadPoolExecutor,
        payloads: queue.Queue[FilePayload | None],
        branch: str,
    ) -> None:
        """Consumer: hand queued payloads to the pool and wait for them."""
        in_flight = (
            threading.BoundedSemaphore(self.max_pending_payloads)
            if self.max_pending_payloads
            else None
        )
        futures: list[Future[None]] = []

        while True:
            payload = payloads.get()
            if payload is None:
                break
            if in_flight is not None:
                in_flight.acquire()
            future = pool.submit(self._inspect_payload, payload, branch)
            if in_flight is not None:
                future.add_done_callback(lambda _f: in_flight.release())
            futures.append(future)

        wait(futures)
        for future in futures:
            exc = future.exception()
            if exc is not None:
                logger.error("Detection engine failed on branch %s: %s", branch, exc)

    def _inspect_payload(self, payload: FilePayload, branch: str) -> None:
        # Progress for a file is always reported before its inspection
        self._report_queue.put(BytesProcessed(len(payload.content.encode("utf-8"))))
        self._inspector.inspect(payload.content, payload.file_name, branch)


def _flush_quietly(source: Source) -> None:
    try:
        source.flush()
    except SourceError as e:
        logger.error("Failed to flush source: %s", e)
