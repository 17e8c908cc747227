# GitRanger Sync Executor
# Run planned actions concurrently and collect per-repository outcomes

import logging
import threading
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional

from gitranger.errors import FilesystemError, MissingEnvironmentVariable
from gitranger.git.operations import GitClient, GitError
from gitranger.sync.actions import ActionType, SyncAction
from gitranger.sync.report import Outcome, ReportEntry, SyncReport
from gitranger.utils.paths import ensure_dir, safe_delete
from gitranger.utils.urls import is_http_url, redact

logger = logging.getLogger(__name__)

CANCELLED_REASON = "cancelled"


def _entry(action: SyncAction, outcome: Outcome, reason: str = "") -> ReportEntry:
    repo = action.repo
    return ReportEntry(
        repo_identifier=repo.identifier,
        local_path=str(repo.local_path),
        url=redact(repo.canonical_url),
        action=action.action_type,
        outcome=outcome,
        reason=reason,
    )


def _snapshot(path: Path) -> Optional[set[str]]:
    """Names inside path, or None if path does not exist."""
    if not path.is_dir():
        return None
    return {child.name for child in path.iterdir()}


def _cleanup_failed_clone(path: Path, before: Optional[set[str]]) -> None:
    """Remove what a failed clone left behind, and nothing that was there before."""
    try:
        if before is None:
            safe_delete(path, missing_ok=True)
            return
        if not path.is_dir():
            return
        for child in path.iterdir():
            if child.name not in before:
                safe_delete(child, missing_ok=True)
    except OSError as e:
        logger.warning("Could not clean up %s after failed clone: %s", path, e)


def _prepare_clone(path: Path) -> Optional[set[str]]:
    """Create the parent directory and snapshot the destination."""
    try:
        ensure_dir(path.parent)
        return _snapshot(path)
    except OSError as e:
        raise FilesystemError(f"cannot prepare {path}: {e}", str(path)) from e


def _clone(action: SyncAction, git: GitClient, token: Optional[str]) -> ReportEntry:
    repo = action.repo
    path = repo.local_path
    secrets = [token] if token else []

    try:
        before = _prepare_clone(path)
    except FilesystemError as e:
        return _entry(action, Outcome.FAILED, str(e))

    try:
        git.clone(repo.canonical_url, path, token=token, username=repo.auth_username)
    except (GitError, OSError) as e:
        _cleanup_failed_clone(path, before)
        return _entry(action, Outcome.FAILED, redact(str(e), secrets))

    return _entry(action, Outcome.SUCCESS, "cloned")


def _fetch(action: SyncAction, git: GitClient, token: Optional[str]) -> ReportEntry:
    repo = action.repo
    secrets = [token] if token else []
    try:
        git.fetch(repo.local_path, token=token, username=repo.auth_username)
    except (GitError, OSError) as e:
        return _entry(action, Outcome.FAILED, redact(str(e), secrets))
    return _entry(action, Outcome.SUCCESS, "fetched")


def _auth_url(action: SyncAction, git: GitClient) -> str:
    """URL git will talk to: the desired URL for a clone, origin for a fetch."""
    repo = action.repo
    if action.action_type == ActionType.FETCH:
        try:
            origin = git.get_remote_url(repo.local_path)
        except GitError:
            origin = None
        if origin:
            return origin
    return repo.canonical_url


def execute_action(action: SyncAction, *, dry_run: bool = False, git: Optional[GitClient] = None) -> ReportEntry:
    """
    Execute one action and describe the outcome.

    Never raises for repository-level problems: git failures, I/O errors and
    unset token variables all become FAILED entries. The token is only
    resolved for HTTP(S) remotes; SSH remotes authenticate through the
    user's agent. A failed clone removes whatever it created, so the path
    is ready for the next run.

    Args:
        action: Planned action.
        dry_run: Report what would happen without touching disk or network.
        git: Git client.

    Returns:
        ReportEntry for the action's repository.
    """
    if action.action_type in (ActionType.SKIP, ActionType.CONFLICT):
        return _entry(action, Outcome.SKIPPED, action.reason)

    if dry_run:
        verb = "clone" if action.action_type == ActionType.CLONE else "fetch"
        return _entry(action, Outcome.DRY_RUN, f"would {verb}")

    git = git or GitClient()
    token: Optional[str] = None
    if is_http_url(_auth_url(action, git)):
        try:
            token = action.repo.resolved_token()
        except MissingEnvironmentVariable as e:
            return _entry(action, Outcome.FAILED, str(e))

    if action.action_type == ActionType.CLONE:
        return _clone(action, git, token)
    return _fetch(action, git, token)


class Executor:
    """
    Runs actions on a bounded thread pool.

    Each action is independent: one failing repository never stops the
    others. After cancel() no queued action starts; those are reported as
    skipped while in-flight actions run to completion.
    """

    def __init__(
        self,
        max_workers: int = 4,
        dry_run: bool = False,
        git: Optional[GitClient] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers
        self.dry_run = dry_run
        self.git = git or GitClient()
        self.cancel_event = cancel_event or threading.Event()

    def cancel(self) -> None:
        """Stop starting new actions."""
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def _run_one(self, action: SyncAction) -> ReportEntry:
        if self.cancelled:
            return _entry(action, Outcome.SKIPPED, CANCELLED_REASON)

        try:
            entry = execute_action(action, dry_run=self.dry_run, git=self.git)
        except Exception as e:
            logger.exception("Unexpected error for %s", action.repo.identifier)
            entry = _entry(action, Outcome.FAILED, redact(f"unexpected error: {e}"))

        if entry.outcome == Outcome.FAILED:
            logger.warning("%s %s failed: %s", entry.action.value, entry.repo_identifier, entry.reason)
        else:
            logger.debug("%s %s: %s", entry.action.value, entry.repo_identifier, entry.outcome.value)
        return entry

    def run(self, actions: Iterable[SyncAction], report: Optional[SyncReport] = None) -> SyncReport:
        """
        Execute all actions and record every outcome.

        Args:
            actions: Planned actions.
            report: Report to append to (a new one if omitted).

        Returns:
            The frozen report.

        Raises:
            KeyboardInterrupt: Re-raised after the report is complete.
        """
        if report is None:
            report = SyncReport(dry_run=self.dry_run)

        interrupted = False
        pool = ThreadPoolExecutor(max_workers=self.max_workers)
        futures: list[Future[ReportEntry]] = []
        recorded: set[Future[ReportEntry]] = set()
        try:
            futures = [pool.submit(self._run_one, action) for action in actions]
            for future in as_completed(futures):
                report.add(future.result())
                recorded.add(future)
        except KeyboardInterrupt:
            interrupted = True
            self.cancel()
            logger.warning("Interrupted, waiting for running operations to finish")
            for future in futures:
                if future not in recorded and future.exception() is None:
                    report.add(future.result())
                    recorded.add(future)
        finally:
            pool.shutdown(wait=True)

        report.freeze()
        if interrupted:
            raise KeyboardInterrupt
        return report
