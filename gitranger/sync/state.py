# GitRanger Workspace Scanner
# Classify what currently occupies each desired repository path

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from gitranger.git.operations import GitClient, GitError
from gitranger.sync.item import DesiredRepo
from gitranger.utils.paths import is_empty_dir
from gitranger.utils.urls import redact, same_remote

logger = logging.getLogger(__name__)


class LocalState(str, Enum):
    """What occupies a desired path on disk."""

    ABSENT = "absent"
    EMPTY_DIR = "empty_dir"
    GIT_REPO = "git_repo"
    GIT_REPO_MISMATCH = "git_repo_mismatch"
    NON_EMPTY_NON_GIT = "non_empty_non_git"


@dataclass(frozen=True)
class LocalRepoState:
    """
    Observed state of one desired path.

    remote_url is the origin URL for the two git states (None when a
    repository has no origin). error carries the reason a path could not be
    inspected.
    """

    state: LocalState
    path: Path
    remote_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_git(self) -> bool:
        return self.state in (LocalState.GIT_REPO, LocalState.GIT_REPO_MISMATCH)


def inspect_path(repo: DesiredRepo, git: Optional[GitClient] = None) -> LocalRepoState:
    """
    Classify the local path of a desired repository.

    Read-only: only the directory listing and the repository's git config
    are consulted.

    Args:
        repo: Desired repository.
        git: Git client used to read the origin URL.

    Returns:
        LocalRepoState for repo.local_path.
    """
    git = git or GitClient()
    path = repo.local_path

    try:
        if not path.exists() and not path.is_symlink():
            return LocalRepoState(LocalState.ABSENT, path)

        if not path.is_dir():
            return LocalRepoState(LocalState.NON_EMPTY_NON_GIT, path, error="path is not a directory")

        if is_empty_dir(path):
            return LocalRepoState(LocalState.EMPTY_DIR, path)

        if not git.is_git_dir(path):
            return LocalRepoState(LocalState.NON_EMPTY_NON_GIT, path)

        remote_url = git.get_remote_url(path)
    except OSError as e:
        logger.warning("Cannot inspect %s: %s", path, e)
        return LocalRepoState(LocalState.NON_EMPTY_NON_GIT, path, error=str(e))
    except GitError as e:
        logger.warning("Cannot read git metadata in %s: %s", path, e)
        return LocalRepoState(LocalState.GIT_REPO_MISMATCH, path, error=str(e))

    if same_remote(remote_url, repo.canonical_url):
        return LocalRepoState(LocalState.GIT_REPO, path, remote_url=remote_url)

    logger.debug("%s has origin %s, expected %s", path, redact(remote_url or "-"), redact(repo.canonical_url))
    return LocalRepoState(LocalState.GIT_REPO_MISMATCH, path, remote_url=remote_url)


def scan_workspace(
    repos: list[DesiredRepo],
    max_workers: int = 8,
    git: Optional[GitClient] = None,
) -> dict[Path, LocalRepoState]:
    """
    Inspect every desired path concurrently.

    Args:
        repos: Desired repositories (unique local paths).
        max_workers: Concurrent inspections.
        git: Git client used for all inspections.

    Returns:
        Mapping of local path to observed state.
    """
    git = git or GitClient()
    if not repos:
        return {}

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        states = list(pool.map(lambda repo: inspect_path(repo, git), repos))
    return {state.path: state for state in states}
