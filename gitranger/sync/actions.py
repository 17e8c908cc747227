# GitRanger Sync Actions
# Reconciliation planning: one action per desired repository

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from gitranger.sync.item import DesiredRepo
from gitranger.sync.state import LocalRepoState, LocalState
from gitranger.utils.urls import redact


class ActionType(str, Enum):
    """Types of sync actions."""

    CLONE = "clone"
    FETCH = "fetch"
    SKIP = "skip"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class SyncAction:
    """
    A synchronization action to perform.

    Pairs a desired repository with what the executor should do about it
    and a human-readable reason.
    """

    repo: DesiredRepo
    action_type: ActionType
    reason: str = ""

    @property
    def is_mutating(self) -> bool:
        """Check if executing this action changes the workspace."""
        return self.action_type in (ActionType.CLONE, ActionType.FETCH)

    @property
    def is_conflict(self) -> bool:
        """Check if this is a conflict."""
        return self.action_type == ActionType.CONFLICT


def determine_action(repo: DesiredRepo, state: LocalRepoState, *, fetch_existing: bool = True) -> SyncAction:
    """
    Decide the action for one repository from its local state.

    Pure function: the same inputs always produce the same action.

    Args:
        repo: Desired repository.
        state: Observed state of repo.local_path.
        fetch_existing: Fetch matching clones (otherwise skip them).

    Returns:
        SyncAction for repo.
    """
    if state.state == LocalState.ABSENT:
        return SyncAction(repo, ActionType.CLONE, "not cloned yet")

    if state.state == LocalState.EMPTY_DIR:
        return SyncAction(repo, ActionType.CLONE, "empty directory")

    if state.state == LocalState.GIT_REPO:
        if not fetch_existing:
            return SyncAction(repo, ActionType.SKIP, "fetch disabled")
        return SyncAction(repo, ActionType.FETCH, "already cloned")

    if state.state == LocalState.GIT_REPO_MISMATCH:
        if state.error:
            reason = f"unreadable git repository: {state.error}"
        elif state.remote_url:
            reason = f"origin is {redact(state.remote_url)}, expected {redact(repo.canonical_url)}"
        else:
            reason = "git repository without an origin remote"
        return SyncAction(repo, ActionType.CONFLICT, reason)

    reason = "path exists and is not a git repository"
    if state.error:
        reason = f"{reason} ({state.error})"
    return SyncAction(repo, ActionType.CONFLICT, reason)


def build_plan(
    repos: list[DesiredRepo],
    states: dict[Path, LocalRepoState],
    *,
    fetch_existing: bool = True,
) -> list[SyncAction]:
    """
    Plan exactly one action per desired repository, in input order.

    Args:
        repos: Desired repositories.
        states: Scanner results keyed by local path.
        fetch_existing: Fetch matching clones (otherwise skip them).

    Returns:
        List of actions aligned with repos.

    Raises:
        KeyError: If a repository's path was not scanned.
    """
    return [determine_action(repo, states[repo.local_path], fetch_existing=fetch_existing) for repo in repos]
