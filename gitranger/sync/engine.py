# GitRanger Sync Engine
# Orchestrates scope, discovery, scanning, planning and execution

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from gitranger.config.schema import GroupSpec, RangerConfig, RepoSpec
from gitranger.git.operations import GitClient
from gitranger.providers.base import ProviderClient
from gitranger.sync.actions import ActionType, SyncAction, build_plan
from gitranger.sync.discovery import DiscoveryResult, discover
from gitranger.sync.executor import Executor
from gitranger.sync.item import DesiredRepo
from gitranger.sync.report import Diagnostic, DiagnosticKind, SyncReport
from gitranger.sync.state import LocalRepoState, scan_workspace
from gitranger.utils.urls import normalize_remote_url, redact, url_host

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncScope:
    """
    Which part of the configuration a run covers.

    groups/repos of None mean "all configured". url_filter restricts the
    discovered set to one normalized repository URL.
    """

    target: Optional[str] = None
    groups: Optional[list[tuple[str, GroupSpec]]] = None
    repos: Optional[list[RepoSpec]] = None
    url_filter: Optional[str] = None

    @classmethod
    def from_target(cls, config: RangerConfig, target: Optional[str]) -> "SyncScope":
        """
        Resolve a CLI target.

        A target is tried as a group name ("name" or "provider:name") first,
        then as a repository URL. A URL that is not a standalone entry is
        searched for in the groups of the provider serving its host. A target
        that is neither matches nothing.
        """
        if target is None or not target.strip():
            return cls()

        target = target.strip()
        wanted = target.strip("/")
        groups = [
            (provider, group)
            for provider, group in config.iter_groups()
            if wanted in (group.name, f"{provider}:{group.name}")
        ]
        if groups:
            return cls(target=target, groups=groups, repos=[])

        provider_prefix = target.split(":", 1)[0]
        if not url_host(target) or provider_prefix in config.providers:
            return cls(target=target, groups=[], repos=[])

        key = normalize_remote_url(target)
        standalone = [spec for spec in config.repos if normalize_remote_url(spec.url) == key]
        if standalone:
            return cls(target=target, groups=[], repos=standalone, url_filter=key)

        host = url_host(target)
        groups = [
            (provider, group)
            for provider, group in config.iter_groups()
            if config.providers[provider].web_host == host
        ]
        return cls(target=target, groups=groups, repos=[], url_filter=key)

    @property
    def is_empty(self) -> bool:
        """True when the scope cannot match any repository."""
        return self.groups == [] and self.repos == []


@dataclass
class SyncPlan:
    """Everything a run would do, without doing it."""

    repos: list[DesiredRepo] = field(default_factory=list)
    states: dict[Path, LocalRepoState] = field(default_factory=dict)
    actions: list[SyncAction] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def count(self, action_type: ActionType) -> int:
        return sum(1 for a in self.actions if a.action_type == action_type)

    @property
    def has_conflicts(self) -> bool:
        return self.count(ActionType.CONFLICT) > 0


class SyncEngine:
    """
    Main synchronization engine.

    Converges the workspace to the configuration in one pass: discover the
    desired repositories, scan their paths, plan one action each and
    execute the plan. The engine reports; it never decides exit codes.
    """

    def __init__(
        self,
        config: RangerConfig,
        *,
        git: Optional[GitClient] = None,
        clients: Optional[Mapping[str, ProviderClient]] = None,
    ):
        """
        Initialize sync engine.

        Args:
            config: Parsed configuration.
            git: Git client (real git by default).
            clients: Provider clients by provider name (created per run if omitted).
        """
        self.config = config
        self.git = git or GitClient()
        self.clients = dict(clients) if clients else None

    def list_repos(self, target: Optional[str] = None) -> DiscoveryResult:
        """
        Discover the desired repositories within a target's scope.

        Args:
            target: Group name, provider:group or repository URL (None for all).

        Returns:
            DiscoveryResult; a target matching nothing yields a SCOPE diagnostic.
        """
        scope = SyncScope.from_target(self.config, target)
        if scope.is_empty:
            return DiscoveryResult(diagnostics=[self._scope_diagnostic(scope)])

        result = discover(self.config, clients=self.clients, groups=scope.groups, repos=scope.repos)

        if scope.url_filter is not None:
            result.repos = [r for r in result.repos if normalize_remote_url(r.canonical_url) == scope.url_filter]
            if result.repos:
                # problems elsewhere in the searched groups are out of scope
                result.diagnostics = []
            else:
                result.diagnostics.append(self._scope_diagnostic(scope))

        return result

    def plan(self, target: Optional[str] = None) -> SyncPlan:
        """
        Discover, scan and plan without executing.

        Args:
            target: Optional scope, as for list_repos().

        Returns:
            SyncPlan with one action per desired repository.
        """
        discovery = self.list_repos(target)
        states = scan_workspace(discovery.repos, self.config.workspace.scan_workers, git=self.git)
        actions = build_plan(discovery.repos, states, fetch_existing=self.config.workspace.fetch_existing)
        return SyncPlan(
            repos=discovery.repos,
            states=states,
            actions=actions,
            diagnostics=discovery.diagnostics,
        )

    def sync(
        self,
        target: Optional[str] = None,
        *,
        dry_run: bool = False,
        max_workers: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SyncReport:
        """
        Run a full synchronization.

        Args:
            target: Optional scope (group name, provider:group or repo URL).
            dry_run: Plan and report without changing anything.
            max_workers: Override workspace.max_workers.
            cancel_event: Set to stop starting new operations.

        Returns:
            Frozen SyncReport including discovery diagnostics.

        Raises:
            KeyboardInterrupt: After the report is complete, if interrupted.
        """
        plan = self.plan(target)

        report = SyncReport(dry_run=dry_run)
        for diagnostic in plan.diagnostics:
            report.add_diagnostic(diagnostic)

        logger.info(
            "Executing %d action(s)%s",
            sum(1 for a in plan.actions if a.is_mutating),
            " (dry run)" if dry_run else "",
        )
        executor = Executor(
            max_workers=max_workers or self.config.workspace.max_workers,
            dry_run=dry_run,
            git=self.git,
            cancel_event=cancel_event,
        )
        return executor.run(plan.actions, report)

    @staticmethod
    def _scope_diagnostic(scope: SyncScope) -> Diagnostic:
        target = redact(scope.target or "")
        return Diagnostic(
            DiagnosticKind.SCOPE,
            target,
            f"'{target}' does not match any configured group or repository",
        )
