# GitRanger Discovery
# Expand the configuration into the concrete set of desired repositories

import logging
import os
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from gitranger.config.schema import GroupSpec, RangerConfig, RepoSpec
from gitranger.errors import ConfigConflict, MissingEnvironmentVariable, ProviderError
from gitranger.providers.base import ProviderClient
from gitranger.providers.factory import client_class_for, create_client
from gitranger.sync.item import STANDALONE_SOURCE, DesiredRepo
from gitranger.sync.report import Diagnostic, DiagnosticKind
from gitranger.utils.paths import expand_path
from gitranger.utils.urls import normalize_remote_url, redact, repo_name_from_url

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    """Desired repositories plus the problems met while finding them."""

    repos: list[DesiredRepo] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def group_label(provider_name: str, group: GroupSpec) -> str:
    """Display label for a configured group."""
    return f"{provider_name}:{group.name}"


def _group_repos(
    client: ProviderClient,
    provider_name: str,
    group: GroupSpec,
    root: Path,
) -> list[DesiredRepo]:
    base = expand_path(group.local_dir, base=root) if group.local_dir else root
    remote_repos = client.list_group_repos(group.name, group.recursive)
    logger.info("%s: %d repositories", group_label(provider_name, group), len(remote_repos))

    return [
        DesiredRepo(
            canonical_url=remote.clone_url,
            local_path=Path(os.path.normpath(base / remote.path_within_group)),
            provider_kind=client.config.kind,
            token=client.config.token,
            source=provider_name,
            group=group.name,
            auth_username=client.auth_username,
            workspace_root=root,
        )
        for remote in remote_repos
    ]


def _standalone_repo(config: RangerConfig, spec: RepoSpec, root: Path) -> DesiredRepo:
    if spec.local_dir:
        local_path = expand_path(spec.local_dir, base=root)
    else:
        local_path = root / repo_name_from_url(spec.url)

    match = config.provider_for_url(spec.url)
    if match is None:
        return DesiredRepo(canonical_url=spec.url, local_path=local_path, workspace_root=root)

    _name, provider = match
    return DesiredRepo(
        canonical_url=spec.url,
        local_path=local_path,
        provider_kind=provider.kind,
        token=provider.token,
        source=STANDALONE_SOURCE,
        auth_username=client_class_for(provider.kind).auth_username,
        workspace_root=root,
    )


def _deduplicate(candidates: list[DesiredRepo]) -> tuple[list[DesiredRepo], list[Diagnostic]]:
    """
    Collapse entries that share a local path.

    Entries with the same normalized URL merge into one. Different URLs at
    the same path are a conflict: none of them is kept.
    """
    by_path: dict[Path, list[DesiredRepo]] = {}
    for repo in sorted(candidates, key=lambda r: (r.source, r.group or "", r.canonical_url)):
        by_path.setdefault(repo.local_path, []).append(repo)

    repos: list[DesiredRepo] = []
    diagnostics: list[Diagnostic] = []
    for path, entries in by_path.items():
        keys = {normalize_remote_url(e.canonical_url) for e in entries}
        if len(keys) > 1:
            conflict = ConfigConflict(str(path), sorted({redact(e.canonical_url) for e in entries}))
            logger.warning("%s", conflict)
            diagnostics.append(Diagnostic(DiagnosticKind.PATH_CONFLICT, str(path), str(conflict)))
            continue
        repos.append(next((e for e in entries if e.token is not None), entries[0]))

    repos.sort(key=lambda r: str(r.local_path))
    return repos, diagnostics


def discover(
    config: RangerConfig,
    *,
    clients: Optional[Mapping[str, ProviderClient]] = None,
    groups: Optional[Sequence[tuple[str, GroupSpec]]] = None,
    repos: Optional[Sequence[RepoSpec]] = None,
) -> DiscoveryResult:
    """
    Build the desired repository set.

    Groups are listed concurrently. A group that fails to list (API error or
    unset token variable) yields one diagnostic and contributes nothing;
    every other group and standalone repo is still returned.

    Args:
        config: Parsed configuration.
        clients: Provider clients by provider name. Missing ones are created
            for this call and closed afterwards.
        groups: (provider name, group) pairs to list. Defaults to all groups.
        repos: Standalone entries to include. Defaults to all of them.

    Returns:
        DiscoveryResult with repos sorted by local path.
    """
    root = config.root_path
    groups = config.iter_groups() if groups is None else list(groups)
    repos = config.repos if repos is None else list(repos)

    candidates: list[DesiredRepo] = []
    diagnostics: list[Diagnostic] = []

    available: dict[str, ProviderClient] = dict(clients or {})
    owned: list[ProviderClient] = []
    try:
        for provider_name in {name for name, _ in groups}:
            if provider_name not in available:
                client = create_client(
                    provider_name,
                    config.get_provider(provider_name),
                    config.workspace.clone_protocol,
                )
                available[provider_name] = client
                owned.append(client)

        if groups:
            with ThreadPoolExecutor(max_workers=config.workspace.discovery_workers) as pool:
                futures = {
                    pool.submit(_group_repos, available[name], name, group, root): (name, group)
                    for name, group in groups
                }
                for future in as_completed(futures):
                    name, group = futures[future]
                    label = group_label(name, group)
                    try:
                        candidates.extend(future.result())
                    except MissingEnvironmentVariable as e:
                        logger.warning("%s: %s", label, e)
                        diagnostics.append(Diagnostic(DiagnosticKind.MISSING_SECRET, label, str(e)))
                    except ProviderError as e:
                        logger.warning("%s: %s", label, e)
                        diagnostics.append(Diagnostic(DiagnosticKind.PROVIDER_ERROR, label, str(e)))
    finally:
        for client in owned:
            client.close()

    candidates.extend(_standalone_repo(config, spec, root) for spec in repos)

    unique, conflicts = _deduplicate(candidates)
    diagnostics.extend(conflicts)
    diagnostics.sort(key=lambda d: (d.kind.value, d.subject))
    return DiscoveryResult(repos=unique, diagnostics=diagnostics)
