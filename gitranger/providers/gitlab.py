# GitRanger GitLab Provider
# Group and subgroup discovery through the GitLab REST API v4

import logging
from collections import deque
from typing import Any, Optional
from urllib.parse import quote

import httpx

from gitranger.config.schema import ProviderKind
from gitranger.errors import NetworkError, ProviderError
from gitranger.providers.base import PER_PAGE, PageRequest, ProviderClient, RemoteRepo

logger = logging.getLogger(__name__)

MAX_GROUP_DEPTH = 20
MAX_GROUPS = 1000


class GitLabClient(ProviderClient):
    """GitLab groups, including nested subgroups when recursive."""

    kind = ProviderKind.GITLAB
    auth_username = "oauth2"

    @property
    def api_url(self) -> str:
        host = self.config.host
        return host if host.endswith("/api/v4") else f"{host}/api/v4"

    def _auth_headers(self, token: str) -> dict[str, str]:
        return {"PRIVATE-TOKEN": token}

    def _next_page(self, response: httpx.Response, current: PageRequest) -> Optional[PageRequest]:
        next_page = response.headers.get("X-Next-Page", "").strip()
        if not next_page:
            return None
        url, params = current
        return url, {**(params or {}), "page": next_page}

    def list_group_repos(self, group: str, recursive: bool = False) -> list[RemoteRepo]:
        """
        List the projects of a group.

        With recursive set, subgroups are walked breadth-first with an
        explicit worklist, bounded by MAX_GROUP_DEPTH and MAX_GROUPS.
        path_within_group keeps each project's namespace below the root group,
        so a project in my-org/team/sub/api gets "sub/api" for root "my-org/team".
        """
        root = self._request(f"{self.api_url}/groups/{quote(group, safe='')}", identifier=group)
        root_info = self._json(root)
        if not isinstance(root_info, dict) or "id" not in root_info:
            raise NetworkError(f"{self.name}: unexpected group response for {group}")
        root_path = root_info.get("full_path") or group

        repos: list[RemoteRepo] = []
        visited = {root_info["id"]}
        worklist: deque[tuple[Any, str, int]] = deque([(root_info["id"], root_path, 0)])

        while worklist:
            group_id, full_path, depth = worklist.popleft()

            for project in self._paginate(
                f"{self.api_url}/groups/{group_id}/projects",
                {"per_page": PER_PAGE, "page": 1, "with_shared": "false"},
                identifier=full_path,
            ):
                repos.append(self._to_remote(project, root_path))

            if not recursive:
                continue

            for subgroup in self._paginate(
                f"{self.api_url}/groups/{group_id}/subgroups",
                {"per_page": PER_PAGE, "page": 1},
                identifier=full_path,
            ):
                sub_id = subgroup.get("id")
                if sub_id is None or sub_id in visited:
                    continue
                if depth + 1 > MAX_GROUP_DEPTH:
                    raise ProviderError(f"{self.name}: subgroups of {group} nest deeper than {MAX_GROUP_DEPTH} levels")
                if len(visited) >= MAX_GROUPS:
                    raise ProviderError(f"{self.name}: {group} has more than {MAX_GROUPS} subgroups")
                visited.add(sub_id)
                worklist.append((sub_id, subgroup.get("full_path") or full_path, depth + 1))

        logger.debug("%s: %d project(s) in %s across %d group(s)", self.name, len(repos), group, len(visited))
        return repos

    def _to_remote(self, project: dict[str, Any], root_path: str) -> RemoteRepo:
        http_url = project.get("http_url_to_repo")
        ssh_url = project.get("ssh_url_to_repo")
        name = project.get("path") or project.get("name") or ""
        namespaced = project.get("path_with_namespace") or name

        prefix = f"{root_path}/"
        if namespaced.lower().startswith(prefix.lower()):
            relative = namespaced[len(prefix) :]
        else:
            relative = name

        return RemoteRepo(
            clone_url=self._select_clone_url(http_url, ssh_url),
            path_within_group=relative,
            name=name,
            http_url=http_url,
            ssh_url=ssh_url,
            archived=bool(project.get("archived", False)),
        )
