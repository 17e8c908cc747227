# GitRanger GitHub Provider
# Organization and user repository discovery through the GitHub REST API

import time
from typing import Any, Optional
from urllib.parse import quote

import httpx

from gitranger.config.schema import ProviderKind
from gitranger.errors import NotFound, RateLimited
from gitranger.providers.base import PER_PAGE, PageRequest, ProviderClient, RemoteRepo


class GitHubClient(ProviderClient):
    """GitHub organizations, falling back to user accounts."""

    kind = ProviderKind.GITHUB
    auth_username = "x-access-token"

    def _auth_headers(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["Accept"] = "application/vnd.github+json"
        headers["X-GitHub-Api-Version"] = "2022-11-28"
        return headers

    def _rate_limit_from(self, response: httpx.Response) -> Optional[RateLimited]:
        limited = super()._rate_limit_from(response)
        if limited is not None:
            return limited
        if response.status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0":
            retry_after = None
            reset = response.headers.get("X-RateLimit-Reset")
            if reset and reset.isdigit():
                retry_after = max(0.0, int(reset) - time.time())
            return RateLimited(f"{self.name}: API rate limit exhausted", retry_after=retry_after)
        return None

    def _next_page(self, response: httpx.Response, current: PageRequest) -> Optional[PageRequest]:
        next_link = response.links.get("next", {}).get("url")
        if not next_link:
            return None
        return next_link, None

    def list_group_repos(self, group: str, recursive: bool = False) -> list[RemoteRepo]:
        """
        List repositories of an organization, or of a user when no such org exists.

        GitHub has no nested groups, so recursive has no effect.
        """
        owner = quote(group, safe="")
        try:
            items = list(
                self._paginate(
                    f"{self.config.host}/orgs/{owner}/repos",
                    {"per_page": PER_PAGE, "type": "all"},
                    identifier=group,
                )
            )
        except NotFound:
            items = list(
                self._paginate(
                    f"{self.config.host}/users/{owner}/repos",
                    {"per_page": PER_PAGE, "type": "owner"},
                    identifier=group,
                )
            )
        return [self._to_remote(item) for item in items]

    def _to_remote(self, item: dict[str, Any]) -> RemoteRepo:
        http_url = item.get("clone_url")
        ssh_url = item.get("ssh_url")
        name = item.get("name") or ""
        return RemoteRepo(
            clone_url=self._select_clone_url(http_url, ssh_url),
            path_within_group=name,
            name=name,
            http_url=http_url,
            ssh_url=ssh_url,
            archived=bool(item.get("archived", False)),
        )
