# GitRanger Provider Base
# Shared HTTP plumbing for hosting provider API clients

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, Optional

import httpx

from gitranger.config.schema import CloneProtocol, ProviderConfig, ProviderKind
from gitranger.config.secrets import resolve
from gitranger.errors import AuthenticationFailed, NetworkError, NotFound, ProviderError, RateLimited
from gitranger.providers.retry import RetryPolicy
from gitranger.utils.urls import is_http_url, redact, repo_name_from_url

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
PER_PAGE = 100
MAX_PAGES = 500

# (url, params) of one page request
PageRequest = tuple[str, Optional[dict[str, Any]]]


@dataclass(frozen=True)
class RemoteRepo:
    """A repository as reported by a provider."""

    clone_url: str
    path_within_group: str
    name: str
    http_url: Optional[str] = None
    ssh_url: Optional[str] = None
    archived: bool = False


class ProviderClient(ABC):
    """
    Abstract base class for provider API clients.

    Subclasses map one provider's REST API onto list_group_repos(). The base
    class owns the HTTP client, lazy token resolution, status code mapping,
    rate-limit retries and bounded pagination.
    """

    kind: ClassVar[ProviderKind]
    auth_username: ClassVar[str] = "git"

    def __init__(
        self,
        name: str,
        config: ProviderConfig,
        clone_protocol: CloneProtocol = CloneProtocol.SSH,
        http_client: Optional[httpx.Client] = None,
        retry: Optional[RetryPolicy] = None,
    ):
        """
        Initialize the client.

        Args:
            name: Provider name from the configuration.
            config: Provider endpoint and token.
            clone_protocol: Which URL form discovered repos are cloned with.
            http_client: Shared httpx client (created and owned if omitted).
            retry: Rate-limit retry policy.
        """
        self.name = name
        self.config = config
        self.clone_protocol = clone_protocol
        self.retry = retry or RetryPolicy()
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=DEFAULT_TIMEOUT, follow_redirects=True)
        self._token: Optional[str] = None
        self._token_loaded = False
        self._token_lock = threading.Lock()

    @abstractmethod
    def list_group_repos(self, group: str, recursive: bool = False) -> list[RemoteRepo]:
        """
        List every repository in a group.

        Args:
            group: Provider-relative group path or organization name.
            recursive: Include nested subgroups transitively.

        Returns:
            Repositories with paths relative to the group.

        Raises:
            ProviderError: On any API failure.
            MissingEnvironmentVariable: If the token references an unset variable.
        """

    @abstractmethod
    def _auth_headers(self, token: str) -> dict[str, str]:
        """Headers that authenticate a request with token."""

    def list_repo(self, url: str) -> RemoteRepo:
        """Describe a single repository URL without calling the API."""
        http = is_http_url(url)
        name = repo_name_from_url(url)
        return RemoteRepo(
            clone_url=url,
            path_within_group=name,
            name=name,
            http_url=url if http else None,
            ssh_url=None if http else url,
        )

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ProviderClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- requests ---------------------------------------------------------

    def _resolve_token(self) -> Optional[str]:
        if self.config.token is None:
            return None
        with self._token_lock:
            if not self._token_loaded:
                self._token = resolve(self.config.token)
                self._token_loaded = True
            return self._token

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "User-Agent": "git-ranger"}
        token = self._resolve_token()
        if token:
            headers.update(self._auth_headers(token))
        return headers

    def _select_clone_url(self, http_url: Optional[str], ssh_url: Optional[str]) -> str:
        if self.clone_protocol == CloneProtocol.HTTPS:
            url = http_url or ssh_url
        else:
            url = ssh_url or http_url
        if not url:
            raise ProviderError(f"{self.name}: repository without a clone URL")
        return url

    def _rate_limit_from(self, response: httpx.Response) -> Optional[RateLimited]:
        """Return a RateLimited error if the response is a rate-limit rejection."""
        if response.status_code == 429:
            return RateLimited(f"{self.name}: rate limited", retry_after=_parse_retry_after(response))
        return None

    def _raise_for_status(self, response: httpx.Response, identifier: str) -> None:
        status = response.status_code
        if 200 <= status < 300:
            return

        rate_limited = self._rate_limit_from(response)
        if rate_limited is not None:
            raise rate_limited
        if status in (401, 403):
            raise AuthenticationFailed(f"{self.name}: access denied for {identifier} (HTTP {status})")
        if status == 404:
            raise NotFound(identifier)
        raise NetworkError(f"{self.name}: HTTP {status} for {identifier}")

    def _request(self, url: str, params: Optional[dict[str, Any]] = None, *, identifier: str) -> httpx.Response:
        """
        GET a URL, retrying rate-limited responses per the retry policy.

        Raises:
            ProviderError: Mapped from the response status or transport failure.
        """
        headers = self._headers()
        attempt = 0
        while True:
            try:
                response = self._client.get(url, params=params, headers=headers)
            except httpx.HTTPError as e:
                raise NetworkError(f"{self.name}: {redact(str(e))}") from e

            try:
                self._raise_for_status(response, identifier)
                return response
            except RateLimited as e:
                if attempt + 1 >= self.retry.max_attempts:
                    raise
                delay = self.retry.delay_for(attempt, e.retry_after)
                logger.info("%s rate limited, retrying in %.1fs (attempt %d)", self.name, delay, attempt + 1)
                time.sleep(delay)
                attempt += 1

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"{self.name}: unreadable response from {response.request.url}") from e

    def _next_page(self, response: httpx.Response, current: PageRequest) -> Optional[PageRequest]:
        """Request for the page after response, or None on the last page."""
        return None

    def _paginate(self, url: str, params: Optional[dict[str, Any]] = None, *, identifier: str) -> Iterator[Any]:
        """
        Yield items from every page of a list endpoint.

        Raises:
            ProviderError: If the cursor repeats or MAX_PAGES is exceeded.
        """
        request: PageRequest = (url, params)
        seen = {_page_key(request)}
        for _ in range(MAX_PAGES):
            response = self._request(request[0], request[1], identifier=identifier)
            items = self._json(response)
            if not isinstance(items, list):
                raise NetworkError(f"{self.name}: expected a list for {identifier}")
            yield from items

            following = self._next_page(response, request)
            if following is None:
                return
            key = _page_key(following)
            if key in seen:
                raise ProviderError(f"{self.name}: pagination cursor repeated for {identifier}")
            seen.add(key)
            request = following

        raise ProviderError(f"{self.name}: more than {MAX_PAGES} pages for {identifier}")


def _page_key(request: PageRequest) -> tuple[str, tuple[tuple[str, str], ...]]:
    url, params = request
    return url, tuple(sorted((k, str(v)) for k, v in (params or {}).items()))


def _parse_retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None
