# GitRanger Provider Factory
# Registry of provider client classes keyed by provider kind

from typing import Optional

import httpx

from gitranger.config.schema import CloneProtocol, ProviderConfig, ProviderKind
from gitranger.errors import ProviderError
from gitranger.providers.base import ProviderClient
from gitranger.providers.github import GitHubClient
from gitranger.providers.gitlab import GitLabClient
from gitranger.providers.retry import RetryPolicy

_CLIENTS: dict[ProviderKind, type[ProviderClient]] = {
    ProviderKind.GITLAB: GitLabClient,
    ProviderKind.GITHUB: GitHubClient,
}


def register_client(kind: ProviderKind, client_class: type[ProviderClient]) -> None:
    """
    Register a client class for a provider kind.

    Args:
        kind: Provider kind.
        client_class: ProviderClient subclass handling that kind.

    Raises:
        TypeError: If client_class is not a ProviderClient subclass.
    """
    if not (isinstance(client_class, type) and issubclass(client_class, ProviderClient)):
        raise TypeError(f"{client_class!r} is not a ProviderClient subclass")
    _CLIENTS[kind] = client_class


def client_class_for(kind: ProviderKind) -> type[ProviderClient]:
    """
    Look up the client class for a provider kind.

    Raises:
        ProviderError: If no client is registered for kind.
    """
    client_class = _CLIENTS.get(kind)
    if client_class is None:
        raise ProviderError(f"No client registered for provider kind '{kind.value}'")
    return client_class


def create_client(
    name: str,
    config: ProviderConfig,
    clone_protocol: CloneProtocol = CloneProtocol.SSH,
    http_client: Optional[httpx.Client] = None,
    retry: Optional[RetryPolicy] = None,
) -> ProviderClient:
    """Create the client for a configured provider."""
    client_class = client_class_for(config.kind)
    return client_class(name, config, clone_protocol, http_client=http_client, retry=retry)


def get_supported_kinds() -> list[ProviderKind]:
    """Provider kinds that have a registered client."""
    return list(_CLIENTS)
