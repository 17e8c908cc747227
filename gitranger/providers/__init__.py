# GitRanger Providers Module
# API clients that enumerate repositories of hosting provider groups

from gitranger.providers.base import MAX_PAGES, ProviderClient, RemoteRepo
from gitranger.providers.factory import client_class_for, create_client, get_supported_kinds, register_client
from gitranger.providers.github import GitHubClient
from gitranger.providers.gitlab import MAX_GROUP_DEPTH, MAX_GROUPS, GitLabClient
from gitranger.providers.retry import RetryPolicy

__all__ = [
    # Base
    "ProviderClient",
    "RemoteRepo",
    "RetryPolicy",
    "MAX_PAGES",
    # Clients
    "GitLabClient",
    "GitHubClient",
    "MAX_GROUP_DEPTH",
    "MAX_GROUPS",
    # Factory
    "create_client",
    "client_class_for",
    "register_client",
    "get_supported_kinds",
]
