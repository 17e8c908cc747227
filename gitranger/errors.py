# GitRanger Errors
# Exception taxonomy shared by configuration, providers and the sync engine

from typing import Optional


class RangerError(Exception):
    """Base class for all git-ranger errors."""


class ConfigError(RangerError):
    """Configuration could not be loaded or validated."""


class ConfigConflict(RangerError):
    """Two configuration entries resolve to the same local path."""

    def __init__(self, local_path: str, urls: list[str]):
        self.local_path = local_path
        self.urls = urls
        super().__init__(f"{len(urls)} different remotes map to {local_path}: {', '.join(urls)}")


class MissingEnvironmentVariable(RangerError):
    """A ${NAME} secret references an environment variable that is not set."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Environment variable '{name}' is not set")


class FilesystemError(RangerError):
    """Scan or clone/fetch I/O failure for a single repository."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ProviderError(RangerError):
    """Hosting provider API failure, scoped to one provider or group."""


class AuthenticationFailed(ProviderError):
    """The provider rejected the configured credentials."""


class NotFound(ProviderError):
    """The requested group, organization or repository does not exist."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Not found: {identifier}")


class RateLimited(ProviderError):
    """The provider asked us to slow down."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class NetworkError(ProviderError):
    """Transport failure, timeout, server error or unreadable response."""
