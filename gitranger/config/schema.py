# GitRanger Configuration Schema
# Pydantic models for the ranger.yaml desired-state declaration

from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from gitranger.config.secrets import SecretString
from gitranger.utils.paths import expand_path
from gitranger.utils.urls import url_host


class ProviderKind(str, Enum):
    """Supported hosting provider types."""

    GITLAB = "gitlab"
    GITHUB = "github"


class CloneProtocol(str, Enum):
    """Which remote URL form to clone discovered repositories with."""

    SSH = "ssh"
    HTTPS = "https"


DEFAULT_HOSTS: dict[ProviderKind, str] = {
    ProviderKind.GITLAB: "https://gitlab.com",
    ProviderKind.GITHUB: "https://api.github.com",
}


class ProviderConfig(BaseModel):
    """A hosting endpoint: provider kind, base URL and optional token."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: ProviderKind = Field(description="Provider type")
    host: str = Field(description="Base URL of the provider (API base for GitHub)")
    token: Optional[SecretString] = Field(default=None, description="Literal token or ${ENV_VAR} reference")

    @model_validator(mode="before")
    @classmethod
    def default_host(cls, data: Any) -> Any:
        """Fill in the public host for the provider kind when omitted."""
        if isinstance(data, dict) and not data.get("host") and data.get("kind"):
            try:
                kind = ProviderKind(data["kind"])
            except ValueError:
                return data
            data = {**data, "host": DEFAULT_HOSTS[kind]}
        return data

    @field_validator("host")
    @classmethod
    def strip_host(cls, v: str) -> str:
        """Drop trailing slashes from the host URL."""
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("host must not be empty")
        return v

    @field_validator("token", mode="before")
    @classmethod
    def wrap_token(cls, v: Any) -> Optional[SecretString]:
        """Accept plain strings for tokens."""
        if v is None or isinstance(v, SecretString):
            return v
        if isinstance(v, str):
            return SecretString(v) if v else None
        raise ValueError("token must be a string")

    @field_serializer("token")
    def serialize_token(self, token: Optional[SecretString]) -> Optional[str]:
        """Never serialize a literal token."""
        return token.display() if token is not None else None

    @property
    def web_host(self) -> str:
        """Host name that repository URLs of this provider use."""
        host = url_host(self.host)
        if self.kind == ProviderKind.GITHUB and host.startswith("api."):
            host = host[len("api.") :]
        return host


class GroupSpec(BaseModel):
    """A provider-relative group or organization to mirror."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Group path (GitLab) or organization/user (GitHub)")
    local_dir: Optional[str] = Field(default=None, description="Directory prefix for the group's repos")
    recursive: bool = Field(default=False, description="Include nested subgroups transitively")

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str) -> str:
        """Strip surrounding whitespace and slashes."""
        v = v.strip().strip("/")
        if not v:
            raise ValueError("group name must not be empty")
        return v


class RepoSpec(BaseModel):
    """A standalone repository URL."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Remote URL to clone")
    local_dir: Optional[str] = Field(default=None, description="Checkout directory (replaces the repo name)")

    @field_validator("url")
    @classmethod
    def strip_url(cls, v: str) -> str:
        """Strip surrounding whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("url must not be empty")
        return v


class WorkspaceSettings(BaseModel):
    """Where the workspace lives and how hard the engine may work."""

    model_config = ConfigDict(frozen=True)

    root: str = Field(default=".", description="Workspace root, relative to the config file")
    max_workers: int = Field(default=4, ge=1, le=32, description="Concurrent clone/fetch operations")
    discovery_workers: int = Field(default=4, ge=1, le=16, description="Concurrent group listings")
    scan_workers: int = Field(default=8, ge=1, le=64, description="Concurrent workspace checks")
    clone_protocol: CloneProtocol = Field(default=CloneProtocol.SSH, description="URL form for discovered repos")
    fetch_existing: bool = Field(default=True, description="Fetch repositories that are already cloned")


class RangerConfig(BaseModel):
    """Root configuration model for git-ranger."""

    model_config = ConfigDict(frozen=True)

    workspace: WorkspaceSettings = Field(default_factory=WorkspaceSettings, description="Workspace settings")
    providers: dict[str, ProviderConfig] = Field(default_factory=dict, description="Provider definitions")
    groups: dict[str, list[GroupSpec]] = Field(default_factory=dict, description="Groups per provider name")
    repos: list[RepoSpec] = Field(default_factory=list, description="Standalone repositories")
    base_dir: Path = Field(default_factory=Path.cwd, exclude=True, description="Directory of the config file")

    @model_validator(mode="before")
    @classmethod
    def normalize_sections(cls, data: Any) -> Any:
        """Treat empty YAML sections as empty and infer provider kinds from names."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        for key in ("providers", "groups"):
            if data.get(key) is None:
                data[key] = {}
        if data.get("repos") is None:
            data["repos"] = []
        if data.get("workspace") is None:
            data["workspace"] = {}

        if not isinstance(data["providers"], dict):
            return data

        providers: dict[str, Any] = {}
        for name, provider in data["providers"].items():
            provider = provider or {}
            if not isinstance(provider, dict):
                providers[name] = provider
                continue
            provider = dict(provider)
            if not provider.get("kind"):
                try:
                    provider["kind"] = ProviderKind(name).value
                except ValueError:
                    raise ValueError(
                        f"provider '{name}' needs a 'kind' ({', '.join(k.value for k in ProviderKind)})"
                    ) from None
            providers[name] = provider
        data["providers"] = providers

        if isinstance(data["groups"], dict):
            data["groups"] = {name: groups or [] for name, groups in data["groups"].items()}

        return data

    @model_validator(mode="after")
    def check_group_providers(self) -> "RangerConfig":
        """Every group section must name a configured provider."""
        unknown = sorted(name for name in self.groups if name not in self.providers)
        if unknown:
            raise ValueError(f"groups reference unknown provider(s): {', '.join(unknown)}")
        return self

    @property
    def root_path(self) -> Path:
        """Absolute workspace root."""
        return expand_path(self.workspace.root, base=self.base_dir)

    def get_provider(self, name: str) -> Optional[ProviderConfig]:
        """Get a provider by name."""
        return self.providers.get(name)

    def iter_groups(self) -> list[tuple[str, GroupSpec]]:
        """All (provider name, group) pairs in declaration order."""
        return [(provider, group) for provider, groups in self.groups.items() for group in groups]

    def provider_for_url(self, url: str) -> Optional[tuple[str, ProviderConfig]]:
        """Find the configured provider whose host serves this repository URL."""
        host = url_host(url)
        if not host:
            return None
        for name, provider in self.providers.items():
            if provider.web_host == host:
                return name, provider
        return None
