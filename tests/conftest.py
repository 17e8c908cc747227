# GitRanger Test Fixtures
# Pytest fixtures and fakes shared by the git-ranger tests

import shutil
import subprocess
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Optional
from unittest.mock import MagicMock

import pytest
import yaml

from gitranger.config.schema import ProviderConfig, ProviderKind, RangerConfig
from gitranger.git.operations import GitError
from gitranger.providers.base import ProviderClient, RemoteRepo


class FakeGit:
    """
    In-memory stand-in for GitClient.

    clone() creates the directory with a .git folder and records the origin,
    so a second scan sees a matching repository.
    """

    def __init__(self):
        self.remotes: dict[Path, str] = {}
        self.cloned: list[tuple[str, Path, Optional[str], Optional[str]]] = []
        self.fetched: list[tuple[Path, Optional[str], Optional[str]]] = []
        self.fail_clone: dict[str, str] = {}
        self.fail_fetch: dict[Path, str] = {}

    @property
    def mutating_calls(self) -> int:
        return len(self.cloned) + len(self.fetched)

    def add_repo(self, path: Path, url: Optional[str]) -> Path:
        """Create a fake working copy at path with the given origin."""
        (path / ".git").mkdir(parents=True, exist_ok=True)
        if url is not None:
            self.remotes[path] = url
        return path

    def clone(self, url: str, destination: Path, token: Optional[str] = None, username: Optional[str] = None) -> None:
        self.cloned.append((url, destination, token, username))
        if url in self.fail_clone:
            # leave partial state behind like an interrupted clone
            (destination / ".git").mkdir(parents=True, exist_ok=True)
            raise GitError(f"Git command failed: git clone -- {url}", 128, self.fail_clone[url])
        self.add_repo(destination, url)

    def fetch(self, path: Path, token: Optional[str] = None, username: Optional[str] = None) -> None:
        self.fetched.append((path, token, username))
        if path in self.fail_fetch:
            raise GitError("Git command failed: git fetch --all --prune", 1, self.fail_fetch[path])

    def get_remote_url(self, path: Path, remote: str = "origin") -> Optional[str]:
        return self.remotes.get(path)

    def is_git_dir(self, path: Path) -> bool:
        return (path / ".git").exists()


class FakeProviderClient(ProviderClient):
    """Provider client serving canned group listings."""

    kind = ProviderKind.GITLAB
    auth_username = "oauth2"

    def __init__(
        self,
        name: str,
        config: ProviderConfig,
        groups: Optional[dict[str, list[RemoteRepo]]] = None,
        errors: Optional[dict[str, Exception]] = None,
    ):
        super().__init__(name, config, http_client=MagicMock())
        self.groups = groups or {}
        self.errors = errors or {}
        self.calls: list[tuple[str, bool]] = []

    def _auth_headers(self, token: str) -> dict[str, str]:
        return {"PRIVATE-TOKEN": token}

    def list_group_repos(self, group: str, recursive: bool = False) -> list[RemoteRepo]:
        self.calls.append((group, recursive))
        # token is needed for the API call, resolved the same way real clients do
        self._resolve_token()
        if group in self.errors:
            raise self.errors[group]
        return list(self.groups.get(group, []))


def remote(path: str, host: str = "gitlab.example.com") -> RemoteRepo:
    """RemoteRepo for a project path relative to its group."""
    name = path.rsplit("/", 1)[-1]
    ssh_url = f"git@{host}:{path}.git"
    return RemoteRepo(
        clone_url=ssh_url,
        path_within_group=path,
        name=name,
        http_url=f"https://{host}/{path}.git",
        ssh_url=ssh_url,
    )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def workspace(temp_dir: Path) -> Path:
    """Workspace root directory."""
    root = temp_dir / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def sample_config(workspace: Path) -> dict:
    """Create sample configuration dict."""
    return {
        "workspace": {"root": str(workspace), "max_workers": 2},
        "providers": {
            "gitlab": {"host": "https://gitlab.example.com", "token": "${GITLAB_TOKEN}"},
            "github": {"token": "${GITHUB_TOKEN}"},
        },
        "groups": {
            "gitlab": [{"name": "my-org/my-team", "local_dir": "team", "recursive": True}],
            "github": [{"name": "my-gh-org", "local_dir": "gh"}],
        },
        "repos": [
            {"url": "git@github.com:example/tool.git", "local_dir": "tools/tool"},
            {"url": "https://example.org/misc/notes.git"},
        ],
    }


@pytest.fixture
def ranger_config(sample_config: dict, temp_dir: Path) -> RangerConfig:
    """Validated RangerConfig built from sample_config."""
    return RangerConfig.model_validate({**sample_config, "base_dir": temp_dir})


@pytest.fixture
def config_file(temp_dir: Path, sample_config: dict) -> Path:
    """Create a configuration file."""
    config_path = temp_dir / "ranger.yaml"
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(sample_config, f, default_flow_style=False)
    return config_path


@pytest.fixture
def git_repo(temp_dir: Path) -> Callable[..., Path]:
    """Factory that creates a real git repository with an optional origin."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    def _create(path: Path, origin: Optional[str] = None, bare: bool = False) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        args = ["git", "init", "--quiet"]
        if bare:
            args.append("--bare")
        subprocess.run([*args, str(path)], check=True, capture_output=True)
        if origin is not None:
            subprocess.run(
                ["git", "remote", "add", "origin", origin],
                cwd=path,
                check=True,
                capture_output=True,
            )
        return path

    return _create


@pytest.fixture
def make_remote() -> Callable[..., RemoteRepo]:
    """Factory for RemoteRepo values."""
    return remote


@pytest.fixture
def fake_client() -> Callable[..., FakeProviderClient]:
    """Factory for FakeProviderClient instances bound to a provider of a config."""

    def _create(
        config: RangerConfig,
        name: str = "gitlab",
        groups: Optional[dict[str, list[RemoteRepo]]] = None,
        errors: Optional[dict[str, Exception]] = None,
    ) -> FakeProviderClient:
        return FakeProviderClient(name, config.providers[name], groups=groups, errors=errors)

    return _create
