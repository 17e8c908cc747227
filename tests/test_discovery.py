# Tests for gitranger.sync.discovery
# Expanding groups and standalone entries into desired repositories

from pathlib import Path

import pytest

from gitranger.config.schema import ProviderKind, RangerConfig
from gitranger.config.secrets import SecretString
from gitranger.errors import NotFound
from gitranger.sync.discovery import discover, group_label
from gitranger.sync.item import STANDALONE_SOURCE, DesiredRepo
from gitranger.sync.report import DiagnosticKind


@pytest.fixture
def tokens(monkeypatch):
    monkeypatch.setenv("GITLAB_TOKEN", "gl-token")
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")


@pytest.fixture
def clients(ranger_config: RangerConfig, fake_client, make_remote):
    gitlab = fake_client(
        ranger_config,
        "gitlab",
        groups={"my-org/my-team": [make_remote("api"), make_remote("sub/lib")]},
    )
    github = fake_client(
        ranger_config,
        "github",
        groups={"my-gh-org": [make_remote("site", host="github.com")]},
    )
    return {"gitlab": gitlab, "github": github}


def _paths(repos: list[DesiredRepo], root: Path) -> list[str]:
    return [r.local_path.relative_to(root).as_posix() for r in repos]


class TestDiscover:
    """Tests for discover()."""

    def test_layout(self, ranger_config: RangerConfig, clients, workspace: Path, tokens):
        result = discover(ranger_config, clients=clients)

        assert result.diagnostics == []
        assert _paths(result.repos, workspace) == [
            "gh/site",
            "notes",
            "team/api",
            "team/sub/lib",
            "tools/tool",
        ]

    def test_recursive_flag_passed(self, ranger_config: RangerConfig, clients, tokens):
        discover(ranger_config, clients=clients)
        assert clients["gitlab"].calls == [("my-org/my-team", True)]
        assert clients["github"].calls == [("my-gh-org", False)]

    def test_group_repos_carry_provider(self, ranger_config: RangerConfig, clients, workspace: Path, tokens):
        result = discover(ranger_config, clients=clients)
        api = next(r for r in result.repos if r.local_path == workspace / "team" / "api")

        assert api.source == "gitlab"
        assert api.group == "my-org/my-team"
        assert api.provider_kind == ProviderKind.GITLAB
        assert api.token == SecretString("${GITLAB_TOKEN}")
        assert api.auth_username == "oauth2"
        assert api.identifier == "team/api"
        assert not api.is_standalone

    def test_standalone_inherits_matching_provider(self, ranger_config: RangerConfig, clients, workspace: Path, tokens):
        result = discover(ranger_config, clients=clients)
        tool = next(r for r in result.repos if r.local_path == workspace / "tools" / "tool")

        assert tool.is_standalone
        assert tool.source == STANDALONE_SOURCE
        assert tool.provider_kind == ProviderKind.GITHUB
        assert tool.token == SecretString("${GITHUB_TOKEN}")
        assert tool.auth_username == "x-access-token"

    def test_standalone_without_provider(self, ranger_config: RangerConfig, clients, workspace: Path, tokens):
        result = discover(ranger_config, clients=clients)
        notes = next(r for r in result.repos if r.local_path == workspace / "notes")

        assert notes.token is None
        assert notes.provider_kind is None
        assert notes.resolved_token() is None

    def test_tokens_stay_unresolved(self, ranger_config: RangerConfig, clients, tokens):
        result = discover(ranger_config, clients=clients)
        assert "gl-token" not in repr(result.repos)
        assert all(r.token is None or r.token.is_reference for r in result.repos)

    def test_missing_secret_isolated_to_provider(self, ranger_config: RangerConfig, clients, workspace, monkeypatch):
        monkeypatch.delenv("GITLAB_TOKEN", raising=False)
        monkeypatch.setenv("GITHUB_TOKEN", "gh-token")

        result = discover(ranger_config, clients=clients)

        assert [(d.kind, d.subject) for d in result.diagnostics] == [
            (DiagnosticKind.MISSING_SECRET, "gitlab:my-org/my-team")
        ]
        assert "GITLAB_TOKEN" in result.diagnostics[0].message
        assert _paths(result.repos, workspace) == ["gh/site", "notes", "tools/tool"]

    def test_provider_error_isolated_to_group(self, ranger_config: RangerConfig, fake_client, make_remote, workspace, tokens):
        clients = {
            "gitlab": fake_client(ranger_config, "gitlab", groups={"my-org/my-team": [make_remote("api")]}),
            "github": fake_client(ranger_config, "github", errors={"my-gh-org": NotFound("my-gh-org")}),
        }

        result = discover(ranger_config, clients=clients)

        assert len(result.diagnostics) == 1
        diagnostic = result.diagnostics[0]
        assert diagnostic.kind == DiagnosticKind.PROVIDER_ERROR
        assert diagnostic.subject == "github:my-gh-org"
        assert "team/api" in _paths(result.repos, workspace)

    def test_scoped_to_groups(self, ranger_config: RangerConfig, clients, workspace: Path, tokens):
        gitlab_groups = [pair for pair in ranger_config.iter_groups() if pair[0] == "gitlab"]

        result = discover(ranger_config, clients=clients, groups=gitlab_groups, repos=[])

        assert _paths(result.repos, workspace) == ["team/api", "team/sub/lib"]
        assert clients["github"].calls == []

    def test_empty_scope(self, ranger_config: RangerConfig, clients, tokens):
        result = discover(ranger_config, clients=clients, groups=[], repos=[])
        assert result.repos == []
        assert result.diagnostics == []


class TestDeduplication:
    """Repositories reaching the same path from several entries."""

    @staticmethod
    def _config(workspace: Path, repos: list[dict]) -> RangerConfig:
        return RangerConfig.model_validate(
            {
                "workspace": {"root": str(workspace)},
                "providers": {"gitlab": {"host": "https://gitlab.example.com", "token": "${GITLAB_TOKEN}"}},
                "groups": {"gitlab": [{"name": "org", "local_dir": "org"}]},
                "repos": repos,
            }
        )

    def test_same_remote_merged(self, workspace: Path, fake_client, make_remote, tokens):
        config = self._config(
            workspace,
            [{"url": "https://gitlab.example.com/api.git", "local_dir": "org/api"}],
        )
        client = fake_client(config, groups={"org": [make_remote("api")]})

        result = discover(config, clients={"gitlab": client})

        assert len(result.repos) == 1
        assert result.diagnostics == []
        assert result.repos[0].token is not None

    def test_different_remotes_conflict(self, workspace: Path, fake_client, make_remote, tokens):
        config = self._config(
            workspace,
            [{"url": "git@gitlab.example.com:other/api.git", "local_dir": "org/api"}],
        )
        client = fake_client(config, groups={"org": [make_remote("api"), make_remote("web")]})

        result = discover(config, clients={"gitlab": client})

        assert _paths(result.repos, workspace) == ["org/web"]
        assert len(result.diagnostics) == 1
        diagnostic = result.diagnostics[0]
        assert diagnostic.kind == DiagnosticKind.PATH_CONFLICT
        assert diagnostic.subject == str(workspace / "org" / "api")
        assert "other/api" in diagnostic.message

    def test_conflict_is_deterministic(self, workspace: Path, fake_client, make_remote, tokens):
        config = self._config(
            workspace,
            [
                {"url": "git@host.example:b/api.git", "local_dir": "org/api"},
                {"url": "git@host.example:a/api.git", "local_dir": "org/api"},
            ],
        )
        client = fake_client(config, groups={"org": [make_remote("api")]})

        first = discover(config, clients={"gitlab": client})
        second = discover(config, clients={"gitlab": client})
        assert first.diagnostics == second.diagnostics


def test_group_label(ranger_config: RangerConfig):
    provider, group = ranger_config.iter_groups()[0]
    assert group_label(provider, group) == f"{provider}:{group.name}"
