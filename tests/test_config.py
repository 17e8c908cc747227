# Tests for gitranger.config
# Schema validation, YAML loading and the init template

from pathlib import Path

import pytest
import yaml

from gitranger.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG_TEMPLATE,
    CloneProtocol,
    ProviderKind,
    RangerConfig,
    SecretString,
    get_config_path,
    load_config,
    validate_config_file,
    write_default_config,
)
from gitranger.errors import ConfigError


class TestRangerConfigSchema:
    """Tests for the pydantic configuration models."""

    def test_sample_config(self, ranger_config: RangerConfig, workspace: Path):
        assert ranger_config.root_path == workspace
        assert ranger_config.workspace.max_workers == 2
        assert ranger_config.providers["gitlab"].kind == ProviderKind.GITLAB
        assert ranger_config.providers["github"].kind == ProviderKind.GITHUB
        assert len(ranger_config.iter_groups()) == 2
        assert len(ranger_config.repos) == 2

    def test_defaults(self):
        config = RangerConfig.model_validate({})
        assert config.workspace.max_workers == 4
        assert config.workspace.clone_protocol == CloneProtocol.SSH
        assert config.workspace.fetch_existing is True
        assert config.providers == {}
        assert config.repos == []

    def test_empty_sections(self):
        config = RangerConfig.model_validate({"providers": None, "groups": None, "repos": None})
        assert config.iter_groups() == []

    def test_default_hosts(self):
        config = RangerConfig.model_validate({"providers": {"gitlab": {}, "github": {}}})
        assert config.providers["gitlab"].host == "https://gitlab.com"
        assert config.providers["github"].host == "https://api.github.com"

    def test_trailing_slash_stripped(self):
        config = RangerConfig.model_validate({"providers": {"gitlab": {"host": "https://git.corp/"}}})
        assert config.providers["gitlab"].host == "https://git.corp"

    def test_named_provider_with_kind(self):
        config = RangerConfig.model_validate(
            {"providers": {"work": {"kind": "gitlab", "host": "https://git.work.com"}}}
        )
        assert config.providers["work"].kind == ProviderKind.GITLAB

    def test_unknown_provider_kind_rejected(self):
        with pytest.raises(ValueError, match="needs a 'kind'"):
            RangerConfig.model_validate({"providers": {"work": {"host": "https://git.work.com"}}})

    def test_group_for_unknown_provider_rejected(self):
        with pytest.raises(ValueError, match="unknown provider"):
            RangerConfig.model_validate({"groups": {"gitlab": [{"name": "org"}]}})

    def test_token_not_resolved_while_parsing(self, monkeypatch):
        monkeypatch.delenv("NEVER_SET_TOKEN", raising=False)
        config = RangerConfig.model_validate({"providers": {"gitlab": {"token": "${NEVER_SET_TOKEN}"}}})
        assert config.providers["gitlab"].token == SecretString("${NEVER_SET_TOKEN}")

    def test_literal_token_masked_on_dump(self):
        config = RangerConfig.model_validate({"providers": {"gitlab": {"token": "glpat-literal"}}})
        dumped = config.model_dump(mode="json")
        assert "glpat-literal" not in str(dumped)
        assert "glpat-literal" not in repr(config)

    def test_reference_token_kept_on_dump(self):
        config = RangerConfig.model_validate({"providers": {"gitlab": {"token": "${GITLAB_TOKEN}"}}})
        assert config.model_dump(mode="json")["providers"]["gitlab"]["token"] == "${GITLAB_TOKEN}"

    def test_group_name_cleaned(self):
        config = RangerConfig.model_validate(
            {"providers": {"gitlab": {}}, "groups": {"gitlab": [{"name": "/my-org/team/"}]}}
        )
        assert config.iter_groups()[0][1].name == "my-org/team"

    def test_worker_bounds(self):
        with pytest.raises(ValueError):
            RangerConfig.model_validate({"workspace": {"max_workers": 0}})

    def test_frozen(self, ranger_config: RangerConfig):
        with pytest.raises(ValueError):
            ranger_config.workspace.max_workers = 10  # type: ignore[misc]

    def test_relative_root(self, temp_dir: Path):
        config = RangerConfig.model_validate({"workspace": {"root": "repos"}, "base_dir": temp_dir})
        assert config.root_path == temp_dir / "repos"

    def test_provider_for_url(self, ranger_config: RangerConfig):
        name, provider = ranger_config.provider_for_url("git@github.com:example/tool.git")
        assert name == "github"
        assert provider.kind == ProviderKind.GITHUB

        name, _ = ranger_config.provider_for_url("https://gitlab.example.com/a/b.git")
        assert name == "gitlab"

        assert ranger_config.provider_for_url("https://example.org/misc/notes.git") is None


class TestLoadConfig:
    """Tests for load_config and get_config_path."""

    def test_load(self, config_file: Path, workspace: Path):
        config = load_config(config_file)
        assert config.base_dir == config_file.parent
        assert config.root_path == workspace

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(FileNotFoundError, match="git-ranger init"):
            load_config(temp_dir / "missing.yaml")

    def test_empty_file(self, temp_dir: Path):
        path = temp_dir / "ranger.yaml"
        path.write_text("", encoding="utf-8")
        config = load_config(path)
        assert config.repos == []
        assert config.root_path == temp_dir

    def test_invalid_yaml(self, temp_dir: Path):
        path = temp_dir / "ranger.yaml"
        path.write_text("providers: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_validation_error(self, temp_dir: Path):
        path = temp_dir / "ranger.yaml"
        path.write_text(yaml.dump({"repos": [{"local_dir": "x"}]}), encoding="utf-8")
        with pytest.raises(ConfigError, match="repos"):
            load_config(path)

    def test_non_mapping(self, temp_dir: Path):
        path = temp_dir / "ranger.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_unset_token_variable_still_loads(self, temp_dir: Path, monkeypatch):
        monkeypatch.delenv("GITLAB_TOKEN", raising=False)
        path = temp_dir / "ranger.yaml"
        path.write_text('providers:\n  gitlab:\n    token: "${GITLAB_TOKEN}"\n', encoding="utf-8")
        assert load_config(path).providers["gitlab"].token.variable == "GITLAB_TOKEN"

    def test_config_path_env_override(self, temp_dir: Path, monkeypatch):
        monkeypatch.setenv("GIT_RANGER_CONFIG", str(temp_dir / "custom.yaml"))
        assert get_config_path() == temp_dir / "custom.yaml"

    def test_config_path_default(self, temp_dir: Path, monkeypatch):
        monkeypatch.delenv("GIT_RANGER_CONFIG", raising=False)
        assert get_config_path(temp_dir) == temp_dir / CONFIG_FILENAME


class TestValidateConfigFile:
    """Tests for validate_config_file."""

    def test_valid(self, config_file: Path):
        assert validate_config_file(config_file) == (True, [])

    def test_missing(self, temp_dir: Path):
        is_valid, errors = validate_config_file(temp_dir / "nope.yaml")
        assert not is_valid
        assert "not found" in errors[0]

    def test_invalid(self, temp_dir: Path):
        path = temp_dir / "ranger.yaml"
        path.write_text(yaml.dump({"workspace": {"max_workers": 100}}), encoding="utf-8")
        is_valid, errors = validate_config_file(path)
        assert not is_valid
        assert any("max_workers" in e for e in errors)


class TestDefaults:
    """Tests for the init template."""

    def test_template_is_valid_config(self):
        data = yaml.safe_load(DEFAULT_CONFIG_TEMPLATE)
        config = RangerConfig.model_validate(data)
        assert config.providers["gitlab"].token.variable == "GITLAB_TOKEN"
        assert config.iter_groups()[0][1].recursive is True

    def test_write_default_config(self, temp_dir: Path):
        path = write_default_config(temp_dir)
        assert path == temp_dir / CONFIG_FILENAME
        assert path.read_text(encoding="utf-8") == DEFAULT_CONFIG_TEMPLATE

    def test_write_refuses_overwrite(self, temp_dir: Path):
        (temp_dir / CONFIG_FILENAME).write_text("existing", encoding="utf-8")
        with pytest.raises(FileExistsError):
            write_default_config(temp_dir)
        assert (temp_dir / CONFIG_FILENAME).read_text(encoding="utf-8") == "existing"

    def test_write_force(self, temp_dir: Path):
        (temp_dir / CONFIG_FILENAME).write_text("existing", encoding="utf-8")
        write_default_config(temp_dir, force=True)
        assert "Git Ranger Configuration" in (temp_dir / CONFIG_FILENAME).read_text(encoding="utf-8")

    def test_write_creates_directory(self, temp_dir: Path):
        path = write_default_config(temp_dir / "new" / "dir")
        assert path.exists()
