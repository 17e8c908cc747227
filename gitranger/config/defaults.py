# GitRanger Default Configuration
# Commented ranger.yaml template written by `git-ranger init`

from pathlib import Path

from gitranger.utils.paths import atomic_write

CONFIG_FILENAME = "ranger.yaml"

DEFAULT_CONFIG_TEMPLATE = """\
# Git Ranger Configuration
# Declares which repositories to keep cloned and where they live locally.

# SECURITY: never commit tokens directly to this file.
# Reference environment variables instead: token: "${GITLAB_TOKEN}"

# Workspace settings (all optional)
workspace:
  root: "."                  # Relative to this file's directory
  max_workers: 4             # Concurrent clone/fetch operations
  clone_protocol: ssh        # ssh | https
  fetch_existing: true       # Fetch repositories that are already cloned

# Provider endpoints (GitLab, GitHub)
providers:
  gitlab:
    host: "https://gitlab.example.com"   # Your GitLab instance URL
    token: "${GITLAB_TOKEN}"             # export GITLAB_TOKEN="your-token"

  # github:
  #   token: "${GITHUB_TOKEN}"           # export GITHUB_TOKEN="your-token"

# Groups to mirror, keyed by provider name
groups:
  gitlab:
    - name: "my-org/my-team"             # Group path on GitLab
      local_dir: "team-projects"         # Prefix for the group's repos
      recursive: true                    # Include nested subgroups

    # - name: "another-group"
    #   local_dir: "other-projects"

  # github:
  #   - name: "my-github-org"
  #     local_dir: "github-projects"

# Standalone repositories
repos:
  - url: "git@github.com:example/standalone-tool.git"
    local_dir: "standalone/standalone-tool"   # Checkout directory

  # - url: "https://gitlab.example.com/user/project.git"

# Notes:
# - local_dir may be relative (to workspace.root) or absolute
# - Without local_dir a standalone repo is cloned to <root>/<repo name>
# - Run 'git-ranger sync --dry-run' to preview changes
# - Add ranger.yaml to .gitignore if it contains anything sensitive
"""


def write_default_config(directory: Path, force: bool = False) -> Path:
    """
    Write the commented configuration template into a directory.

    Args:
        directory: Target directory (created if missing).
        force: Overwrite an existing configuration file.

    Returns:
        Path of the written file.

    Raises:
        FileExistsError: If the file exists and force is False.
    """
    config_path = directory / CONFIG_FILENAME
    if config_path.exists() and not force:
        raise FileExistsError(f"Configuration file already exists at {config_path}")

    atomic_write(config_path, DEFAULT_CONFIG_TEMPLATE)
    return config_path
