# GitRanger Git Module
# Git command execution for clone, fetch and working copy inspection

from gitranger.git.operations import (
    GitClient,
    GitError,
    auth_env,
    clone,
    fetch,
    get_remote_url,
    is_git_dir,
)

__all__ = [
    "GitClient",
    "GitError",
    "auth_env",
    "clone",
    "fetch",
    "get_remote_url",
    "is_git_dir",
]
