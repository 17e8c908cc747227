# GitRanger Utilities Module
# Helper functions for paths and remote URLs

from gitranger.utils.paths import (
    atomic_write,
    ensure_dir,
    expand_path,
    get_relative_path,
    is_empty_dir,
    safe_delete,
)
from gitranger.utils.urls import (
    is_http_url,
    normalize_remote_url,
    redact,
    repo_name_from_url,
    same_remote,
    url_host,
)

__all__ = [
    # Paths
    "expand_path",
    "ensure_dir",
    "is_empty_dir",
    "safe_delete",
    "atomic_write",
    "get_relative_path",
    # URLs
    "normalize_remote_url",
    "same_remote",
    "url_host",
    "is_http_url",
    "repo_name_from_url",
    "redact",
]
