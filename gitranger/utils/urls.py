# GitRanger URL Utilities
# Remote URL normalization, naming and credential redaction

import re
from collections.abc import Iterable
from urllib.parse import urlsplit

MASK = "**********"

# git@host:group/repo.git (scp-like syntax, no scheme)
_SCP_RE = re.compile(r"^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?P<path>(?!//).+)$")
_HTTP_USERINFO_RE = re.compile(r"(?P<scheme>https?://)[^/@\s]+@", re.IGNORECASE)


def _split_remote(url: str) -> tuple[str, str, str]:
    """Split a remote URL into (scheme, host, path)."""
    url = url.strip()
    if "://" in url:
        parts = urlsplit(url)
        return parts.scheme.lower(), (parts.hostname or "").lower(), parts.path
    match = _SCP_RE.match(url)
    if match:
        return "ssh", match.group("host").lower(), match.group("path")
    return "file", "", url


def _clean_path(path: str) -> str:
    path = path.strip().strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return path.rstrip("/")


def normalize_remote_url(url: str) -> str:
    """
    Normalize a remote URL to a comparable key.

    Credentials, scheme, user name, port, trailing slashes and the ``.git``
    suffix are dropped, and the host is lower-cased. The scp-like, ssh:// and
    https:// forms of the same repository normalize to the same key.

    Args:
        url: Remote URL in any form git accepts.

    Returns:
        A ``host/path`` key (or the cleaned path for local remotes).
    """
    _scheme, host, path = _split_remote(url)
    path = _clean_path(path)
    if not host:
        return path
    return f"{host}/{path}"


def same_remote(a: str | None, b: str | None) -> bool:
    """Check whether two remote URLs point at the same repository."""
    if not a or not b:
        return False
    return normalize_remote_url(a) == normalize_remote_url(b)


def url_host(url: str) -> str:
    """Lower-cased host of a remote URL ("" for local paths)."""
    return _split_remote(url)[1]


def is_http_url(url: str) -> bool:
    """Check whether git would talk HTTP(S) to this remote."""
    return _split_remote(url)[0] in ("http", "https")


def repo_name_from_url(url: str) -> str:
    """
    Extract the repository name from a remote URL.

    Examples:
        https://github.com/user/my-repo.git -> my-repo
        git@gitlab.com:org/project.git      -> project
    """
    name = url.strip().rstrip("/")
    if name.endswith(".git"):
        name = name[: -len(".git")]
    name = name.rsplit("/", 1)[-1]
    name = name.rsplit(":", 1)[-1]
    return name or "unknown"


def redact(text: str, secrets: Iterable[str] = ()) -> str:
    """
    Remove credentials from text meant for display.

    Strips user-info from http(s) URLs and masks every given secret value.
    """
    if not text:
        return text
    text = _HTTP_USERINFO_RE.sub(lambda m: f"{m.group('scheme')}{MASK}@", text)
    for secret in secrets:
        if secret:
            text = text.replace(secret, MASK)
    return text
