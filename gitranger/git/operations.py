# GitRanger Git Operations
# Non-interactive clone/fetch/inspect through the git command line

import base64
import os
import subprocess
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from gitranger.utils.urls import is_http_url, redact

DEFAULT_AUTH_USERNAME = "git"


class GitError(Exception):
    """Exception raised for git operation errors."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = ""):
        self.message = message
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)

    def __str__(self) -> str:
        if self.stderr:
            return f"{self.message}: {self.stderr}"
        return self.message


def _run_git(
    *args: str,
    cwd: Optional[Path] = None,
    check: bool = True,
    env: Optional[Mapping[str, str]] = None,
    secrets: Iterable[str] = (),
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command without ever prompting for input.

    Args:
        *args: Git command arguments.
        cwd: Working directory.
        check: Whether to raise on non-zero exit.
        env: Extra environment variables for this invocation.
        secrets: Values to mask in error text.

    Returns:
        CompletedProcess with result.

    Raises:
        GitError: If command fails and check is True.
    """
    cmd = ["git", *args]
    run_env = {**os.environ, "GIT_TERMINAL_PROMPT": "0", **(env or {})}
    secrets = list(secrets)
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
            env=run_env,
            stdin=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        raise GitError("git command not found. Is git installed?") from None

    if check and result.returncode != 0:
        raise GitError(
            redact(f"Git command failed: {' '.join(cmd)}", secrets),
            returncode=result.returncode,
            stderr=redact(result.stderr.strip(), secrets) if result.stderr else "",
        )
    return result


def header_scope(url: str) -> str:
    """
    The ``http.<url>`` config prefix that confines a header to url's server.

    Git only applies a URL-scoped ``http.*`` setting to requests whose
    scheme, host and port match, so other remotes never see the header.
    """
    parts = urlsplit(url.strip())
    host = (parts.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    return f"{parts.scheme.lower()}://{host}/"


def auth_env(url: str, token: Optional[str], username: Optional[str] = None) -> tuple[dict[str, str], list[str]]:
    """
    Build the environment that hands a token to git for one command.

    The token travels as an ``http.<url>.extraHeader`` injected through
    GIT_CONFIG_COUNT/KEY/VALUE, so it never shows up in argv, in the remote
    URL or in ``.git/config``. The header is scoped to url's scheme, host and
    port. Only HTTP(S) remotes get a header.

    Returns:
        Tuple of (extra environment, values to redact).
    """
    if not token or not is_http_url(url):
        return {}, []

    credentials = f"{username or DEFAULT_AUTH_USERNAME}:{token}"
    encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")

    index = int(os.environ.get("GIT_CONFIG_COUNT", "0") or 0)
    env = {
        "GIT_CONFIG_COUNT": str(index + 1),
        f"GIT_CONFIG_KEY_{index}": f"http.{header_scope(url)}.extraHeader",
        f"GIT_CONFIG_VALUE_{index}": f"Authorization: Basic {encoded}",
    }
    return env, [token, encoded]


def is_git_dir(path: Path) -> bool:
    """Check if path holds git metadata (a .git directory or gitdir file)."""
    return (path / ".git").exists()


def get_remote_url(path: Path, remote: str = "origin") -> Optional[str]:
    """
    Read a remote's configured URL.

    Lookup is confined to the repository at path; a parent repository's
    config is never consulted.

    Args:
        path: Working copy root.
        remote: Remote name.

    Returns:
        The URL, or None if the remote is not configured.

    Raises:
        GitError: If git cannot read the repository.
    """
    result = _run_git(
        "config",
        "--get",
        f"remote.{remote}.url",
        cwd=path,
        check=False,
        env={"GIT_CEILING_DIRECTORIES": str(path.parent)},
    )
    if result.returncode == 0:
        return result.stdout.strip() or None
    if result.returncode == 1:
        return None
    raise GitError(
        f"Cannot read git config in {path}",
        returncode=result.returncode,
        stderr=redact(result.stderr.strip()) if result.stderr else "",
    )


def clone(url: str, destination: Path, token: Optional[str] = None, username: Optional[str] = None) -> None:
    """
    Clone url into destination.

    Args:
        url: Remote URL (stored unchanged as origin).
        destination: Target directory (absent or empty).
        token: Optional token for HTTPS remotes.
        username: User name paired with the token.

    Raises:
        GitError: If the clone fails.
    """
    env, secrets = auth_env(url, token, username)
    _run_git("clone", "--", url, str(destination), env=env, secrets=secrets)


def fetch(path: Path, token: Optional[str] = None, username: Optional[str] = None) -> None:
    """
    Fetch all remotes of an existing working copy and prune stale refs.

    Never merges and never touches the working tree. A token is sent only
    to the server that hosts origin; other remotes are fetched without it.

    Raises:
        GitError: If the fetch fails.
    """
    env: dict[str, str] = {}
    secrets: list[str] = []
    if token:
        url = get_remote_url(path)
        if url:
            env, secrets = auth_env(url, token, username)
    _run_git("fetch", "--all", "--prune", cwd=path, env=env, secrets=secrets)


class GitClient:
    """
    The git capability used by the scanner and executor.

    Thin object wrapper around the module functions so callers can inject a
    fake in tests.
    """

    def clone(self, url: str, destination: Path, token: Optional[str] = None, username: Optional[str] = None) -> None:
        clone(url, destination, token=token, username=username)

    def fetch(self, path: Path, token: Optional[str] = None, username: Optional[str] = None) -> None:
        fetch(path, token=token, username=username)

    def get_remote_url(self, path: Path, remote: str = "origin") -> Optional[str]:
        return get_remote_url(path, remote)

    def is_git_dir(self, path: Path) -> bool:
        return is_git_dir(path)
