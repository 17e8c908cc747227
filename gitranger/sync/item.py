# GitRanger Sync Item
# A repository the workspace should contain, after discovery

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from gitranger.config.schema import ProviderKind
from gitranger.config.secrets import SecretString, resolve
from gitranger.utils.paths import get_relative_path

STANDALONE_SOURCE = "repos"


@dataclass(frozen=True)
class DesiredRepo:
    """
    One repository that should exist at a local path.

    Produced by discovery from a group listing or a standalone entry.
    The token stays unresolved until a git operation needs it.
    """

    canonical_url: str
    local_path: Path
    provider_kind: Optional[ProviderKind] = None
    token: Optional[SecretString] = None
    source: str = STANDALONE_SOURCE
    group: Optional[str] = None
    auth_username: Optional[str] = None
    workspace_root: Optional[Path] = field(default=None, compare=False)

    @property
    def is_standalone(self) -> bool:
        return self.group is None

    @property
    def identifier(self) -> str:
        """Display name: the path relative to the workspace root when possible."""
        if self.workspace_root is not None:
            relative = get_relative_path(self.local_path, self.workspace_root)
            if relative is not None and str(relative) != ".":
                return relative.as_posix()
        return str(self.local_path)

    def resolved_token(self) -> Optional[str]:
        """
        Resolve the token for a git operation.

        Returns:
            The literal token, or None if the repo has no token.

        Raises:
            MissingEnvironmentVariable: If the token references an unset variable.
        """
        if self.token is None:
            return None
        return resolve(self.token)
