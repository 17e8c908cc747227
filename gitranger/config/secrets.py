# GitRanger Secrets
# SecretString values that may indirect through environment variables

import os
import re
from collections.abc import Mapping
from typing import Optional

from gitranger.errors import MissingEnvironmentVariable
from gitranger.utils.urls import MASK

_REFERENCE_RE = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)\}$")


class SecretString:
    """
    A configuration string that is either a literal or a ${NAME} reference.

    The value is only looked up when resolve() is called, so a configuration
    with unset variables can still be loaded and inspected. The string form
    of a SecretString never contains a literal secret.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: str):
        if not isinstance(raw, str):
            raise TypeError(f"SecretString expects str, got {type(raw).__name__}")
        self._raw = raw

    @property
    def raw(self) -> str:
        """The unresolved value as written in the configuration."""
        return self._raw

    @property
    def variable(self) -> Optional[str]:
        """Environment variable name for a ${NAME} reference, else None."""
        match = _REFERENCE_RE.match(self._raw)
        return match.group(1) if match else None

    @property
    def is_reference(self) -> bool:
        return self.variable is not None

    def resolve(self, environ: Optional[Mapping[str, str]] = None) -> str:
        """
        Resolve to the literal value.

        Args:
            environ: Environment to read from. Defaults to os.environ.

        Returns:
            The literal value.

        Raises:
            MissingEnvironmentVariable: If the referenced variable is unset.
        """
        name = self.variable
        if name is None:
            return self._raw

        env = os.environ if environ is None else environ
        value = env.get(name)
        if value is None:
            raise MissingEnvironmentVariable(name)
        return value

    def display(self) -> str:
        """Printable form: the ${NAME} reference, or a mask for literals."""
        return self._raw if self.is_reference else MASK

    def __str__(self) -> str:
        return self.display()

    def __repr__(self) -> str:
        return f"SecretString({self.display()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretString):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)


def resolve(secret: SecretString) -> str:
    """Resolve a SecretString against the process environment."""
    return secret.resolve()
