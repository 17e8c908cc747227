# GitRanger Output Module
# Rich console output

from gitranger.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
