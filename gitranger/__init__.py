"""git-ranger - keep a local workspace of Git repositories converged.

Declares GitLab groups (with nested subgroups), GitHub organizations and
standalone repository URLs, and clones or fetches them into a directory tree
in a single pull-based pass.
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "RangerConfig",
    "load_config",
    "SyncEngine",
    "SyncReport",
    "DesiredRepo",
    "ActionType",
    "Outcome",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("RangerConfig", "load_config"):
        from gitranger import config

        return getattr(config, name)
    if name in ("SyncEngine", "SyncReport", "DesiredRepo", "ActionType", "Outcome"):
        from gitranger import sync

        return getattr(sync, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
