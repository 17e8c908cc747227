# GitRanger Sync Report
# Per-repository outcomes and run-level diagnostics

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from gitranger.sync.actions import ActionType


class Outcome(str, Enum):
    """Result of executing one action."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    DRY_RUN = "dry_run"


class DiagnosticKind(str, Enum):
    """Problems that are not tied to a single executed action."""

    PATH_CONFLICT = "path_conflict"
    PROVIDER_ERROR = "provider_error"
    MISSING_SECRET = "missing_secret"
    SCOPE = "scope"


@dataclass(frozen=True)
class ReportEntry:
    """Outcome of one repository's action."""

    repo_identifier: str
    local_path: str
    url: str
    action: ActionType
    outcome: Outcome
    reason: str = ""


@dataclass(frozen=True)
class Diagnostic:
    """A run-level problem, e.g. a group that could not be listed."""

    kind: DiagnosticKind
    subject: str
    message: str


@dataclass
class SyncReport:
    """
    Result of one sync run.

    Entries arrive from worker threads through add(). Once freeze() is
    called the report is read-only.
    """

    dry_run: bool = False
    entries: list[ReportEntry] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    _frozen: bool = field(default=False, repr=False)

    def add(self, entry: ReportEntry) -> None:
        """Append an entry (thread-safe)."""
        with self._lock:
            self._check_open()
            self.entries.append(entry)

    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        """Append a diagnostic (thread-safe)."""
        with self._lock:
            self._check_open()
            self.diagnostics.append(diagnostic)

    def freeze(self) -> None:
        """Mark the run as complete."""
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_open(self) -> None:
        if self._frozen:
            raise RuntimeError("SyncReport is frozen")

    def _count(self, action: Optional[ActionType] = None, outcome: Optional[Outcome] = None) -> int:
        return sum(
            1
            for e in self.entries
            if (action is None or e.action == action) and (outcome is None or e.outcome == outcome)
        )

    @property
    def total(self) -> int:
        return len(self.entries)

    @property
    def cloned(self) -> int:
        return self._count(ActionType.CLONE, Outcome.SUCCESS)

    @property
    def fetched(self) -> int:
        return self._count(ActionType.FETCH, Outcome.SUCCESS)

    @property
    def skipped(self) -> int:
        """Skipped entries that are not conflicts."""
        return self._count(outcome=Outcome.SKIPPED) - self._count(ActionType.CONFLICT, Outcome.SKIPPED)

    @property
    def conflicts(self) -> int:
        return self._count(action=ActionType.CONFLICT)

    @property
    def failed(self) -> int:
        return self._count(outcome=Outcome.FAILED)

    @property
    def dry_run_count(self) -> int:
        return self._count(outcome=Outcome.DRY_RUN)

    @property
    def has_failures(self) -> bool:
        """True when anything needs the user's attention."""
        return self.failed > 0 or self.conflicts > 0 or bool(self.diagnostics)

    def entries_by_outcome(self, outcome: Outcome) -> list[ReportEntry]:
        return [e for e in self.entries if e.outcome == outcome]

    def sorted_entries(self) -> list[ReportEntry]:
        """Entries ordered by repository identifier for display."""
        return sorted(self.entries, key=lambda e: e.repo_identifier)
