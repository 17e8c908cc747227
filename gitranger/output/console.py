# GitRanger Console Output
# Rich-based rendering of sync reports, status and repository lists

from collections.abc import Iterable

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from gitranger.sync.actions import ActionType
from gitranger.sync.discovery import DiscoveryResult
from gitranger.sync.engine import SyncPlan
from gitranger.sync.report import Diagnostic, Outcome, SyncReport
from gitranger.sync.state import LocalState
from gitranger.utils.urls import redact

_OUTCOME_STYLES = {
    Outcome.SUCCESS: "[green]✓[/green]",
    Outcome.FAILED: "[red]✗[/red]",
    Outcome.SKIPPED: "[dim]○[/dim]",
    Outcome.DRY_RUN: "[cyan]~[/cyan]",
}

_STATE_LABELS = {
    LocalState.ABSENT: "[yellow]missing[/yellow]",
    LocalState.EMPTY_DIR: "[yellow]empty dir[/yellow]",
    LocalState.GIT_REPO: "[green]cloned[/green]",
    LocalState.GIT_REPO_MISMATCH: "[red]other remote[/red]",
    LocalState.NON_EMPTY_NON_GIT: "[red]not a repo[/red]",
}

_ACTION_LABELS = {
    ActionType.CLONE: "[cyan]clone[/cyan]",
    ActionType.FETCH: "[blue]fetch[/blue]",
    ActionType.SKIP: "[dim]skip[/dim]",
    ActionType.CONFLICT: "[red]conflict[/red]",
}


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for sync, status and ls.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Also list successful and skipped repositories.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(no_color=not colored, highlight=False)

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{escape(message)}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{escape(message)}[/blue]")

    def print_diagnostics(self, diagnostics: Iterable[Diagnostic]) -> None:
        """Print run-level problems (groups that failed, path conflicts, scope)."""
        for diagnostic in diagnostics:
            label = diagnostic.kind.value.replace("_", " ")
            subject = escape(diagnostic.subject)
            self._console.print(f"[red]![/red] [bold]{subject}[/bold] ({label}): {escape(diagnostic.message)}")

    def print_report(self, report: SyncReport) -> None:
        """
        Print a sync report: per-repository lines and a summary panel.

        Failures and conflicts are always listed; other entries only when
        verbose or in a dry run.
        """
        self._console.print()

        for entry in report.sorted_entries():
            notable = entry.outcome == Outcome.FAILED or entry.action == ActionType.CONFLICT
            if not (notable or self.verbose or report.dry_run):
                continue
            icon = _OUTCOME_STYLES[entry.outcome]
            if entry.action == ActionType.CONFLICT:
                icon = "[yellow]![/yellow]"
            line = f"{icon} [bold]{escape(entry.repo_identifier)}[/bold] {entry.action.value}"
            if entry.reason:
                line += f" [dim]- {escape(entry.reason)}[/dim]"
            self._console.print(line)

        if report.diagnostics:
            self._console.print()
            self.print_diagnostics(report.diagnostics)

        self._console.print()

        if report.dry_run:
            clones = sum(1 for e in report.entries if e.outcome == Outcome.DRY_RUN and e.action == ActionType.CLONE)
            fetches = report.dry_run_count - clones
            body = f"[cyan]Dry run completed[/cyan]\nRepositories: {clones} would clone, {fetches} would fetch"
        else:
            status = "[red]Sync completed with problems[/red]" if report.has_failures else "[green]Sync completed[/green]"
            body = f"{status}\nRepositories: {report.cloned} cloned, {report.fetched} fetched"

        body += (
            f", {report.skipped} skipped, {report.conflicts} conflicts, {report.failed} failed"
            f"\nDiagnostics: {len(report.diagnostics)}"
        )

        border = "red" if report.has_failures else ("cyan" if report.dry_run else "green")
        self._console.print(Panel(body, title="Summary", border_style=border))

    def print_status(self, plan: SyncPlan) -> None:
        """Print each desired repository with its local state and planned action."""
        if not plan.actions:
            self._console.print("[dim]No repositories to display[/dim]")
        else:
            table = Table(show_header=True, header_style="bold")
            table.add_column("Repository", style="cyan")
            table.add_column("Local state")
            table.add_column("Action")
            table.add_column("Reason", style="dim")

            for action in plan.actions:
                state = plan.states[action.repo.local_path]
                table.add_row(
                    escape(action.repo.identifier),
                    _STATE_LABELS[state.state],
                    _ACTION_LABELS[action.action_type],
                    escape(action.reason),
                )
            self._console.print(table)

        if plan.diagnostics:
            self._console.print()
            self.print_diagnostics(plan.diagnostics)

    def print_repo_list(self, discovery: DiscoveryResult) -> None:
        """Print desired repositories with their source, URL and local path."""
        if not discovery.repos:
            self._console.print("[dim]No repositories configured[/dim]")
        else:
            table = Table(show_header=True, header_style="bold")
            table.add_column("Repository", style="cyan")
            table.add_column("Source")
            table.add_column("URL", style="dim")
            if self.verbose:
                table.add_column("Local path", style="dim")

            for repo in discovery.repos:
                source = f"{repo.source}:{repo.group}" if repo.group else repo.source
                row = [escape(repo.identifier), escape(source), escape(redact(repo.canonical_url))]
                if self.verbose:
                    row.append(str(repo.local_path))
                table.add_row(*row)
            self._console.print(table)
            self._console.print(f"[dim]{len(discovery.repos)} repositories[/dim]")

        if discovery.diagnostics:
            self._console.print()
            self.print_diagnostics(discovery.diagnostics)


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
