"""Click-based CLI for git-ranger - keep a workspace of Git repositories in sync."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

import click

from gitranger import __version__
from gitranger.config import get_config_path, load_config, validate_config_file, write_default_config
from gitranger.config.schema import RangerConfig
from gitranger.errors import ConfigError
from gitranger.logger import setup_logging
from gitranger.output import Console, create_console
from gitranger.sync import SyncEngine

EXIT_INTERRUPTED = 130


def _console(ctx: click.Context) -> Console:
    return ctx.obj["console"]


def _load(ctx: click.Context) -> RangerConfig:
    """Load the configuration or exit with status 1."""
    config_path: Optional[Path] = ctx.obj["config_path"]
    try:
        return load_config(config_path)
    except (FileNotFoundError, ConfigError) as e:
        _console(ctx).print_error(str(e))
        ctx.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="git-ranger")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file (default: ./ranger.yaml or $GIT_RANGER_CONFIG)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """git-ranger - Manage and synchronize local Git repositories across providers.

    Declare GitLab groups, GitHub organizations and single repositories in
    ranger.yaml, then run 'git-ranger sync' to clone what is missing and
    fetch what exists.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = create_console(verbose=verbose)
    setup_logging(verbose)


@cli.command()
@click.option(
    "--dir",
    "-d",
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Target directory for the config file",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing configuration")
@click.pass_context
def init(ctx: click.Context, directory: Path, force: bool) -> None:
    """Create a commented ranger.yaml template."""
    console = _console(ctx)
    try:
        config_path = write_default_config(directory, force=force)
    except FileExistsError as e:
        console.print_error(f"{e} (use --force to overwrite)")
        ctx.exit(1)
    except OSError as e:
        console.print_error(f"Failed to write configuration file: {e}")
        ctx.exit(1)

    console.print_success(f"Initialized git-ranger configuration at {config_path}")
    console.print()
    console.print_info("Next steps:")
    console.print("  1. Edit ranger.yaml with your providers and repositories")
    console.print("  2. Run 'git-ranger sync --dry-run' to preview, then 'git-ranger sync'")


@cli.command()
@click.argument("target", required=False)
@click.option("--dry-run", "-n", is_flag=True, help="Preview changes without applying")
@click.option("--jobs", "-j", type=click.IntRange(1, 32), help="Concurrent clone/fetch operations")
@click.pass_context
def sync(ctx: click.Context, target: Optional[str], dry_run: bool, jobs: Optional[int]) -> None:
    """Clone missing repositories and fetch existing ones.

    TARGET limits the run to one group (NAME or PROVIDER:NAME) or one
    repository URL. Without TARGET everything in the configuration is synced.
    """
    console = _console(ctx)
    config = _load(ctx)
    engine = SyncEngine(config)
    cancel_event = threading.Event()

    try:
        report = engine.sync(target, dry_run=dry_run, max_workers=jobs, cancel_event=cancel_event)
    except KeyboardInterrupt:
        console.print_warning("Interrupted: running operations were allowed to finish, queued ones were skipped")
        ctx.exit(EXIT_INTERRUPTED)

    console.print_report(report)
    if report.has_failures:
        ctx.exit(1)


@cli.command()
@click.argument("target", required=False)
@click.pass_context
def status(ctx: click.Context, target: Optional[str]) -> None:
    """Show each repository's local state and the action sync would take."""
    console = _console(ctx)
    config = _load(ctx)
    plan = SyncEngine(config).plan(target)

    console.print_status(plan)
    if not plan.diagnostics and not plan.has_conflicts:
        pending = sum(1 for a in plan.actions if a.is_mutating)
        console.print_success(f"{len(plan.actions)} repositories, {pending} to clone or fetch")


@cli.command("ls")
@click.argument("target", required=False)
@click.pass_context
def list_repos(ctx: click.Context, target: Optional[str]) -> None:
    """List configured repositories with their local paths."""
    config = _load(ctx)
    discovery = SyncEngine(config).list_repos(target)
    _console(ctx).print_repo_list(discovery)


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Validate the configuration file without contacting any provider."""
    console = _console(ctx)
    config_path = ctx.obj["config_path"] or get_config_path()
    is_valid, errors = validate_config_file(config_path)

    if is_valid:
        console.print_success(f"Configuration is valid: {config_path}")
        return

    console.print_error(f"Configuration is invalid: {config_path}")
    for error in errors:
        console.print(f"  - {error}", markup=False)
    ctx.exit(1)


if __name__ == "__main__":
    cli()
