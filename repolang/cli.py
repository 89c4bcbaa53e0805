"""
cli.py - Typer-based CLI for repolang.

Commands:
  stats      --commit REV [--force] [--max-tree-size N]   Language -> weight
  breakdown  --commit REV [--max-tree-size N]             Language -> files
  dump-cache                                              Raw cached record
  clear                                                   Delete the cache
  disable                                                 Freeze the cache

Exit codes: 0 on success, 1 on any error (missing commit, not a git
repository, unknown command, unexpected exception).
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import typer
from rich.console import Console
from rich.markup import escape

from repolang.controller import CacheController, UsageError
from repolang.models import RepoLangConfig
from repolang.output import get_formatter
from repolang.repository import RepositoryError

app = typer.Typer(
    name="repolang",
    help="Incrementally cached language statistics for git repositories.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

DEFAULT_CONFIG_FILE = "repolang_config.json"

repo_option = typer.Option(".", "--repo", "-r", help="Path inside the git repository")
config_option = typer.Option(None, "--config", "-c", help="Path to config JSON")
verbose_option = typer.Option(False, "--verbose", "-v")
humanize_option = typer.Option(
    False,
    "--humanize",
    "-H",
    help="Use human-readable output (tables) instead of JSON",
)
commit_option = typer.Option(None, "--commit", help="Commit to analyse (required)")
max_tree_size_option = typer.Option(
    None,
    "--max-tree-size",
    min=1,
    help="Skip trees with more files than this (overrides config)",
)

# ---------------------------------------------------------------------------
# Configuration helpers
# ---------------------------------------------------------------------------


def _load_config(config_path: Optional[str] = None) -> RepoLangConfig:
    """Load project config from JSON file or return defaults."""
    if config_path and Path(config_path).exists():
        return RepoLangConfig.model_validate_json(Path(config_path).read_text())
    # Check for repolang_config.json in CWD
    default = Path(DEFAULT_CONFIG_FILE)
    if default.exists():
        return RepoLangConfig.model_validate_json(default.read_text())
    return RepoLangConfig()


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


def _open_controller(
    repo: str,
    config: Optional[str],
    verbose: bool,
    max_tree_size: Optional[int] = None,
) -> CacheController:
    _configure_logging(verbose)
    cfg = _load_config(config)
    try:
        return CacheController.open(repo, cfg, max_tree_size=max_tree_size)
    except RepositoryError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# stats command
# ---------------------------------------------------------------------------


@app.command()
def stats(
    commit: Optional[str] = commit_option,
    force: bool = typer.Option(False, "--force", "-f", help="Ignore the cache and rescan every file"),
    max_tree_size: Optional[int] = max_tree_size_option,
    repo: str = repo_option,
    config: Optional[str] = config_option,
    verbose: bool = verbose_option,
    humanize: bool = humanize_option,
) -> None:
    """Print the language composition of COMMIT."""
    ctl = _open_controller(repo, config, verbose, max_tree_size)
    try:
        result = ctl.compute(commit, incremental=not force)
    except (UsageError, RepositoryError) as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)

    get_formatter(humanize).format_stats(result)


# ---------------------------------------------------------------------------
# breakdown command
# ---------------------------------------------------------------------------


@app.command()
def breakdown(
    commit: Optional[str] = commit_option,
    max_tree_size: Optional[int] = max_tree_size_option,
    repo: str = repo_option,
    config: Optional[str] = config_option,
    verbose: bool = verbose_option,
    humanize: bool = humanize_option,
) -> None:
    """Print which files of COMMIT were counted for each language."""
    ctl = _open_controller(repo, config, verbose, max_tree_size)
    try:
        result = ctl.breakdown(commit)
    except (UsageError, RepositoryError) as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)

    get_formatter(humanize).format_breakdown(result)


# ---------------------------------------------------------------------------
# cache maintenance commands
# ---------------------------------------------------------------------------


@app.command("dump-cache")
def dump_cache(
    repo: str = repo_option,
    config: Optional[str] = config_option,
    verbose: bool = verbose_option,
    humanize: bool = humanize_option,
) -> None:
    """Print the cached record (version, commit, stats) without computing."""
    ctl = _open_controller(repo, config, verbose)
    get_formatter(humanize).format_record(ctl.dump())


@app.command()
def clear(
    repo: str = repo_option,
    config: Optional[str] = config_option,
    verbose: bool = verbose_option,
) -> None:
    """Delete the cache; the next stats run rescans every file."""
    ctl = _open_controller(repo, config, verbose)
    if ctl.clear():
        console.print(f"[green]Removed {ctl.store.path}[/green]")
    else:
        console.print("[yellow]No cache to remove.[/yellow]")


@app.command()
def disable(
    repo: str = repo_option,
    config: Optional[str] = config_option,
    verbose: bool = verbose_option,
) -> None:
    """Freeze the cache so stats always returns the frozen (empty) result."""
    ctl = _open_controller(repo, config, verbose)
    if not ctl.disable():
        err_console.print(f"[red]Could not write {ctl.store.path}[/red]")
        raise typer.Exit(1)
    console.print("[green]Language stats disabled until the cache is cleared.[/green]")


# ---------------------------------------------------------------------------
# Process entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Console-script entry point; maps every failure to exit code 1."""
    try:
        rv = app(standalone_mode=False)
    except click.ClickException as exc:
        # unknown command, missing/bad option value
        exc.show()
        sys.exit(1)
    except click.Abort:
        err_console.print("Aborted!")
        sys.exit(1)
    except Exception as exc:
        err_console.print(f"[red]Error: {escape(str(exc))}[/red]")
        err_console.print_exception()
        sys.exit(1)
    sys.exit(rv if isinstance(rv, int) else 0)


if __name__ == "__main__":
    main()
