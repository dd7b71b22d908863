"""Global options shared by every command."""

from pathlib import Path
from typing import Optional

import typer

from ..logging_config import setup_logging
from . import app
from ._common import console, resolve_config


@app.callback(invoke_without_command=True, no_args_is_help=False)
def main(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(
        None,
        "-C",
        "--path",
        help="Fork checkout to operate on (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also append logs to this file",
        envvar="FORK_PARITY_LOG_FILE",
        dir_okay=False,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Track upstream commits, triage them and plan their integration.

    [bold cyan]Examples:[/bold cyan]

      fork-parity init --upstream-url https://github.com/org/project.git

      fork-parity sync

      fork-parity dashboard --format markdown

      fork-parity -C /path/to/fork actionable --min-priority high
    """
    if version:
        from .. import __version__

        console.print(f"[bold cyan]Fork Parity[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    setup_logging(verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None)

    ctx.ensure_object(dict)
    ctx.obj["path"] = Path(path) if path else Path.cwd()
    ctx.obj["config"] = resolve_config(config)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)
