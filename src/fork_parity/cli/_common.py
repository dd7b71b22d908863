"""Shared CLI helpers."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, NoReturn, Optional

import typer
from rich.console import Console

from ..config import ParityConfig, load_config
from ..exceptions import ForkParityError
from ..logging_config import get_logger
from ..models import Priority
from ..tracker import ParityTracker

console = Console()
logger = get_logger(__name__)

_PRIORITY_COLORS = {
    Priority.CRITICAL: "red bold",
    Priority.HIGH: "red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "green",
}


def fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def priority_label(priority: Priority) -> str:
    color = _PRIORITY_COLORS[priority]
    return f"[{color}]{priority.value}[/{color}]"


def resolve_config(config: Optional[Path] = None) -> ParityConfig:
    """Build config from CLI options, rendering config errors as CLI failures."""
    try:
        return load_config(config_file=config)
    except ForkParityError as e:
        fail(str(e))


def project_path(ctx: typer.Context) -> Path:
    obj = ctx.obj or {}
    return Path(obj.get("path") or Path.cwd()).resolve()


@contextmanager
def open_tracker(ctx: typer.Context) -> Iterator[ParityTracker]:
    """Yield a tracker for the selected project; tool errors exit with status 1."""
    obj = ctx.obj or {}
    config = obj.get("config") or ParityConfig()
    try:
        with ParityTracker(project_path(ctx), config) as tracker:
            yield tracker
    except ForkParityError as e:
        logger.debug("%s: %s", e.__class__.__name__, e)
        fail(e.message)
    except ValueError as e:
        fail(str(e))
