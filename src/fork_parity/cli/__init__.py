"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="fork-parity",
    help="Fork Parity - track, triage and integrate upstream changes into a fork",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .root import main as _main_callback  # noqa: F401, E402
from .repo import init as _init, sync as _sync, cleanup as _cleanup  # noqa: F401, E402
from .review import status as _status, batch_status as _batch_status  # noqa: F401, E402
from .review import list_commits as _list, actionable as _actionable, plan as _plan  # noqa: F401, E402
from .report import dashboard as _dashboard, export as _export  # noqa: F401, E402
from .analysis import analyze as _analyze, conflicts as _conflicts  # noqa: F401, E402
from .analysis import migration_plan as _migration_plan, learn_adaptation as _learn  # noqa: F401, E402
from .notify import setup_notifications as _setup_notifications, notify as _notify  # noqa: F401, E402


def main() -> None:
    app()
