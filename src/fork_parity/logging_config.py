"""
Logging configuration for Fork Parity.

Records go to stderr through rich so that stdout stays clean for the
``--json`` and report output the commands print. A log file can be added for
unattended runs (a cron-driven ``sync`` or ``notify --check``).
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "fork_parity"

# Libraries whose debug output drowns ours; only shown with --verbose.
NOISY_LOGGERS = ("urllib3", "requests")

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the ``fork_parity`` logger with a rich stderr handler.

    Handlers installed by an earlier call are replaced, so the CLI can be
    invoked repeatedly in one process without duplicating output.

    Args:
        verbose: Enable DEBUG level logging, including webhook HTTP traffic
        quiet: Suppress all but ERROR level logging
        log_file: Optional file to append logs to; parent directories are created

    Returns:
        Configured logger instance for fork_parity
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,  # commit messages and paths may contain [brackets]
            show_time=True,
            show_path=verbose,
        )
    )

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.setLevel(level)
    logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the ``fork_parity`` namespace.

    Args:
        name: Module name (e.g., 'fork_parity.triage.engine'); names outside
              the namespace are nested under it
              If None, returns the root fork_parity logger
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)
