"""Tests for logging setup."""

import logging

import pytest
from rich.logging import RichHandler

from fork_parity.logging_config import ROOT_LOGGER, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_logger():
    logger = logging.getLogger(ROOT_LOGGER)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in saved[0]:
        logger.addHandler(handler)
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


class TestSetupLogging:
    @pytest.mark.parametrize(
        "verbose, quiet, level",
        [
            (False, False, logging.WARNING),
            (True, False, logging.DEBUG),
            (False, True, logging.ERROR),
            (True, True, logging.ERROR),
        ],
    )
    def test_levels(self, verbose, quiet, level):
        assert setup_logging(verbose=verbose, quiet=quiet).level == level

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging()
        logger = setup_logging(verbose=True)
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)
        assert not logger.propagate

    def test_log_file_receives_records(self, tmp_path):
        log_file = tmp_path / "logs" / "parity.log"
        setup_logging(log_file=str(log_file))
        get_logger("tracker").warning("sync failed for %s", "upstream")
        for handler in logging.getLogger(ROOT_LOGGER).handlers:
            handler.flush()
        content = log_file.read_text(encoding="utf-8")
        assert "fork_parity.tracker - WARNING - sync failed for upstream" in content

    def test_http_client_logs_follow_verbosity(self):
        setup_logging()
        assert logging.getLogger("urllib3").level == logging.WARNING
        setup_logging(verbose=True)
        assert logging.getLogger("urllib3").level == logging.DEBUG


class TestGetLogger:
    def test_names_are_namespaced(self):
        assert get_logger().name == ROOT_LOGGER
        assert get_logger("fork_parity.triage.engine").name == "fork_parity.triage.engine"
        assert get_logger("tracker").name == "fork_parity.tracker"
        assert get_logger("fork_parity_extra").name == "fork_parity.fork_parity_extra"
