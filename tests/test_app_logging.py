"""Tests for logging configuration."""

import logging

from ask4rent.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("ask4rent")
    logger.handlers.clear()

    configure_logging()
    configure_logging("debug")

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert not logger.propagate


def test_module_loggers_inherit_package_level() -> None:
    configure_logging(logging.WARNING)

    child = logging.getLogger("ask4rent.services.sessions")

    assert not child.isEnabledFor(logging.INFO)
    assert child.isEnabledFor(logging.WARNING)
