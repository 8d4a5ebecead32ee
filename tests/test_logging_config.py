import logging

import pytest

from flat_ledger_api.app.core.config import Settings
from flat_ledger_api.app.core.logging_config import LEDGER_LOGGER, PACKAGE_LOGGER, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    ledger_logger = logging.getLogger(LEDGER_LOGGER)
    saved = (list(logger.handlers), logger.level, ledger_logger.level)
    for handler in saved[0]:
        logger.removeHandler(handler)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in saved[0]:
        logger.addHandler(handler)
    logger.setLevel(saved[1])
    ledger_logger.setLevel(saved[2])


def test_levels_come_from_settings(package_logger):
    setup_logging(Settings(log_level="warning", ledger_log_level="DEBUG", log_file=""))
    assert package_logger.level == logging.WARNING
    assert logging.getLogger(LEDGER_LOGGER).level == logging.DEBUG
    assert [h.get_name() for h in package_logger.handlers] == ["flat_ledger_console"]


def test_ledger_logger_inherits_without_override(package_logger):
    setup_logging(Settings(log_level="INFO", ledger_log_level="", log_file=""))
    ledger_logger = logging.getLogger(LEDGER_LOGGER)
    assert ledger_logger.level == logging.NOTSET
    assert not ledger_logger.isEnabledFor(logging.DEBUG)
    assert ledger_logger.isEnabledFor(logging.INFO)


def test_unknown_level_falls_back_to_info(package_logger):
    setup_logging(Settings(log_level="chatty", ledger_log_level="", log_file=""))
    assert package_logger.level == logging.INFO


def test_file_handler_and_repeat_calls(package_logger, tmp_path):
    log_file = tmp_path / "ledger.log"
    config = Settings(log_level="INFO", ledger_log_level="", log_file=str(log_file))
    setup_logging(config)
    setup_logging(config)
    names = sorted(h.get_name() for h in package_logger.handlers)
    assert names == ["flat_ledger_console", "flat_ledger_file"]

    logging.getLogger("flat_ledger_api.app.services.flat_service").info("Changed holder of flat 1")
    for handler in package_logger.handlers:
        handler.flush()
    assert "Changed holder of flat 1" in log_file.read_text(encoding="utf-8")
