"""
Logging configuration for the flat ledger.

Handlers are attached to the ``flat_ledger_api`` package logger rather
than the root logger, so uvicorn and the host process keep control of
their own output.  Handlers write records at INFO and above
(``LOG_LEVEL``); the ledger logger, which reports every read and range
scan at DEBUG, can be tuned separately with ``LEDGER_LOG_LEVEL``.
"""

import logging
from pathlib import Path

from .config import Settings, settings

PACKAGE_LOGGER = "flat_ledger_api"
LEDGER_LOGGER = "flat_ledger_api.app.core.ledger"

_CONSOLE_HANDLER = "flat_ledger_console"
_FILE_HANDLER = "flat_ledger_file"


def _parse_level(name: str, fallback: int) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else fallback


def _named_handler(handler: logging.Handler, name: str, formatter: logging.Formatter) -> logging.Handler:
    handler.set_name(name)
    handler.setFormatter(formatter)
    return handler


def setup_logging(config: Settings = settings) -> logging.Logger:
    """Attach handlers to the package logger and apply configured levels.

    Levels are re-applied on every call; handlers are only added once,
    so calling ``create_app`` repeatedly (as tests do) does not
    duplicate output.  Returns the package logger.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(_parse_level(config.log_level, logging.INFO))

    ledger_logger = logging.getLogger(LEDGER_LOGGER)
    if config.ledger_log_level:
        ledger_logger.setLevel(_parse_level(config.ledger_log_level, logging.NOTSET))
    else:
        ledger_logger.setLevel(logging.NOTSET)

    installed = {handler.get_name() for handler in package_logger.handlers}
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if _CONSOLE_HANDLER not in installed:
        package_logger.addHandler(_named_handler(logging.StreamHandler(), _CONSOLE_HANDLER, formatter))
    if config.log_file and _FILE_HANDLER not in installed:
        file_handler = logging.FileHandler(Path(config.log_file).resolve(), encoding="utf-8")
        package_logger.addHandler(_named_handler(file_handler, _FILE_HANDLER, formatter))
    return package_logger
