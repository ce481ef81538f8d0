"""Log level control for the ``skyflow_vault`` logger tree."""

from __future__ import annotations

import logging

LOGGER_NAME = "skyflow_vault"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "OFF": logging.CRITICAL + 1,
}


def set_log_level(level: str) -> logging.Logger:
    """Set the library log level and make sure output goes somewhere.

    A single stream handler is attached the first time this is called, and
    records stop propagating to the root logger so they are not printed twice.
    """
    try:
        numeric = _LEVELS[level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level {level!r}; expected one of {sorted(_LEVELS)}") from None

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(handler)
        logger.propagate = False
    return logger
