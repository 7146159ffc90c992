"""Shared logger for the calculator server, client and CLI."""
import logging
import os


LOG_LEVEL_ENV: str = "WEB_CALCULATOR_LOG_LEVEL"
LOG_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def get_logger(name: str = "web_calculator") -> logging.Logger:
    """
    Return the package logger, attaching a stream handler on first use.

    The level is read from the ``WEB_CALCULATOR_LOG_LEVEL`` environment variable
    and falls back to INFO when unset or unknown.

    :param str name: Logger name

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)

    level_name: str = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    log.setLevel(getattr(logging, level_name, logging.INFO))
    return log


logger: logging.Logger = get_logger()
