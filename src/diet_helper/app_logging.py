"""Logging configuration helpers."""

import logging

LOGGER_NAME = "diet_helper"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
# Client libraries that log every request at INFO.
CHATTY_LOGGERS = ("httpx", "httpcore", "hpack")


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the package logger and set its level.

    Calling it again only changes the level. Chatty client libraries are held
    at WARNING unless the package itself logs at DEBUG.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    library_level = logging.DEBUG if logger.level <= logging.DEBUG else logging.WARNING
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
