"""Logging configuration helpers."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the package logger.

    Repeated calls only adjust the level, so app factories used in tests can
    call this freely.
    """
    logger = logging.getLogger("charter_broker")
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    # Request lines from the Resend client are noise at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
