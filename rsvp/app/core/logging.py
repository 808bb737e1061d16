"""Logging setup.

Module loggers (`logging.getLogger(__name__)`) go to stderr once
`configure_logging` ran. Audit lines (mutations, store failures,
compensations) additionally go to `{LOG_PATH}/{filename}` through the
`rsvp.audit` logger returned by `get_logs_writer_logger`.
"""
import logging
import os
from logging import DEBUG, INFO, FileHandler, Formatter, getLogger

from rsvp.app.core.config import settings

AUDIT_LOGGER_NAME = "rsvp.audit"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(debug: bool = settings.DEBUG) -> None:
    logging.basicConfig(level=DEBUG if debug else INFO, format=LOG_FORMAT)


def get_logs_writer_logger(logging_dir=settings.LOG_PATH, filename='logs.log'):
    logger = getLogger(AUDIT_LOGGER_NAME)
    # one handler per process, whoever asks first decides the file
    if logger.handlers:
        return logger

    os.makedirs(logging_dir, exist_ok=True)
    logger.setLevel(INFO)
    logger.propagate = False

    handler = FileHandler(os.path.join(logging_dir, filename), mode="a", encoding="utf-8", delay=True)
    handler.setFormatter(Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)

    return logger
