"""JSON logging for the Translance API."""
from __future__ import annotations

import logging

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
QUIET_LOGGERS = ("uvicorn.access", "httpx")


def setup_logging(level: str = "INFO", *, service: str | None = None, env: str | None = None) -> None:
    """Send every record to stderr as one JSON object.

    ``service`` and ``env`` are stamped on each line so logs from several
    deployments can share a sink.
    """

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level.upper())

    static_fields = {key: value for key, value in (("service", service), ("env", env)) if value}
    formatter = jsonlogger.JsonFormatter(
        LOG_FORMAT,
        rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        static_fields=static_fields,
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["setup_logging", "get_logger"]
