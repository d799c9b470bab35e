"""Logging configuration for the dashboard and the reference server."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once per process.

    Modules log through ``logging.getLogger("sast.<module>")``; this only
    attaches the stdout handler and sets levels.
    """
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, handlers=[logging.StreamHandler(sys.stdout)])

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sast").setLevel(resolved)

    logging.getLogger("sast.logging_config").debug(f"Logging configured at {level.upper()}")
