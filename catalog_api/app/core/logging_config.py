"""
Logging configuration for the Catalog API.

``setup_logging`` attaches a console handler (and optionally a file
handler) to the root logger exactly once per process, so building several
applications, as the test-suite does, never duplicates output.  Records
carry the id of the HTTP request being served, set by the request-id
middleware through ``request_id_var``; outside a request it is ``-``.
In the ``test`` environment only warnings and errors are emitted.
"""

import logging
from contextvars import ContextVar
from pathlib import Path
from typing import Optional

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(request_id)s): %(message)s"


class RequestIdFilter(logging.Filter):
    """Copy the current request id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def setup_logging(level: str = "INFO", logfile: Optional[str] = None, environment: str = "development") -> None:
    """Configure root logger.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive.  Raised to ``WARNING`` in the ``test`` environment.
    logfile : Optional[str]
        Path to a file to log messages to.  Parent directories are
        created.  If omitted, no file handler is added.
    environment : str
        Deployment environment name from settings.
    """
    logger = logging.getLogger()
    if any(isinstance(f, RequestIdFilter) for h in logger.handlers for f in h.filters):
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if environment == "test":
        numeric_level = max(numeric_level, logging.WARNING)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers = [logging.StreamHandler()]
    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RequestIdFilter())
        logger.addHandler(handler)
