"""Logging setup shared by the CLI, the workers and the API"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Optional, Union

# Carries the id of the HTTP request being served, if any
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(threadName)s] req=%(request_id)s - %(message)s"


class RequestContextFilter(logging.Filter):
    """Inject the current request id into log records"""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.request_id = request_id_var.get() or "-"
        return True


def setup_logger(name: str = "gojobs", level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Configure and return the application logger

    Safe to call more than once: the stream handler is only attached the
    first time, later calls just update the level.

    Args:
        name: Base logger name; every gojobs module logs below it
        level: Logging level name or number

    Returns:
        The configured logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)

    handler = next((h for h in logger.handlers if getattr(h, "_gojobs_handler", False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestContextFilter())
        handler._gojobs_handler = True
        logger.addHandler(handler)
        logger.propagate = False

    handler.setLevel(level)
    return logger


def new_request_id() -> str:
    rid = uuid.uuid4().hex
    request_id_var.set(rid)
    return rid


def clear_request_id() -> None:
    request_id_var.set(None)
