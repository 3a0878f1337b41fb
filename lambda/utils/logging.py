"""Request-aware logging helpers shared by the Lambda modules."""

import logging as _logging
import os
import sys
import uuid
from contextvars import ContextVar

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(request_id)s] %(name)s: %(message)s"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

_request_id: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(_logging.Filter):
    def filter(self, record):
        record.request_id = _request_id.get()
        return True


def _build_logger() -> _logging.Logger:
    log = _logging.getLogger("linguavault")
    log.setLevel(LOG_LEVEL)
    if not log.handlers:
        handler = _logging.StreamHandler(sys.stdout)
        handler.setFormatter(_logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestIdFilter())
        log.addHandler(handler)
    log.propagate = False
    return log


logger = _build_logger()


def set_request_id(request_id: str = None) -> str:
    request_id = request_id or str(uuid.uuid4())
    _request_id.set(request_id)
    return request_id


def get_request_id() -> str:
    return _request_id.get()


def clear_request_id():
    _request_id.set("-")


def debug(msg, *args, **kwargs):
    logger.debug(msg, *args, **kwargs)


def info(msg, *args, **kwargs):
    logger.info(msg, *args, **kwargs)


def warning(msg, *args, **kwargs):
    logger.warning(msg, *args, **kwargs)


def error(msg, *args, **kwargs):
    logger.error(msg, *args, **kwargs)


def exception(msg, *args, **kwargs):
    logger.exception(msg, *args, **kwargs)
