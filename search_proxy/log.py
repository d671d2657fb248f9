import contextvars
import logging
import sys
import time
import uuid
from typing import Optional, Union

from pythonjsonlogger.json import JsonFormatter as _BaseJsonFormatter

from .config import LOG_LEVEL, SERVICE_NAME

request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


class JsonFormatter(_BaseJsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("level", record.levelname)
        log_record.setdefault("ts", int(time.time() * 1000))
        log_record.setdefault("logger", record.name)
        log_record.setdefault("rid", request_id_ctx.get())
        log_record.setdefault("service", SERVICE_NAME)


def setup_logger(name: str = "search_proxy", level: Union[str, int, None] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level or LOG_LEVEL)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
