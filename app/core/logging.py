# app/core/logging.py
import json
import logging
from logging import Logger
from typing import Any, Dict, Optional
from contextvars import ContextVar

from .config import settings


# Contexto por request / usuario, lo llenan el middleware y dependencies_auth
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


# Atributos estándar de LogRecord que no queremos repetir en el JSON
_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}


class JsonFormatter(logging.Formatter):
    """
    Formatea los logs como JSON estructurado.

    Respeta los campos que se pasen en `logger.info(..., extra={...})`:
    - operation
    - resource
    - book_id, user_id, old_status, new_status, etc.
    """

    def format(self, record: logging.LogRecord) -> str:
        log: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log:
                log[key] = value

        # request_id y user_id desde el contexto, si el extra no los trae
        req_id = request_id_ctx.get()
        if req_id is not None and "request_id" not in log:
            log["request_id"] = req_id

        uid = user_id_ctx.get()
        if uid is not None and "user_id" not in log:
            log["user_id"] = uid

        if record.exc_info:
            log["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log, ensure_ascii=False, default=str)


def configure_logging() -> None:
    """
    Configura el logging global de la app para usar JSON estructurado.

    Se llama al importar app.main y otra vez en el startup.
    """
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL.upper())

    # Solo reemplazamos nuestro propio handler; los de pytest (caplog) se respetan
    for h in list(root.handlers):
        if getattr(h, "_peer_reads", False):
            root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    handler._peer_reads = True
    root.addHandler(handler)


def get_logger(name: str) -> Logger:
    """
    Helper para obtener loggers en el código.
    Ejemplo:
        logger = get_logger("api.books")
    """
    return logging.getLogger(name)
