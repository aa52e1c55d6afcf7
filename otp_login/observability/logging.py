from __future__ import annotations
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Optional

from pythonjsonlogger import jsonlogger
from fastapi import Request

from ..config import get_settings

# Set per request by RequestContextMiddleware and by OtpService; read by the filter below.
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
identity_var: ContextVar[Optional[str]] = ContextVar("identity", default=None)


class RequestContextFilter(logging.Filter):
    """Stamp the current request id and OTP identity on every record passing through."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()
        if getattr(record, "identity", None) is None:
            record.identity = identity_var.get()
        return True


def setup_logging() -> None:
    settings = get_settings()
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(jsonlogger.JsonFormatter(
        "%(levelname)s %(name)s %(message)s %(asctime)s %(request_id)s %(identity)s"
    ))
    handler.addFilter(RequestContextFilter())
    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL)

    # the middleware already logs one record per request
    logging.getLogger("uvicorn.access").setLevel("WARNING")


def request_id_for(req: Request) -> str:
    """Reuse the caller's request id header when present, otherwise mint one."""
    return req.headers.get(get_settings().REQUEST_ID_HEADER) or uuid.uuid4().hex


def bind_identity(identity: Optional[str]) -> None:
    identity_var.set(identity)
