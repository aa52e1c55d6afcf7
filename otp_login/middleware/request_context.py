from __future__ import annotations
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import get_settings
from ..observability.logging import request_id_for, request_id_var

log = logging.getLogger("otp_login.request")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a request id for the duration of the request and writes one access record."""

    async def dispatch(self, request: Request, call_next):
        rid = request_id_for(request)
        token = request_id_var.set(rid)
        start = time.perf_counter()
        fields = {
            "path": request.url.path,
            "method": request.method,
            "client": request.client.host if request.client else "unknown",
        }
        try:
            response = await call_next(request)
        except Exception:
            log.error("unhandled_error", extra={**fields, "ms": int((time.perf_counter() - start) * 1000)})
            raise
        else:
            response.headers[get_settings().REQUEST_ID_HEADER] = rid
            log.info("request", extra={**fields, "status": response.status_code, "ms": int((time.perf_counter() - start) * 1000)})
            return response
        finally:
            request_id_var.reset(token)
