from __future__ import annotations
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..domain.errors import OtpError

logger = logging.getLogger(__name__)


async def otp_error_handler(request: Request, exc: OtpError) -> JSONResponse:
    """Domain errors are returned as ``{"error": message}`` with their status code."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # only location and error type; the raw input may carry the email or code
    problems = [(".".join(str(p) for p in err.get("loc", ())), err.get("type")) for err in exc.errors()]
    logger.info("Rejected malformed request to %s: %s", request.url.path, problems)
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OtpError, otp_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
