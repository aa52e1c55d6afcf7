from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .api.errors import register_exception_handlers
from .api.routers import health as health_router
from .api.routers import metrics as metrics_router
from .api.routers import otp as otp_router
from .middleware.request_context import RequestContextMiddleware
from .observability.logging import setup_logging
from .observability.metrics import MetricsHTTPMiddleware
from .services.delivery_gate import DeliveryGate
from .services.mailer import SmtpMailer
from .services.otp_service import OtpService
from .services.otp_store import OtpStore

settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


def build_otp_service() -> OtpService:
    mailer = SmtpMailer.from_settings(settings)
    gate = DeliveryGate(
        mailer,
        probe_timeout=settings.EMAIL_PROBE_TIMEOUT_SEC,
        send_timeout=settings.EMAIL_SEND_TIMEOUT_SEC,
        ttl_seconds=settings.OTP_TTL_SECONDS,
    )
    return OtpService(OtpStore(), gate, ttl_seconds=settings.OTP_TTL_SECONDS)


def create_app(otp_service: Optional[OtpService] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.EMAIL_USER:
            logger.warning("EMAIL_USER not set; email delivery disabled")
        if not settings.EMAIL_PASS:
            logger.warning("EMAIL_PASS not set; email delivery disabled")
        await app.state.otp_service.gate.probe()
        logger.info("%s started", settings.APP_NAME)
        yield

    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)
    app.state.otp_service = otp_service or build_otp_service()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(MetricsHTTPMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router.router)
    app.include_router(otp_router.router)
    app.include_router(metrics_router.router)

    return app


app = create_app()


def run() -> None:
    uvicorn.run("otp_login.main:app", host=settings.APP_HOST, port=settings.APP_PORT)


if __name__ == "__main__":
    run()
