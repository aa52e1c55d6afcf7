from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..domain.errors import OtpExpired, OtpMismatch, OtpNotFound, ValidationError
from ..observability.logging import bind_identity
from ..observability.metrics import OTP_ISSUED, OTP_VERIFY
from .delivery_gate import DeliveryGate, DeliveryMethod
from .otp_generator import generate_otp
from .otp_store import OtpStore

logger = logging.getLogger(__name__)

OTP_TTL_SECONDS = 5 * 60


@dataclass(frozen=True)
class IssueResult:
    method: DeliveryMethod
    code: Optional[str] = None  # present only when the code must be shown on screen


class OtpService:
    def __init__(
        self,
        store: OtpStore,
        gate: DeliveryGate,
        *,
        ttl_seconds: int = OTP_TTL_SECONDS,
        generator: Callable[[], str] = generate_otp,
    ) -> None:
        self.store = store
        self.gate = gate
        self._ttl_seconds = ttl_seconds
        self._generate = generator

    async def issue(self, email: Optional[str]) -> IssueResult:
        """
        Generate a code for ``email``, store it for the TTL and hand it to the gate.

        Any code previously outstanding for the same email is replaced.
        """
        if not email:
            raise ValidationError("Email is required")
        bind_identity(email)

        code = self._generate()
        self.store.put(email, code, self._ttl_seconds)
        logger.debug("Generated OTP for %s: %s", email, code)

        delivery = await self.gate.deliver(email, code)
        OTP_ISSUED.labels(method=delivery.method.value).inc()
        logger.info("OTP issued for %s via %s", email, delivery.method.value)
        return IssueResult(method=delivery.method, code=delivery.code)

    def verify(self, email: Optional[str], code: Optional[str]) -> None:
        """
        Check existence, then expiry, then match. Raises an OtpError subclass on failure.

        Expired and accepted records are removed; a mismatch leaves the record
        in place so the user can retry inside the window.
        """
        if not email or not code:
            raise ValidationError("Email and OTP are required")
        bind_identity(email)

        record = self.store.get(email)
        if record is None:
            OTP_VERIFY.labels(outcome="not_found").inc()
            raise OtpNotFound()

        if record.is_expired(self.store.now()):
            self.store.delete(email)
            OTP_VERIFY.labels(outcome="expired").inc()
            raise OtpExpired()

        if not hmac.compare_digest(record.code.encode(), code.encode()):
            OTP_VERIFY.labels(outcome="mismatch").inc()
            raise OtpMismatch()

        self.store.consume(email)
        OTP_VERIFY.labels(outcome="verified").inc()
        logger.info("OTP verified for %s", email)
