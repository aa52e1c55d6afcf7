from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from ..domain.errors import DeliveryFailure
from ..observability.metrics import DELIVERY_DEGRADED
from .mailer import MailTransport, render_otp_email

logger = logging.getLogger(__name__)


class GateState(str, enum.Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"


class DeliveryMethod(str, enum.Enum):
    EMAIL = "email"
    DISPLAY = "display"


@dataclass(frozen=True)
class Delivery:
    method: DeliveryMethod
    code: Optional[str] = None  # only set for DISPLAY


class DeliveryGate:
    """
    Routes a code to email while the mail channel is healthy, otherwise back to the caller.

    HEALTHY -> DEGRADED happens on a failed startup probe or on any live send
    failure. There is no way back to HEALTHY without a restart.
    """

    def __init__(
        self,
        transport: MailTransport,
        *,
        probe_timeout: float = 5.0,
        send_timeout: float = 10.0,
        ttl_seconds: int = 5 * 60,
    ) -> None:
        self._transport = transport
        self._probe_timeout = probe_timeout
        self._send_timeout = send_timeout
        self._ttl_seconds = ttl_seconds
        self._state = GateState.DEGRADED

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def healthy(self) -> bool:
        return self._state is GateState.HEALTHY

    async def probe(self) -> GateState:
        """Startup connectivity check; never raises."""
        if not self._transport.configured:
            logger.warning("Email credentials missing; OTPs will be displayed on screen instead")
            self._state = GateState.DEGRADED
            return self._state
        try:
            await asyncio.wait_for(self._transport.verify(), timeout=self._probe_timeout)
        except asyncio.TimeoutError:
            logger.warning("Email connection failed: timed out after %ss; OTPs will be displayed on screen instead", self._probe_timeout)
            self._state = GateState.DEGRADED
        except DeliveryFailure as exc:
            logger.warning("Email connection failed: %s; OTPs will be displayed on screen instead", exc)
            self._state = GateState.DEGRADED
        else:
            logger.info("Email server is ready to send messages")
            self._state = GateState.HEALTHY
        return self._state

    def _degrade(self, reason: str) -> None:
        if self._state is GateState.HEALTHY:
            DELIVERY_DEGRADED.inc()
        self._state = GateState.DEGRADED
        logger.warning("Email delivery failed (%s); falling back to screen display", reason)

    async def deliver(self, identity: str, code: str) -> Delivery:
        if self._state is GateState.DEGRADED:
            return Delivery(method=DeliveryMethod.DISPLAY, code=code)

        message = render_otp_email(identity, code, self._ttl_seconds)
        try:
            await asyncio.wait_for(self._transport.send(message), timeout=self._send_timeout)
        except asyncio.TimeoutError:
            self._degrade(f"send timed out after {self._send_timeout}s")
        except DeliveryFailure as exc:
            self._degrade(str(exc))
        else:
            return Delivery(method=DeliveryMethod.EMAIL)
        return Delivery(method=DeliveryMethod.DISPLAY, code=code)
