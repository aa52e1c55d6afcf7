from __future__ import annotations
from fastapi import Request

from ..services.delivery_gate import DeliveryGate
from ..services.otp_service import OtpService


def get_otp_service(request: Request) -> OtpService:
    return request.app.state.otp_service


def get_delivery_gate(request: Request) -> DeliveryGate:
    return request.app.state.otp_service.gate
