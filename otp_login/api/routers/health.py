from fastapi import APIRouter, Depends

from ...config import get_settings
from ...domain.schemas.otp import HealthOut
from ...services.delivery_gate import DeliveryGate
from ..deps import get_delivery_gate

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthOut)
async def health(gate: DeliveryGate = Depends(get_delivery_gate)):
    return HealthOut(
        emailConfigured=get_settings().email_configured,
        emailConnected=gate.healthy,
    )

