from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ...domain.errors import OtpError
from ...domain.schemas.otp import ErrorOut, IssueOtpIn, IssueOtpOut, MessageOut, VerifyOtpIn
from ...services.delivery_gate import DeliveryMethod
from ...services.otp_service import OtpService
from ..deps import get_otp_service

router = APIRouter(tags=["otp"])
logger = logging.getLogger(__name__)

_ERRORS = {400: {"model": ErrorOut}, 500: {"model": ErrorOut}}


async def send_otp(payload: IssueOtpIn, svc: OtpService = Depends(get_otp_service)):
    try:
        result = await svc.issue(payload.email)
    except OtpError:
        raise
    except Exception:
        logger.exception("Error in send-otp")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to process OTP request"},
        )

    if result.method is DeliveryMethod.EMAIL:
        return IssueOtpOut(message="OTP sent successfully to your email", method="email")
    return IssueOtpOut(message="OTP generated successfully", method="display", otp=result.code)


# /issue-otp is kept as an alias of /send-otp
for _path in ("/send-otp", "/issue-otp"):
    router.add_api_route(
        _path,
        send_otp,
        methods=["POST"],
        response_model=IssueOtpOut,
        response_model_exclude_none=True,
        responses=_ERRORS,
    )


@router.post("/verify-otp", response_model=MessageOut, responses=_ERRORS)
async def verify_otp(payload: VerifyOtpIn, svc: OtpService = Depends(get_otp_service)):
    svc.verify(payload.email, payload.otp)
    return MessageOut(message="OTP verified successfully")
