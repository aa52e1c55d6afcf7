from typing import Literal, Optional

from pydantic import BaseModel


# Fields are optional at the schema level so that a missing value surfaces as
# the service's own 400 message instead of a generic validation error.
class IssueOtpIn(BaseModel):
    email: Optional[str] = None


class VerifyOtpIn(BaseModel):
    email: Optional[str] = None
    otp: Optional[str] = None


class IssueOtpOut(BaseModel):
    message: str
    method: Literal["email", "display"]
    otp: Optional[str] = None   # only for method == "display"


class MessageOut(BaseModel):
    message: str


class ErrorOut(BaseModel):
    error: str


class HealthOut(BaseModel):
    status: str = "OK"
    message: str = "Server is running"
    emailConfigured: bool
    emailConnected: bool
