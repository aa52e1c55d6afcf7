from __future__ import annotations
import secrets
from typing import Callable

OTP_MIN = 1000
OTP_MAX = 9999  # exclusive: 9999 itself is never issued


def generate_otp(randbelow: Callable[[int], int] = secrets.randbelow) -> str:
    """Draw a 4-digit code uniformly from [OTP_MIN, OTP_MAX) using a CSPRNG."""
    return str(OTP_MIN + randbelow(OTP_MAX - OTP_MIN))
