from __future__ import annotations


class OtpError(ValueError):
    """Client-facing failure; the message is returned verbatim as ``{"error": ...}``."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OtpError):
    pass


class OtpNotFound(OtpError):
    def __init__(self, message: str = "OTP not found or expired"):
        super().__init__(message)


class OtpExpired(OtpError):
    def __init__(self, message: str = "OTP has expired"):
        super().__init__(message)


class OtpMismatch(OtpError):
    def __init__(self, message: str = "Invalid OTP"):
        super().__init__(message)


class DeliveryFailure(Exception):
    """Mail transport could not hand off a message. Absorbed by the delivery gate."""
