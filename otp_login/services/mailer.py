from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol

from ..config import Settings, get_settings
from ..domain.errors import DeliveryFailure

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Your OTP for Login"

_OTP_HTML = """\
<div style="font-family: Arial, sans-serif; max-width: 500px; margin: 0 auto;">
    <h2 style="color: #333;">Your One-Time Password (OTP)</h2>
    <p>Use the following OTP to complete your login:</p>
    <div style="text-align: center; margin: 20px 0;">
        <span style="font-size: 24px; font-weight: bold; letter-spacing: 5px;
                     background-color: #f5f5f5; padding: 10px 15px;
                     border-radius: 5px;">{code}</span>
    </div>
    <p>This OTP is valid for {validity}. Do not share it with anyone.</p>
    <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
    <p style="color: #777; font-size: 12px;">
        If you didn't request this OTP, please ignore this email.
    </p>
</div>
"""


@dataclass(frozen=True)
class OutgoingMessage:
    to: str
    subject: str
    text: str
    html: Optional[str] = None


def format_validity(ttl_seconds: int) -> str:
    """Human wording for a TTL: whole minutes when it divides evenly, seconds otherwise."""
    if ttl_seconds >= 60 and ttl_seconds % 60 == 0:
        minutes = ttl_seconds // 60
        return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"
    return f"{ttl_seconds} second" if ttl_seconds == 1 else f"{ttl_seconds} seconds"


def render_otp_email(to: str, code: str, ttl_seconds: int) -> OutgoingMessage:
    validity = format_validity(ttl_seconds)
    return OutgoingMessage(
        to=to,
        subject=OTP_SUBJECT,
        text=f"Your OTP is {code}. It is valid for {validity}. Do not share it with anyone.",
        html=_OTP_HTML.format(code=code, validity=validity),
    )


class MailTransport(Protocol):
    @property
    def configured(self) -> bool:
        ...

    async def verify(self) -> None:
        ...

    async def send(self, message: OutgoingMessage) -> None:
        ...


class SmtpMailer:
    """SMTP client with async-friendly verify/send; blocking calls run in the default executor."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: Optional[str],
        password: Optional[str],
        sender: Optional[str] = None,
        use_ssl: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = int(port)
        self._username = username
        self._password = password
        self._sender = sender or username
        self._use_ssl = use_ssl
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SmtpMailer":
        s = settings or get_settings()
        return cls(
            host=s.SMTP_HOST,
            port=s.SMTP_PORT,
            username=s.EMAIL_USER,
            password=s.EMAIL_PASS,
            sender=s.EMAIL_FROM,
            use_ssl=s.SMTP_USE_SSL,
            timeout=s.EMAIL_SEND_TIMEOUT_SEC,
        )

    @property
    def configured(self) -> bool:
        return bool(self._username and self._password)

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self._use_ssl:
            server: smtplib.SMTP = smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout, context=context)
        else:
            server = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
            server.starttls(context=context)
        server.login(self._username, self._password)  # type: ignore[arg-type]
        return server

    def _verify_sync(self) -> None:
        with self._connect() as server:
            server.noop()

    def _build(self, message: OutgoingMessage) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._sender
        msg["To"] = message.to
        msg["Subject"] = message.subject
        msg.set_content(message.text)
        if message.html:
            msg.add_alternative(message.html, subtype="html")
        return msg

    def _send_sync(self, msg: EmailMessage) -> None:
        with self._connect() as server:
            server.send_message(msg)

    async def _run(self, fn, *args) -> None:
        if not self.configured:
            raise DeliveryFailure("mail credentials are not configured")
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, fn, *args)
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            raise DeliveryFailure(str(exc)) from exc

    async def verify(self) -> None:
        """Connect and authenticate without sending anything."""
        await self._run(self._verify_sync)

    async def send(self, message: OutgoingMessage) -> None:
        # header values with CR/LF or unencodable addresses are rejected here, before any connection
        try:
            msg = self._build(message)
        except ValueError as exc:
            raise DeliveryFailure(f"cannot build message for {message.to!r}: {exc}") from exc
        await self._run(self._send_sync, msg)
        logger.debug("Mail handed off to %s:%s for %s", self._host, self._port, message.to)
