import smtplib

import pytest

from otp_login.config import Settings
from otp_login.domain.errors import DeliveryFailure
from otp_login.services import mailer as mailer_mod
from otp_login.services.mailer import OTP_SUBJECT, SmtpMailer, format_validity, render_otp_email


def _mailer(**kw) -> SmtpMailer:
    opts = dict(host="smtp.test", port=465, username="me@test", password="pw", timeout=1.0)
    opts.update(kw)
    return SmtpMailer(**opts)


def test_render_otp_email():
    msg = render_otp_email("a@b.com", "4821", ttl_seconds=300)
    assert msg.to == "a@b.com"
    assert msg.subject == OTP_SUBJECT
    assert "4821" in msg.html
    assert "valid for 5 minutes" in msg.html
    assert "4821" in msg.text


def test_configured_requires_both_credentials():
    assert _mailer().configured is True
    assert _mailer(password=None).configured is False
    assert _mailer(username="").configured is False


def test_from_settings_defaults_sender_to_user():
    s = Settings(EMAIL_USER="me@test", EMAIL_PASS="pw", SMTP_HOST="smtp.test", SMTP_PORT=2525)
    m = SmtpMailer.from_settings(s)
    assert m.configured
    assert m._sender == "me@test"
    assert m._port == 2525


@pytest.mark.asyncio
async def test_unconfigured_mailer_fails_without_connecting(monkeypatch):
    def boom(*a, **kw):
        raise AssertionError("should not connect")

    monkeypatch.setattr(mailer_mod.smtplib, "SMTP_SSL", boom)
    with pytest.raises(DeliveryFailure):
        await _mailer(password=None).verify()


@pytest.mark.asyncio
async def test_smtp_errors_become_delivery_failures(monkeypatch):
    class RefusingSMTP:
        def __init__(self, *a, **kw):
            pass

        def login(self, user, password):
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(mailer_mod.smtplib, "SMTP_SSL", RefusingSMTP)
    with pytest.raises(DeliveryFailure):
        await _mailer().verify()


@pytest.mark.asyncio
async def test_send_builds_multipart_message(monkeypatch):
    sent = []

    class RecordingSMTP:
        def __init__(self, host, port, timeout=None, context=None):
            self.host, self.port = host, port

        def login(self, user, password):
            pass

        def send_message(self, msg):
            sent.append(msg)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    monkeypatch.setattr(mailer_mod.smtplib, "SMTP_SSL", RecordingSMTP)
    await _mailer().send(render_otp_email("a@b.com", "4821", 300))

    assert len(sent) == 1
    msg = sent[0]
    assert msg["To"] == "a@b.com"
    assert msg["From"] == "me@test"
    assert msg["Subject"] == OTP_SUBJECT
    assert msg.is_multipart()


def test_validity_wording():
    assert format_validity(300) == "5 minutes"
    assert format_validity(60) == "1 minute"
    assert format_validity(90) == "90 seconds"
    assert format_validity(30) == "30 seconds"
    assert "valid for 90 seconds" in render_otp_email("a@b.com", "4821", 90).text


@pytest.mark.asyncio
async def test_header_injection_in_recipient_fails_before_connecting(monkeypatch):
    def boom(*a, **kw):
        raise AssertionError("should not connect")

    monkeypatch.setattr(mailer_mod.smtplib, "SMTP_SSL", boom)
    with pytest.raises(DeliveryFailure):
        await _mailer().send(render_otp_email("a@b.com\r\nBcc: x@y.com", "4821", 300))
