from __future__ import annotations

import smtplib

import pytest

from tarot42.core import config as app_config
from tarot42.services import email as email_service
from tarot42.services.email import EmailDeliveryError, EmailNotConfiguredError, send_email

SMTP_KEYS = ["SMTP_HOST", "SMTP_PORT", "SMTP_USERNAME", "SMTP_PASSWORD", "SMTP_USE_TLS", "SMTP_USE_SSL", "FROM_EMAIL", "RESEND_API_KEY"]


@pytest.fixture(autouse=True)
def _restore_email_settings():
    original = {k: getattr(app_config.settings, k) for k in SMTP_KEYS}
    yield
    for k, v in original.items():
        setattr(app_config.settings, k, v)


def _configure_smtp():
    s = app_config.settings
    s.EMAIL_PROVIDER = "smtp"
    s.SMTP_HOST = "smtp.example.com"
    s.SMTP_PORT = 587
    s.SMTP_USERNAME = "mailer"
    s.SMTP_PASSWORD = "mailer-pass"
    s.SMTP_USE_TLS = True
    s.SMTP_USE_SSL = False
    s.FROM_EMAIL = "Tarot42 <no-reply@tarot42.app>"


class _FakeSMTP:
    instances: list["_FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.sent: list[tuple] = []
        self.started_tls = False
        self.logged_in = None
        self.quit_called = False
        _FakeSMTP.instances.append(self)

    def ehlo(self):
        pass

    def starttls(self):
        self.started_tls = True

    def login(self, username, password):
        self.logged_in = (username, password)

    def sendmail(self, from_addr, to_addrs, msg):
        self.sent.append((from_addr, to_addrs, msg))

    def quit(self):
        self.quit_called = True


def test_smtp_send(monkeypatch):
    _configure_smtp()
    _FakeSMTP.instances = []
    monkeypatch.setattr(email_service.smtplib, "SMTP", _FakeSMTP)

    send_email("seeker@example.com", "Hello", "plain body", "<p>html body</p>")

    server = _FakeSMTP.instances[0]
    assert (server.host, server.port) == ("smtp.example.com", 587)
    assert server.started_tls is True
    assert server.logged_in == ("mailer", "mailer-pass")
    assert server.quit_called is True

    from_addr, to_addrs, msg = server.sent[0]
    assert from_addr == "no-reply@tarot42.app"
    assert to_addrs == ["seeker@example.com"]
    assert "Subject: Hello" in msg


def test_smtp_requires_configuration():
    _configure_smtp()
    app_config.settings.SMTP_PASSWORD = ""

    with pytest.raises(EmailNotConfiguredError, match="SMTP_PASSWORD"):
        send_email("seeker@example.com", "Hello", "text", "<p>html</p>")


def test_smtp_failure_is_a_delivery_error(monkeypatch):
    _configure_smtp()

    class _RefusingSMTP(_FakeSMTP):
        def sendmail(self, from_addr, to_addrs, msg):
            raise smtplib.SMTPRecipientsRefused({to_addrs[0]: (550, b"no such user")})

    monkeypatch.setattr(email_service.smtplib, "SMTP", _RefusingSMTP)

    with pytest.raises(EmailDeliveryError):
        send_email("seeker@example.com", "Hello", "text", "<p>html</p>")


def test_resend_send(monkeypatch):
    s = app_config.settings
    s.EMAIL_PROVIDER = "resend"
    s.RESEND_API_KEY = "re_test"
    s.FROM_EMAIL = "no-reply@tarot42.app"

    captured: dict = {}

    def _fake_send(payload):
        captured.update(payload)
        return {"id": "email_123"}

    monkeypatch.setattr(email_service.resend.Emails, "send", _fake_send)

    assert send_email("seeker@example.com", "Hello", "text", "<p>html</p>") == "email_123"
    assert captured["to"] == ["seeker@example.com"]
    assert captured["from"] == "no-reply@tarot42.app"


def test_resend_requires_api_key():
    s = app_config.settings
    s.EMAIL_PROVIDER = "resend"
    s.RESEND_API_KEY = ""

    with pytest.raises(EmailNotConfiguredError, match="RESEND_API_KEY"):
        send_email("seeker@example.com", "Hello", "text", "<p>html</p>")


def test_unknown_provider_is_rejected():
    app_config.settings.EMAIL_PROVIDER = "carrier-pigeon"
    with pytest.raises(EmailNotConfiguredError):
        send_email("seeker@example.com", "Hello", "text", "<p>html</p>")
