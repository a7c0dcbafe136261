from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, parseaddr

import resend

from tarot42.core.config import settings

logger = logging.getLogger(__name__)


class EmailNotConfiguredError(RuntimeError):
    pass


class EmailDeliveryError(RuntimeError):
    """
    Raised when a provider is configured but delivery fails.
    """


def _normalize_provider(raw: str | None) -> str:
    """
    Supported providers:
    - smtp (default when unset)
    - resend
    """
    provider = (raw or "").strip().lower()
    if not provider:
        return "smtp"
    if provider in {"smtp", "resend"}:
        return provider
    raise EmailNotConfiguredError(f"Unsupported EMAIL_PROVIDER={provider!r}. Supported: smtp (default), resend.")


def _require_from_email() -> str:
    if not settings.FROM_EMAIL:
        raise EmailNotConfiguredError("FROM_EMAIL is not set")
    return settings.FROM_EMAIL


def _require_smtp_config() -> None:
    missing = [
        name
        for name, value in (
            ("SMTP_HOST", settings.SMTP_HOST),
            ("SMTP_USERNAME", settings.SMTP_USERNAME),
            ("SMTP_PASSWORD", settings.SMTP_PASSWORD),
        )
        if not value
    ]
    if missing:
        raise EmailNotConfiguredError(f"SMTP configuration incomplete: {', '.join(missing)} not set")


def _send_email_resend(to_email: str, subject: str, text: str, html: str) -> str | None:
    api_key = (settings.RESEND_API_KEY or "").strip()
    if not api_key:
        raise EmailNotConfiguredError("RESEND_API_KEY is not set")

    payload = {
        "from": _require_from_email(),
        "to": [to_email],
        "subject": subject,
        "text": text,
        "html": html,
    }

    try:
        resend.api_key = api_key
        res = resend.Emails.send(payload)  # type: ignore[attr-defined]
    except Exception as e:  # noqa: BLE001
        raise EmailDeliveryError(f"Resend send failed: {e}") from e

    msg_id: str | None = None
    if isinstance(res, dict):
        if res.get("error"):
            raise EmailDeliveryError(f"Resend API error: {res.get('error')}")
        v = res.get("id")
        if isinstance(v, str) and v.strip():
            msg_id = v.strip()

    logger.info("Resend email sent: to=%s msg_id=%s", to_email, msg_id)
    return msg_id


def _send_email_smtp(to_email: str, subject: str, text: str, html: str) -> str | None:
    _require_smtp_config()
    from_email = _require_from_email()

    msg = MIMEMultipart("alternative")
    msg["From"] = from_email
    msg["To"] = to_email
    msg["Subject"] = subject
    msg["Date"] = formatdate(localtime=True)
    msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    try:
        if settings.SMTP_USE_SSL:
            server: smtplib.SMTP = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10)
        else:
            server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10)
    except (OSError, smtplib.SMTPException) as e:
        raise EmailDeliveryError(f"SMTP connection failed: {e}") from e

    try:
        server.ehlo()
        if settings.SMTP_USE_TLS and not settings.SMTP_USE_SSL:
            server.starttls()
            server.ehlo()
        server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.sendmail(parseaddr(from_email)[1], [to_email], msg.as_string())
    except (OSError, smtplib.SMTPException) as e:
        raise EmailDeliveryError(f"SMTP send failed: {e}") from e
    finally:
        try:
            server.quit()
        except (OSError, smtplib.SMTPException):
            pass

    logger.info("SMTP email sent: to=%s", to_email)
    return None


def send_email(to_email: str, subject: str, text: str, html: str) -> str | None:
    """
    Sends email using configured provider.
    - EMAIL_PROVIDER=smtp (default): SMTP via stdlib smtplib
    - EMAIL_PROVIDER=resend: Resend API
    """
    provider = _normalize_provider(settings.EMAIL_PROVIDER)
    if provider == "resend":
        return _send_email_resend(to_email=to_email, subject=subject, text=text, html=html)
    return _send_email_smtp(to_email=to_email, subject=subject, text=text, html=html)
