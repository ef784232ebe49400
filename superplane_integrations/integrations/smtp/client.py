"""
SMTP Client.

Sends mail over a plain SMTP connection upgraded with STARTTLS (unless
disabled), optionally authenticating with username and password.
Messages are always multipart/alternative: a missing text part is
derived from the HTML part and vice versa.

Usage:
    client = SMTPClient(SMTPConfig(host="smtp.example.com", from_email="ops@example.com"))
    await client.verify()
    result = await client.send_email(
        Email(to=["dev@example.com"], subject="Deploy finished", text_body="All green")
    )
"""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.message import EmailMessage
from email.utils import make_msgid

import aiosmtplib

from superplane_integrations.integrations.base import IntegrationConfig, IntegrationError
from superplane_integrations.utils import format_sender

logger = logging.getLogger(__name__)

DEFAULT_PORT = 587

_BLOCK_TAGS = re.compile(r"</p>|</div>|</br>|<br\s*/?>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]*>")


# =============================================================================
# Errors
# =============================================================================


class SMTPError(IntegrationError):
    """A failed SMTP conversation step (connect, STARTTLS, auth, send)."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, "smtp", **kwargs)


# =============================================================================
# Configuration and message types
# =============================================================================


@dataclass(frozen=True, slots=True)
class SMTPConfig(IntegrationConfig):
    """Configuration for SMTP client."""

    host: str = ""
    port: int = DEFAULT_PORT
    username: str = ""
    password: str = ""
    from_name: str = ""
    from_email: str = ""
    use_tls: bool = True

    def __post_init__(self):
        if not self.host.strip():
            raise ValueError("host is required")
        if self.port <= 0 or self.port > 65535:
            raise ValueError("port must be between 1 and 65535")
        if not self.from_email.strip():
            raise ValueError("fromEmail is required")
        object.__setattr__(self, "host", self.host.strip())

    def __repr__(self) -> str:
        return (
            f"SMTPConfig(host={self.host}, port={self.port}, "
            f"username={self.username or None}, use_tls={self.use_tls})"
        )


@dataclass
class Email:
    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    subject: str = ""
    text_body: str = ""
    html_body: str = ""
    from_name: str = ""
    from_email: str = ""
    reply_to: str = ""

    @property
    def recipients(self) -> list[str]:
        return [*self.to, *self.cc, *self.bcc]


@dataclass(frozen=True, slots=True)
class SendResult:
    success: bool
    to: list[str]
    cc: list[str]
    bcc: list[str]
    subject: str
    sent_at: datetime
    from_email: str

    def to_payload(self) -> dict:
        payload = {
            "success": self.success,
            "to": self.to,
            "subject": self.subject,
            "sentAt": self.sent_at.isoformat().replace("+00:00", "Z"),
            "fromEmail": self.from_email,
        }
        if self.cc:
            payload["cc"] = self.cc
        if self.bcc:
            payload["bcc"] = self.bcc
        return payload


# =============================================================================
# Body helpers
# =============================================================================


def strip_html(markup: str) -> str:
    """Plain-text rendering of an HTML body: tags dropped, one block per line."""
    text = _TAG.sub("", _BLOCK_TAGS.sub("\n", markup))
    lines = (line.strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line)


def wrap_text_in_html(text: str) -> str:
    escaped = html.escape(text, quote=False).replace("\n", "<br>\n")
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="UTF-8">\n'
        "</head>\n"
        '<body style="font-family: sans-serif; line-height: 1.5;">\n'
        f"{escaped}\n"
        "</body>\n"
        "</html>"
    )


def build_message(email: Email, from_name: str, from_email: str) -> EmailMessage:
    """
    Build a multipart/alternative message.

    Bcc recipients never appear in the headers; they are only passed as
    envelope recipients.
    """
    text_body = email.text_body
    html_body = email.html_body
    if not text_body and html_body:
        text_body = strip_html(html_body)
    if not html_body and text_body:
        html_body = wrap_text_in_html(text_body)

    message = EmailMessage()
    message["From"] = format_sender(from_email, from_name)
    message["Subject"] = email.subject
    if email.to:
        message["To"] = ", ".join(email.to)
    if email.cc:
        message["Cc"] = ", ".join(email.cc)
    if email.reply_to:
        message["Reply-To"] = email.reply_to
    message["Message-ID"] = make_msgid(domain=from_email.rpartition("@")[2] or None)

    message.set_content(text_body)
    message.add_alternative(html_body, subtype="html")
    return message


# =============================================================================
# Client
# =============================================================================


class SMTPClient:
    """
    Async SMTP client built on aiosmtplib.

    Each operation opens its own connection. ``smtp_factory`` builds the
    aiosmtplib.SMTP instance and exists so tests can hand in a fake.
    """

    def __init__(
        self,
        config: SMTPConfig,
        *,
        smtp_factory: Callable[..., aiosmtplib.SMTP] | None = None,
    ):
        self.config = config
        self._smtp_factory = smtp_factory or aiosmtplib.SMTP

    @property
    def name(self) -> str:
        return "smtp"

    def _make_smtp(self) -> aiosmtplib.SMTP:
        return self._smtp_factory(
            hostname=self.config.host,
            port=self.config.port,
            timeout=self.config.timeout,
            start_tls=False,
        )

    async def _connect(self) -> aiosmtplib.SMTP:
        smtp = self._make_smtp()
        try:
            await smtp.connect()
        except (aiosmtplib.SMTPException, OSError) as e:
            raise SMTPError(f"failed to connect to SMTP server: {e}", retryable=True) from e

        try:
            await smtp.ehlo()
        except aiosmtplib.SMTPException as e:
            smtp.close()
            raise SMTPError(f"HELLO failed: {e}") from e

        if self.config.use_tls:
            if not smtp.supports_extension("starttls"):
                smtp.close()
                raise SMTPError("SMTP server does not support STARTTLS")
            try:
                await smtp.starttls()
            except aiosmtplib.SMTPException as e:
                smtp.close()
                raise SMTPError(f"STARTTLS failed: {e}") from e

        if self.config.username:
            try:
                await smtp.login(self.config.username, self.config.password)
            except aiosmtplib.SMTPException as e:
                smtp.close()
                raise SMTPError(f"authentication failed: {e}") from e

        return smtp

    async def verify(self) -> None:
        """Connect, negotiate TLS and auth, then QUIT."""
        smtp = await self._connect()
        try:
            await smtp.quit()
        except aiosmtplib.SMTPException as e:
            raise SMTPError(f"QUIT failed: {e}") from e
        finally:
            if smtp.is_connected:
                smtp.close()

    async def send_email(self, email: Email) -> SendResult:
        """
        Send one message to every To, Cc and Bcc recipient.

        Raises:
            SMTPError: On any failed conversation step
        """
        from_name = email.from_name or self.config.from_name
        from_email = email.from_email or self.config.from_email

        recipients = email.recipients
        if not recipients:
            raise SMTPError("at least one recipient is required")

        message = build_message(email, from_name, from_email)

        smtp = await self._connect()
        try:
            logger.info(f"[smtp] Sending '{email.subject}' to {len(recipients)} recipient(s)")
            try:
                await smtp.send_message(message, sender=from_email, recipients=recipients)
            except aiosmtplib.SMTPRecipientsRefused as e:
                refused = ", ".join(r.recipient for r in e.recipients)
                raise SMTPError(f"RCPT TO failed for {refused}: {e}") from e
            except aiosmtplib.SMTPSenderRefused as e:
                raise SMTPError(f"MAIL FROM failed: {e}") from e
            except aiosmtplib.SMTPException as e:
                raise SMTPError(f"failed to send message: {e}") from e

            try:
                await smtp.quit()
            except aiosmtplib.SMTPException as e:
                raise SMTPError(f"QUIT failed: {e}") from e
        finally:
            if smtp.is_connected:
                smtp.close()

        return SendResult(
            success=True,
            to=email.to,
            cc=email.cc,
            bcc=email.bcc,
            subject=email.subject,
            sent_at=datetime.now(UTC),
            from_email=from_email,
        )
