"""Buyer notification over SMTP relay or the MailerSend HTTP API.

Both transports expose the same `send(message)` coroutine, so the checkout
orchestrator never knows which one is active.
"""

import asyncio
import base64
import os
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Protocol

import httpx

from guidepay.common.config import Settings
from guidepay.common.errors import ConfigurationError, NotificationError
from guidepay.common.logging import logger
from guidepay.common.metrics import upstream_failures_total
from guidepay.services.notification.models import Attachment, NotificationMessage


class MailTransport(Protocol):
    """Capability: deliver one message or raise."""

    async def send(self, message: NotificationMessage) -> None: ...


def build_email(message: NotificationMessage) -> EmailMessage:
    """Render a `NotificationMessage` as a MIME message."""

    email = EmailMessage()
    email["From"] = message.sender
    email["To"] = message.recipient
    email["Subject"] = message.subject
    email.set_content(message.text)
    for attachment in message.attachments:
        maintype, _, subtype = attachment.mime_type.partition("/")
        email.add_attachment(
            attachment.content,
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=attachment.filename,
        )
    return email


class SmtpTransport:
    """Store-and-forward through an SMTP relay with STARTTLS."""

    def __init__(self, host: str, port: int, username: str, password: str, timeout: float = 10.0) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout

    def _send_blocking(self, email: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as client:
            client.starttls()
            client.login(self.username, self.password)
            client.send_message(email)

    async def send(self, message: NotificationMessage) -> None:
        await asyncio.to_thread(self._send_blocking, build_email(message))


class MailerSendTransport:
    """MailerSend `POST /v1/email` with bearer token auth."""

    def __init__(self, api_url: str, api_key: str, timeout: float = 10.0, transport=None) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def payload(self, message: NotificationMessage) -> dict:
        body = {
            "from": {"email": message.from_address, "name": message.from_name},
            "to": [{"email": message.to_address, "name": message.to_name}],
            "subject": message.subject,
            "text": message.text,
        }
        if message.attachments:
            body["attachments"] = [
                {
                    "filename": a.filename,
                    "content": base64.b64encode(a.content).decode("ascii"),
                    "disposition": "attachment",
                }
                for a in message.attachments
            ]
        return body

    async def send(self, message: NotificationMessage) -> None:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(
                self.api_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=self.payload(message),
            )
        resp.raise_for_status()


def build_mail_transport(settings: Settings) -> MailTransport:
    """Pick the configured transport variant."""

    if settings.mail_transport == "smtp":
        return SmtpTransport(
            settings.smtp_host,
            settings.smtp_port,
            settings.smtp_username,
            settings.mailersend_api_key,
            timeout=settings.http_timeout_seconds,
        )
    if settings.mail_transport == "mailersend":
        return MailerSendTransport(
            settings.mailersend_api_url,
            settings.mailersend_api_key,
            timeout=settings.http_timeout_seconds,
        )
    raise ConfigurationError(f"unknown MAIL_TRANSPORT: {settings.mail_transport}")


class Notifier:
    """Composes the purchase confirmation and hands it to the transport."""

    def __init__(
        self,
        transport: MailTransport,
        from_address: str,
        from_name: str,
        subject: str,
        attachment_path: str | None = None,
        attachment_filename: str = "guide.pdf",
        service_name: str = "notification",
    ) -> None:
        self.transport = transport
        self.from_address = from_address
        self.from_name = from_name
        self.subject = subject
        self.attachment_path = attachment_path
        self.attachment_filename = attachment_filename
        self.service_name = service_name

    @classmethod
    def from_settings(cls, settings: Settings, transport: MailTransport | None = None) -> "Notifier":
        path = settings.attachment_path
        if path and not (Path(path).is_file() and os.access(path, os.R_OK)):
            raise ConfigurationError(f"ATTACHMENT_PATH is not a readable file: {settings.attachment_path}")
        return cls(
            transport or build_mail_transport(settings),
            settings.mail_from_address,
            settings.mail_from_name,
            settings.mail_subject,
            attachment_path=settings.attachment_path,
            attachment_filename=settings.attachment_filename,
            service_name=settings.service_name,
        )

    def _load_attachment(self) -> list[Attachment]:
        if not self.attachment_path:
            return []
        # Read per send so a replaced file is picked up without restart.
        content = Path(self.attachment_path).read_bytes()
        return [Attachment(filename=self.attachment_filename, content=content)]

    def build_message(self, name: str, email: str) -> NotificationMessage:
        name = "".join(ch for ch in name if ch.isprintable())
        return NotificationMessage(
            from_address=self.from_address,
            from_name=self.from_name,
            to_address=email,
            to_name=name,
            subject=self.subject,
            text=f"Hi {name},\n\nThanks for your purchase! Find your guide attached.\n\nHappy Learning 🚀",
            attachments=self._load_attachment(),
        )

    async def send(self, message: NotificationMessage) -> None:
        """Deliver the message or raise `NotificationError`."""

        try:
            await self.transport.send(message)
        except Exception as exc:
            upstream_failures_total.labels(service=self.service_name, dependency="mail").inc()
            raise NotificationError(str(exc) or exc.__class__.__name__) from exc
        logger.info("confirmation email sent attachments=%s", len(message.attachments))

    async def notify_purchase(self, name: str, email: str) -> None:
        """Build and send; a missing attachment file counts as a send failure."""

        try:
            message = self.build_message(name, email)
        except OSError as exc:
            upstream_failures_total.labels(service=self.service_name, dependency="attachment").inc()
            raise NotificationError(f"attachment unavailable: {exc}") from exc
        await self.send(message)
