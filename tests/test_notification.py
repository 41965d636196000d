"""Notifier message composition and both transport variants."""

import asyncio
import base64
import json

import httpx
import pytest

from conftest import FakeTransport, make_settings
from guidepay.common.errors import ConfigurationError, NotificationError
from guidepay.services.notification import service as notification_service
from guidepay.services.notification.models import Attachment, NotificationMessage
from guidepay.services.notification.service import (
    MailerSendTransport,
    Notifier,
    SmtpTransport,
    build_email,
    build_mail_transport,
)


def _notifier(transport, attachment_path=None) -> Notifier:
    return Notifier(
        transport,
        "no-reply@guide.test",
        "AI Pro Guide",
        "Your AI Pro Guide - ₹49",
        attachment_path=attachment_path,
        attachment_filename="Google-AI-Pro-Guide.pdf",
    )


def _message(**overrides) -> NotificationMessage:
    values = {
        "from_address": "no-reply@guide.test",
        "from_name": "AI Pro Guide",
        "to_address": "asha@example.com",
        "to_name": "Asha",
        "subject": "Your AI Pro Guide - ₹49",
        "text": "Hi Asha",
        "attachments": [Attachment(filename="guide.pdf", content=b"%PDF-1.4")],
    }
    values.update(overrides)
    return NotificationMessage(**values)


def test_build_message_reads_attachment_at_send_time(tmp_path):
    pdf = tmp_path / "guide.pdf"
    pdf.write_bytes(b"v1")
    notifier = _notifier(FakeTransport(), attachment_path=str(pdf))
    assert notifier.build_message("Asha", "asha@example.com").attachments[0].content == b"v1"

    pdf.write_bytes(b"v2")
    message = notifier.build_message("Asha", "asha@example.com")
    assert message.attachments[0].content == b"v2"
    assert message.attachments[0].filename == "Google-AI-Pro-Guide.pdf"
    assert message.to_address == "asha@example.com"
    assert message.text.startswith("Hi Asha,")


def test_no_attachment_when_path_unset():
    message = _notifier(FakeTransport()).build_message("Asha", "asha@example.com")
    assert message.attachments == []


def test_missing_attachment_file_is_notification_error(tmp_path):
    transport = FakeTransport()
    notifier = _notifier(transport, attachment_path=str(tmp_path / "missing.pdf"))
    with pytest.raises(NotificationError, match="attachment unavailable"):
        asyncio.run(notifier.notify_purchase("Asha", "asha@example.com"))
    assert transport.messages == []


def test_transport_failure_is_not_swallowed():
    notifier = _notifier(FakeTransport(fail=ConnectionError("relay down")))
    with pytest.raises(NotificationError, match="relay down"):
        asyncio.run(notifier.notify_purchase("Asha", "asha@example.com"))


def test_build_email_headers_and_attachment():
    email = build_email(_message())
    sender = email["From"].addresses[0]
    assert (sender.display_name, sender.addr_spec) == ("AI Pro Guide", "no-reply@guide.test")
    assert email["To"].addresses[0].addr_spec == "asha@example.com"
    parts = list(email.iter_attachments())
    assert len(parts) == 1
    assert parts[0].get_filename() == "guide.pdf"
    assert parts[0].get_content_type() == "application/pdf"
    assert parts[0].get_content() == b"%PDF-1.4"


class _FakeSMTP:
    instances: list["_FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port, self.timeout = host, port, timeout
        self.calls = []
        _FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.calls.append("quit")
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user, password))

    def send_message(self, email):
        self.calls.append(("send", email["To"].addresses[0].addr_spec))


def test_smtp_transport_starttls_login_send(monkeypatch):
    _FakeSMTP.instances = []
    monkeypatch.setattr(notification_service.smtplib, "SMTP", _FakeSMTP)

    asyncio.run(SmtpTransport("smtp.mailersend.net", 587, "api", "mlsn.key").send(_message()))

    smtp = _FakeSMTP.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.mailersend.net", 587)
    assert smtp.calls == [
        "starttls",
        ("login", "api", "mlsn.key"),
        ("send", "asha@example.com"),
        "quit",
    ]


def test_mailersend_transport_posts_base64_attachment():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(202)

    transport = MailerSendTransport("https://mail.test/v1/email", "mlsn.key", transport=httpx.MockTransport(handler))
    asyncio.run(transport.send(_message()))

    assert seen["auth"] == "Bearer mlsn.key"
    assert seen["body"]["to"] == [{"email": "asha@example.com", "name": "Asha"}]
    assert base64.b64decode(seen["body"]["attachments"][0]["content"]) == b"%PDF-1.4"


def test_mailersend_http_error_raises():
    transport = MailerSendTransport(
        "https://mail.test/v1/email",
        "bad",
        transport=httpx.MockTransport(lambda request: httpx.Response(401, json={"message": "Unauthenticated."})),
    )
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(transport.send(_message(attachments=[])))


def test_transport_selected_by_configuration():
    assert isinstance(build_mail_transport(make_settings(mail_transport="smtp")), SmtpTransport)
    assert isinstance(build_mail_transport(make_settings(mail_transport="mailersend")), MailerSendTransport)
    with pytest.raises(ConfigurationError):
        build_mail_transport(make_settings(mail_transport="carrier-pigeon"))


def test_quoted_display_name_cannot_add_recipients():
    email = build_email(_message(to_name='x" <attacker@evil.test>, "y', to_address="buyer@example.com"))
    addresses = email["To"].addresses
    assert [a.addr_spec for a in addresses] == ["buyer@example.com"]
    assert addresses[0].display_name == 'x" <attacker@evil.test>, "y'


def test_newline_in_buyer_name_is_stripped_before_headers():
    message = _notifier(FakeTransport()).build_message("Asha\nKumar", "asha@example.com")
    email = build_email(message)

    assert message.to_name == "AshaKumar"
    assert [a.addr_spec for a in email["To"].addresses] == ["asha@example.com"]


def test_unreadable_attachment_fails_at_startup(tmp_path):
    with pytest.raises(ConfigurationError, match="ATTACHMENT_PATH"):
        Notifier.from_settings(make_settings(attachment_path=str(tmp_path / "missing.pdf")), FakeTransport())
    with pytest.raises(ConfigurationError):
        Notifier.from_settings(make_settings(attachment_path=str(tmp_path)), FakeTransport())


def test_readable_attachment_passes_startup_check(tmp_path):
    pdf = tmp_path / "guide.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    notifier = Notifier.from_settings(make_settings(attachment_path=str(pdf)), FakeTransport())
    assert notifier.attachment_path == str(pdf)
