"""Purchase confirmation email shapes (never persisted)."""

from email.headerregistry import Address

from pydantic import BaseModel


class Attachment(BaseModel):
    filename: str
    content: bytes
    mime_type: str = "application/pdf"


class NotificationMessage(BaseModel):
    """One outbound email, built and sent within a single request."""

    from_address: str
    from_name: str
    to_address: str
    to_name: str = ""
    subject: str
    text: str
    attachments: list[Attachment] = []

    @property
    def sender(self) -> Address:
        return Address(display_name=self.from_name, addr_spec=self.from_address)

    @property
    def recipient(self) -> Address:
        # Address quotes the display name, so it cannot smuggle in extra mailboxes.
        return Address(display_name=self.to_name, addr_spec=self.to_address)
