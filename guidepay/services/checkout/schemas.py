"""API request/response schemas for checkout endpoints."""

from pydantic import BaseModel, Field, field_validator


class VerificationRequest(BaseModel):
    """Payload posted by the browser after the gateway checkout completes."""

    razorpay_order_id: str = Field(min_length=1)
    razorpay_payment_id: str = Field(min_length=1)
    razorpay_signature: str = Field(min_length=1)
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: str | None = None

    @field_validator("name", "email")
    @classmethod
    def no_control_characters(cls, value: str) -> str:
        """Names and addresses end up in mail headers; CR/LF and friends are rejected."""

        if any(not ch.isprintable() for ch in value):
            raise ValueError("control characters are not allowed")
        return value


class VerificationResponse(BaseModel):
    success: bool
    message: str
    error: str | None = None
