"""Environment-driven settings for the checkout service.

The app factory builds one `Settings` instance at startup and hands it to each
component constructor. Nothing below the factory reads the environment.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "guidepay-checkout"
    log_level: str = "INFO"
    port: int = 10000

    razorpay_key_id: str = Field(min_length=1)
    razorpay_key_secret: str = Field(min_length=1)
    razorpay_api_url: str = "https://api.razorpay.com/v1"
    order_amount: int = 4900
    order_currency: str = "INR"

    google_credentials: str = Field(min_length=1)
    google_sheet_id: str = Field(min_length=1)
    google_sheet_range: str = "Sheet1!A:E"

    mail_transport: str = "smtp"
    mailersend_api_key: str = Field(min_length=1)
    mailersend_api_url: str = "https://api.mailersend.com/v1/email"
    smtp_host: str = "smtp.mailersend.net"
    smtp_port: int = 587
    smtp_username: str = "api"
    mail_from_address: str = "no-reply@test-q3enl6k70k542vwr.mlsender.net"
    mail_from_name: str = "AI Pro Guide"
    mail_subject: str = "Your AI Pro Guide - ₹49"
    attachment_path: str | None = "./assets/guide.pdf"
    attachment_filename: str = "Google-AI-Pro-Guide.pdf"

    cors_origins: list[str] = ["*"]
    expose_error_details: bool = False
    http_timeout_seconds: float = 10.0
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def razorpay_secret_bytes(self) -> bytes:
        return self.razorpay_key_secret.encode("utf-8")


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process; raises if required keys are missing."""

    return Settings()
