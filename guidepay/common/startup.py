"""Startup-time helpers for safe config logging."""

from guidepay.common.config import Settings
from guidepay.common.logging import logger

SECRET_MARKERS = ["KEY", "SECRET", "PASSWORD", "TOKEN", "CREDENTIALS"]


def _safe_value(name: str, value) -> str:
    """Return a printable value, redacting secret-like setting names."""

    if value is None:
        return "<unset>"
    if any(marker in name.upper() for marker in SECRET_MARKERS):
        return "<redacted>"
    return str(value)


def startup_config(settings: Settings, keys: list[str]) -> dict[str, str]:
    config = {"service": settings.service_name}
    for key in keys:
        config[key.upper()] = _safe_value(key, getattr(settings, key, None))
    return config


def log_startup_config(settings: Settings, keys: list[str]) -> None:
    """Log selected startup config keys for quick troubleshooting."""

    logger.info("startup_config=%s", startup_config(settings, keys))
