"""Ledger row shape appended to the purchases sheet."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LedgerRow(BaseModel):
    """One verified purchase; written once, never updated."""

    verified_at: str = Field(default_factory=_utc_now_iso)
    name: str
    email: str
    phone: str = ""
    payment_id: str

    def to_values(self) -> list[str]:
        """Cell values in sheet column order A..E."""

        return [self.verified_at, self.name, self.email, self.phone, self.payment_id]
