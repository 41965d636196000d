"""Append-only purchase ledger backed by a Google Sheets range."""

import asyncio
import json
from typing import Protocol

from google.oauth2 import service_account
from googleapiclient.discovery import build

from guidepay.common.config import Settings
from guidepay.common.errors import ConfigurationError, LedgerError
from guidepay.common.logging import logger
from guidepay.common.metrics import upstream_failures_total
from guidepay.services.ledger.models import LedgerRow

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class TabularStore(Protocol):
    """Capability: append one ordered row of cell values to a range."""

    async def append_row(self, store_id: str, range_selector: str, values: list[str]) -> None: ...


def load_service_account(credentials_json: str) -> service_account.Credentials:
    """Parse the service-account JSON blob; fail fast on malformed input."""

    try:
        info = json.loads(credentials_json)
        return service_account.Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)
    except (ValueError, KeyError) as exc:
        raise ConfigurationError(f"invalid GOOGLE_CREDENTIALS: {exc}") from exc


class GoogleSheetsStore:
    """`spreadsheets.values.append` through google-api-python-client."""

    def __init__(self, credentials, value_input_option: str = "USER_ENTERED") -> None:
        self.credentials = credentials
        self.value_input_option = value_input_option
        self._service = None

    @property
    def service(self):
        if self._service is None:
            self._service = build("sheets", "v4", credentials=self.credentials, cache_discovery=False)
        return self._service

    def _append_blocking(self, store_id: str, range_selector: str, values: list[str]) -> dict:
        return (
            self.service.spreadsheets()
            .values()
            .append(
                spreadsheetId=store_id,
                range=range_selector,
                valueInputOption=self.value_input_option,
                body={"values": [values]},
            )
            .execute()
        )

    async def append_row(self, store_id: str, range_selector: str, values: list[str]) -> None:
        result = await asyncio.to_thread(self._append_blocking, store_id, range_selector, values)
        logger.debug("sheets append updated_range=%s", result.get("updates", {}).get("updatedRange"))


class LedgerRecorder:
    """Writes one row per verified payment. No dedup: repeats append repeats."""

    def __init__(self, store: TabularStore, sheet_id: str, sheet_range: str, service_name: str = "ledger") -> None:
        self.store = store
        self.sheet_id = sheet_id
        self.sheet_range = sheet_range
        self.service_name = service_name

    @classmethod
    def from_settings(cls, settings: Settings, store: TabularStore | None = None) -> "LedgerRecorder":
        if store is None:
            store = GoogleSheetsStore(load_service_account(settings.google_credentials))
        return cls(store, settings.google_sheet_id, settings.google_sheet_range, service_name=settings.service_name)

    async def append(self, row: LedgerRow) -> None:
        """Append the row or raise `LedgerError`."""

        try:
            await self.store.append_row(self.sheet_id, self.sheet_range, row.to_values())
        except Exception as exc:
            upstream_failures_total.labels(service=self.service_name, dependency="ledger").inc()
            raise LedgerError(str(exc) or exc.__class__.__name__) from exc
        logger.info("ledger row appended payment_id=%s", row.payment_id)
