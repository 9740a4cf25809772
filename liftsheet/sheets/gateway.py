"""Authenticated access to the workout spreadsheet over the Sheets v4 API.

The gateway only talks to the remote store. It never reads or writes the
local cache; that is the coordinator's job.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

import httpx

from ..auth import TokenProvider
from ..errors import AuthError, RemoteError
from ..models import WorkoutRecord
from .codec import (
    CellUpdate,
    decode_cardio_grid,
    decode_session_grid,
    encode_cardio_row,
    encode_exercise_row,
    find_cardio_row,
    find_exercise_rows,
    plan_cardio_update,
    plan_exercise_update,
)
from .schema import CARDIO_LOG, SESSION_LOG

logger = logging.getLogger(__name__)

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"


@dataclass
class SaveSummary:
    """What a save_workout call did to the sheet."""

    updated_cells: int = 0
    appended_rows: int = 0
    skipped: list[str] = field(default_factory=list)


class SheetsGateway:
    """Client for the two log sheets of one spreadsheet.

    Primitive operations (read, write_cell, batch_write, append) raise
    AuthError when no token is available or the token is rejected, and
    RemoteError for transport failures and other non-success responses.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        token_provider: TokenProvider,
        base_url: str = SHEETS_API_URL,
        session_sheet: str = SESSION_LOG.title,
        cardio_sheet: str = CARDIO_LOG.title,
        value_input_option: str = "USER_ENTERED",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the gateway.

        Args:
            spreadsheet_id: ID of the spreadsheet holding both logs.
            token_provider: Source of the bearer token.
            base_url: Sheets API root.
            session_sheet: Title of the workout (session) log sheet.
            cardio_sheet: Title of the cardio log sheet.
            value_input_option: How the API interprets written values.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.spreadsheet_id = spreadsheet_id
        self.base_url = base_url.rstrip("/")
        self.session_sheet = session_sheet
        self.cardio_sheet = cardio_sheet
        self.value_input_option = value_input_option
        self.timeout = timeout
        self._token_provider = token_provider
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def session_range(self) -> str:
        return SESSION_LOG.full_range(self.session_sheet)

    @property
    def cardio_range(self) -> str:
        return CARDIO_LOG.full_range(self.cardio_sheet)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}/{self.spreadsheet_id}",
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            return response.reason_phrase or response.text

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_data: Any = None,
    ) -> dict[str, Any]:
        token = self._token_provider.get_token()
        if not token:
            raise AuthError("No authentication token available")

        client = await self._get_client()
        try:
            response = await client.request(
                method,
                path,
                params=params,
                json=json_data,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise RemoteError(f"{method} {path} failed: {e}") from e

        if response.status_code == 401:
            self._token_provider.invalidate()
            raise AuthError(f"Access token rejected: {self._error_message(response)}")

        if not response.is_success:
            raise RemoteError(
                f"{method} {path} returned HTTP {response.status_code}: "
                f"{self._error_message(response)}",
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"{method} {path} returned invalid JSON: {e}") from e

    async def read(self, range_: str) -> list[list[str]]:
        """Read a range as a grid of strings.

        Rows are not padded: trailing empty cells may be missing.
        """
        data = await self._request("GET", f"/values/{range_}")
        grid = [[str(cell) for cell in row] for row in data.get("values", [])]
        logger.debug(f"Read {len(grid)} rows from {range_}")
        return grid

    async def write_cell(self, range_: str, value: str) -> None:
        """Write one cell. Returning without an exception means it was applied."""
        await self._request(
            "PUT",
            f"/values/{range_}",
            params={"valueInputOption": self.value_input_option},
            json_data={"range": range_, "values": [[value]]},
        )
        logger.debug(f"Wrote {range_}")

    async def batch_write(self, updates: Iterable[tuple[str, str]]) -> None:
        """Write many single cells in one round trip.

        A raised error means none of the updates should be considered
        applied; callers replay the whole batch.
        """
        data = [{"range": range_, "values": [[value]]} for range_, value in updates]
        if not data:
            return

        await self._request(
            "POST",
            "/values:batchUpdate",
            json_data={"valueInputOption": self.value_input_option, "data": data},
        )
        logger.debug(f"Batch wrote {len(data)} cells")

    async def append(self, range_prefix: str, rows: list[list[str]]) -> None:
        """Append full rows after the last row of a table."""
        if not rows:
            return

        await self._request(
            "POST",
            f"/values/{range_prefix}:append",
            params={
                "valueInputOption": self.value_input_option,
                "insertDataOption": "INSERT_ROWS",
            },
            json_data={"values": rows},
        )
        logger.debug(f"Appended {len(rows)} rows to {range_prefix}")

    async def load_workout(self, date_key: str) -> WorkoutRecord:
        """Fetch the exercises and cardio session logged for a date."""
        session_grid, cardio_grid = await asyncio.gather(
            self.read(self.session_range),
            self.read(self.cardio_range),
        )

        record = WorkoutRecord(
            date=date_key,
            exercises=decode_session_grid(session_grid, date_key),
            cardio=decode_cardio_grid(cardio_grid, date_key),
        )
        logger.info(f"Loaded {len(record.exercises)} exercises for {date_key}")
        return record

    async def save_workout(
        self, record: WorkoutRecord, append_missing: bool = False
    ) -> SaveSummary:
        """Write a record into the rows already logged for its date.

        Existing rows are located by (date, exercise name) and updated cell
        by cell. Entries with no matching row are skipped unless
        ``append_missing`` is set, in which case they are appended as new
        rows.

        Args:
            record: The record to persist.
            append_missing: Append rows for entries that have none yet.

        Returns:
            SaveSummary of the writes issued.
        """
        date_key = record.date
        session_grid, cardio_grid = await asyncio.gather(
            self.read(self.session_range),
            self.read(self.cardio_range),
        )

        summary = SaveSummary()
        updates: list[CellUpdate] = []
        session_appends: list[list[str]] = []
        cardio_appends: list[list[str]] = []

        located = find_exercise_rows(session_grid, date_key)
        for exercise in record.exercises:
            row_number = located.get(exercise.match_name)
            if row_number:
                updates.extend(
                    plan_exercise_update(row_number, exercise, sheet=self.session_sheet)
                )
            elif append_missing:
                session_appends.append(encode_exercise_row(date_key, exercise).cells)
            else:
                summary.skipped.append(exercise.name)

        if record.cardio is not None:
            cardio_row = find_cardio_row(cardio_grid, date_key)
            if cardio_row is not None:
                updates.extend(
                    plan_cardio_update(cardio_row.number, record.cardio, sheet=self.cardio_sheet)
                )
            elif append_missing and not record.cardio.is_empty():
                cardio_appends.append(encode_cardio_row(date_key, record.cardio).cells)
            elif not record.cardio.is_empty():
                summary.skipped.append("cardio")

        await self.batch_write(updates)
        summary.updated_cells = len(updates)

        await self.append(self.session_range, session_appends)
        await self.append(self.cardio_range, cardio_appends)
        summary.appended_rows = len(session_appends) + len(cardio_appends)

        if summary.skipped:
            logger.info(f"No rows for {date_key}, skipped: {', '.join(summary.skipped)}")
        logger.info(
            f"Saved {date_key}: {summary.updated_cells} cells updated, "
            f"{summary.appended_rows} rows appended"
        )
        return summary
