"""Google Sheets worksheets as :class:`TabularStore` implementations.

Values are read as formatted strings so row fingerprints do not depend on
how Sheets chose to type a cell. Writes are ``RAW`` so text written back is
stored as read and never re-parsed into dates or numbers.
"""

import logging
from typing import Any

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from src.core.exceptions import UpstreamError
from src.core.interfaces import TabularStore

logger = logging.getLogger(__name__)


def column_letter(index: int) -> str:
    """Return the A1 column letters for a 1-based column index."""
    if index < 1:
        raise ValueError("Column index must be >= 1")
    letters: list[str] = []
    while index:
        index, remainder = divmod(index - 1, 26)
        letters.append(chr(65 + remainder))
    return "".join(reversed(letters))


def quote_title(title: str) -> str:
    """Quote a worksheet title for A1 notation."""
    return "'{}'".format(title.replace("'", "''"))


# Column span used when a caller leaves the width open
DEFAULT_COLUMN_SPAN = 26


def a1_range(title: str, row: int, col: int, num_rows: int = 0, num_cols: int = 0) -> str:
    """Build an A1 range; a zero ``num_rows`` leaves the rows open-ended.

    A zero ``num_cols`` spans ``DEFAULT_COLUMN_SPAN`` columns, and a range
    starting at A1 with both sizes zero addresses the whole worksheet.
    """
    if row < 1 or col < 1:
        raise ValueError("Row and column must be >= 1")

    if row == 1 and col == 1 and not num_rows and not num_cols:
        return quote_title(title)

    last_col = column_letter(col + (num_cols or DEFAULT_COLUMN_SPAN) - 1)
    end = f"{last_col}{row + num_rows - 1}" if num_rows else last_col
    return f"{quote_title(title)}!{column_letter(col)}{row}:{end}"


class SheetsService:
    """Thin wrapper around the Sheets v4 ``spreadsheets`` resource."""

    def __init__(self, spreadsheet_id: str, credentials=None, service=None):
        self.spreadsheet_id = spreadsheet_id
        self._service = service or build("sheets", "v4", credentials=credentials, cache_discovery=False)

    def worksheet(self, title: str) -> "SheetsWorksheet":
        return SheetsWorksheet(self, title)

    def values(self):
        return self._service.spreadsheets().values()


class SheetsWorksheet(TabularStore):
    """One tab of a spreadsheet."""

    def __init__(self, service: SheetsService, title: str):
        self.service = service
        self.title = title

    def _execute(self, request, action: str) -> Any:
        try:
            return request.execute()
        except HttpError as e:
            status = getattr(getattr(e, "resp", None), "status", None)
            raise UpstreamError(
                f"Sheets {action} failed on '{self.title}': {e}",
                status_code=int(status) if status else None,
            ) from e

    def get_range(self, start_row: int, start_col: int, num_rows: int = 0, num_cols: int = 0) -> list[list[Any]]:
        result = self._execute(
            self.service.values().get(
                spreadsheetId=self.service.spreadsheet_id,
                range=a1_range(self.title, start_row, start_col, num_rows, num_cols),
                majorDimension="ROWS",
                valueRenderOption="FORMATTED_VALUE",
            ),
            "read",
        )
        return [list(row) for row in result.get("values", [])]

    def get_cell(self, row: int, col: int) -> Any:
        values = self.get_range(row, col, 1, 1)
        if values and values[0]:
            return values[0][0]
        return ""

    def set_range(self, row: int, col: int, values: list[list[Any]]) -> None:
        if not values or not values[0]:
            return
        num_cols = max(len(r) for r in values)
        self._execute(
            self.service.values().update(
                spreadsheetId=self.service.spreadsheet_id,
                range=a1_range(self.title, row, col, len(values), num_cols),
                valueInputOption="RAW",
                body={"values": values, "majorDimension": "ROWS"},
            ),
            "write",
        )

    def set_cell(self, row: int, col: int, value: Any) -> None:
        self.set_range(row, col, [[value]])

    def clear_range(self, row: int, col: int, num_rows: int = 0, num_cols: int = 0) -> None:
        self._execute(
            self.service.values().clear(
                spreadsheetId=self.service.spreadsheet_id,
                range=a1_range(self.title, row, col, num_rows, num_cols),
                body={},
            ),
            "clear",
        )

    def append_row(self, values: list[Any]) -> None:
        self._execute(
            self.service.values().append(
                spreadsheetId=self.service.spreadsheet_id,
                range=quote_title(self.title),
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [values]},
            ),
            "append",
        )
