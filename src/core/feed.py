"""Feed sheet row model.

The Feed tab has a fixed 14-column layout with a header in row 1 and data
from row 2 onwards. ``FeedRow`` converts between the raw cell list and named
fields and remembers the row's original sheet position so results can be
written back exactly where they were read.
"""

import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

FEED_SHEET_NAME = "Feed"
FIRST_DATA_ROW = 2
REMOVE_MARKER = "Remove"

# Column order of the Feed tab (0-based)
FEED_COLUMNS: tuple[str, ...] = (
    "status",
    "name",
    "headline",
    "body",
    "url",
    "asset",
    "filename",
    "width",
    "height",
    "call_to_action",
    "creative_id",
    "line_item_id",
    "remove",
    "hash",
)
FEED_COLUMN_COUNT = len(FEED_COLUMNS)

REQUIRED_FIELDS: tuple[str, ...] = (
    "name",
    "headline",
    "body",
    "url",
    "asset",
    "filename",
    "width",
    "height",
    "call_to_action",
    "line_item_id",
)

_WHITESPACE = re.compile(r"\s")
_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


class RowStatus(str, Enum):
    """Outcome written to the status column."""

    EMPTY = ""
    SUCCESS = "Success"
    FAILED = "Failed"

    @classmethod
    def parse(cls, value: str) -> "RowStatus":
        """Map a status cell to a member; unknown text counts as empty."""
        try:
            return cls(value)
        except ValueError:
            return cls.EMPTY


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass
class FeedRow:
    """One advertisement row from the Feed tab."""

    row_number: int
    status: str = ""
    name: str = ""
    headline: str = ""
    body: str = ""
    url: str = ""
    asset: str = ""
    filename: str = ""
    width: str = ""
    height: str = ""
    call_to_action: str = ""
    creative_id: str = ""
    line_item_id: str = ""
    remove: str = ""
    hash: str = ""

    @classmethod
    def from_cells(cls, row_number: int, cells: list[Any]) -> "FeedRow":
        """Build a row from raw sheet cells, padding short rows with blanks."""
        padded = [_cell_to_str(cell) for cell in cells[:FEED_COLUMN_COUNT]]
        padded += [""] * (FEED_COLUMN_COUNT - len(padded))
        return cls(row_number, **dict(zip(FEED_COLUMNS, padded, strict=True)))

    def to_cells(self) -> list[str]:
        """Return the row as the 14 cells of the Feed tab."""
        return [getattr(self, column) for column in FEED_COLUMNS]

    def is_blank(self) -> bool:
        return all(cell == "" for cell in self.to_cells())

    def is_marked_for_removal(self) -> bool:
        return bool(self.name) and self.remove == REMOVE_MARKER

    def missing_fields(self) -> list[str]:
        """Return the required fields that are empty."""
        return [field for field in REQUIRED_FIELDS if not str(getattr(self, field)).strip()]

    def line_item_ids(self) -> list[str]:
        return parse_line_item_ids(self.line_item_id)

    def copy(self) -> "FeedRow":
        return FeedRow(**{f.name: getattr(self, f.name) for f in fields(self)})


def parse_line_item_ids(value: str) -> list[str]:
    """Strip all whitespace from a comma-separated id list and split it.

    Args:
        value: Raw lineItemId cell, e.g. ``"123, 456"``

    Returns:
        List of line item ids with empty entries dropped
    """
    stripped = _WHITESPACE.sub("", _cell_to_str(value))
    return [item for item in stripped.split(",") if item]


def normalize_url(url: str) -> str:
    """Prepend ``https://`` when the url has no scheme."""
    url = url.strip()
    if not url or _SCHEME.match(url):
        return url
    return f"https://{url.lstrip('/')}"


def rows_from_matrix(matrix: list[list[Any]], first_row: int = FIRST_DATA_ROW) -> list[FeedRow]:
    """Convert a Feed tab snapshot into rows, skipping blank ones.

    Row numbers are assigned before blank rows are dropped so every row keeps
    its original sheet position.
    """
    rows = [FeedRow.from_cells(first_row + offset, cells) for offset, cells in enumerate(matrix)]
    return [row for row in rows if not row.is_blank()]
