"""Storage collaborators used by the sync engines.

Row and column numbers are 1-based, matching spreadsheet conventions.
"""

from abc import ABC, abstractmethod
from typing import Any


class TabularStore(ABC):
    """A single worksheet of cells."""

    @abstractmethod
    def get_cell(self, row: int, col: int) -> Any:
        """Return the value of one cell, or ``""`` when empty."""

    @abstractmethod
    def set_cell(self, row: int, col: int, value: Any) -> None:
        """Write one cell."""

    @abstractmethod
    def get_range(self, start_row: int, start_col: int, num_rows: int = 0, num_cols: int = 0) -> list[list[Any]]:
        """Return a matrix of values.

        ``num_rows``/``num_cols`` of 0 extend the range to the last used
        row/column of the sheet.
        """

    @abstractmethod
    def set_range(self, row: int, col: int, values: list[list[Any]]) -> None:
        """Write a matrix of values starting at ``(row, col)``."""

    @abstractmethod
    def clear_range(self, row: int, col: int, num_rows: int = 0, num_cols: int = 0) -> None:
        """Clear a range. Zero sizes extend to the last used row/column."""

    @abstractmethod
    def append_row(self, values: list[Any]) -> None:
        """Append a row after the last used row."""

    def clear(self) -> None:
        """Clear every cell of the sheet."""
        self.clear_range(1, 1)


class BlobStore(ABC):
    """Folder-based binary storage (Google Drive)."""

    @abstractmethod
    def resolve_folder_id(self, identifier: str) -> str:
        """Accept a folder URL containing ``/folders/{id}`` or a bare id."""

    @abstractmethod
    def find_file_by_name(self, folder_id: str, filename: str) -> bytes:
        """Return the content of the file named exactly ``filename``."""

    @abstractmethod
    def get_file_bytes(self, file_id: str) -> bytes:
        """Return the content of a file by id."""
