"""Google Workspace adapters: Sheets worksheets, Drive folders and credentials."""

from .credentials import GoogleTokenProvider, load_credentials
from .drive import DriveBlobStore, extract_folder_id
from .sheets import SheetsService, SheetsWorksheet, a1_range, column_letter

__all__ = [
    "DriveBlobStore",
    "GoogleTokenProvider",
    "SheetsService",
    "SheetsWorksheet",
    "a1_range",
    "column_letter",
    "extract_folder_id",
    "load_credentials",
]
