"""Google Drive folders as a :class:`BlobStore`."""

import io
import logging
import re

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload

from src.core.exceptions import NotFoundError, UpstreamError
from src.core.interfaces import BlobStore

logger = logging.getLogger(__name__)

_FOLDER_URL = re.compile(r"/folders/([\w-]+)")


def extract_folder_id(identifier: str) -> str:
    """Extract a folder ID from a Drive folder URL, or return a bare ID.

    Raises:
        NotFoundError: If a URL carries no ``/folders/{id}`` segment
    """
    identifier = identifier.strip()
    if identifier.startswith("http"):
        match = _FOLDER_URL.search(identifier)
        if match:
            return match.group(1)
        raise NotFoundError(f"Could not extract folder ID from '{identifier}'")
    return identifier


class DriveBlobStore(BlobStore):
    """Reads files from Drive folders through the Drive v3 API."""

    def __init__(self, credentials=None, service=None):
        self._service = service or build("drive", "v3", credentials=credentials, cache_discovery=False)

    def resolve_folder_id(self, identifier: str) -> str:
        return extract_folder_id(identifier)

    def find_file_by_name(self, folder_id: str, filename: str) -> bytes:
        """Download the file named exactly ``filename`` from a folder.

        Raises:
            NotFoundError: If the folder does not exist or holds no such file
            UpstreamError: On other Drive API failures
        """
        escaped_name = filename.replace("\\", "\\\\").replace("'", "\\'")
        query = " and ".join(
            [
                f"'{folder_id}' in parents",
                "trashed = false",
                f"name = '{escaped_name}'",
            ]
        )
        try:
            response = (
                self._service.files()
                .list(
                    q=query,
                    spaces="drive",
                    fields="files(id, name)",
                    supportsAllDrives=True,
                    includeItemsFromAllDrives=True,
                )
                .execute()
            )
        except HttpError as e:
            if getattr(getattr(e, "resp", None), "status", None) == 404:
                raise NotFoundError(f"Drive folder {folder_id} not found") from e
            raise UpstreamError(f"Drive lookup of {filename} in {folder_id} failed: {e}") from e

        # The query is a filter, not an exact match guarantee
        matches = [item for item in response.get("files", []) if item.get("name") == filename]
        if not matches:
            raise NotFoundError(f"File {filename} not found in {folder_id}")

        return self.get_file_bytes(matches[0]["id"])

    def get_file_bytes(self, file_id: str) -> bytes:
        """Download a file's content.

        Raises:
            NotFoundError: If the file does not exist
            UpstreamError: On other Drive API failures
        """
        request = self._service.files().get_media(fileId=file_id, supportsAllDrives=True)
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(buffer, request)
        try:
            done = False
            while not done:
                _, done = downloader.next_chunk()
        except HttpError as e:
            if getattr(getattr(e, "resp", None), "status", None) == 404:
                raise NotFoundError(f"Drive file {file_id} not found") from e
            raise UpstreamError(f"Drive download of {file_id} failed: {e}") from e
        return buffer.getvalue()
