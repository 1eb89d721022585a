"""Unit tests for the Google Drive blob store."""

from unittest.mock import MagicMock, patch

import pytest
from googleapiclient.errors import HttpError

from src.adapters.google.drive import DriveBlobStore, extract_folder_id
from src.core.exceptions import NotFoundError, UpstreamError


def _http_error(status: int) -> HttpError:
    return HttpError(MagicMock(status=status, reason="error"), b"{}")


def _downloader(content: bytes):
    """Build a MediaIoBaseDownload stand-in that writes ``content`` in one chunk."""

    def factory(buffer, request):
        downloader = MagicMock()

        def next_chunk():
            buffer.write(content)
            return None, True

        downloader.next_chunk.side_effect = next_chunk
        return downloader

    return factory


class TestExtractFolderId:
    """Tests for extract_folder_id."""

    def test_folder_url(self):
        assert extract_folder_id("https://drive.google.com/drive/folders/1AbC-d_9?usp=sharing") == "1AbC-d_9"

    def test_bare_id(self):
        assert extract_folder_id(" 1AbC-d_9 ") == "1AbC-d_9"

    def test_url_without_folder_raises(self):
        with pytest.raises(NotFoundError):
            extract_folder_id("https://drive.google.com/file/d/xyz/view")


class TestDriveBlobStore:
    """Tests for DriveBlobStore."""

    @patch("src.adapters.google.drive.MediaIoBaseDownload")
    def test_find_file_by_name_downloads_exact_match(self, mock_download):
        mock_download.side_effect = _downloader(b"JPEG")
        api = MagicMock()
        api.files.return_value.list.return_value.execute.return_value = {
            "files": [{"id": "f-2", "name": "banner.jpg.bak"}, {"id": "f-1", "name": "banner.jpg"}]
        }
        store = DriveBlobStore(service=api)

        content = store.find_file_by_name("folder-1", "banner.jpg")

        assert content == b"JPEG"
        query = api.files.return_value.list.call_args.kwargs["q"]
        assert "'folder-1' in parents" in query
        assert "name = 'banner.jpg'" in query
        api.files.return_value.get_media.assert_called_once_with(fileId="f-1", supportsAllDrives=True)

    def test_find_file_escapes_quotes(self):
        api = MagicMock()
        api.files.return_value.list.return_value.execute.return_value = {"files": []}

        with pytest.raises(NotFoundError):
            DriveBlobStore(service=api).find_file_by_name("folder-1", "it's.jpg")

        assert "name = 'it\\'s.jpg'" in api.files.return_value.list.call_args.kwargs["q"]

    def test_missing_file_raises(self):
        api = MagicMock()
        api.files.return_value.list.return_value.execute.return_value = {"files": []}

        with pytest.raises(NotFoundError):
            DriveBlobStore(service=api).find_file_by_name("folder-1", "banner.jpg")

    def test_missing_folder_raises_not_found(self):
        api = MagicMock()
        api.files.return_value.list.return_value.execute.side_effect = _http_error(404)

        with pytest.raises(NotFoundError):
            DriveBlobStore(service=api).find_file_by_name("nope", "banner.jpg")

    def test_other_errors_raise_upstream(self):
        api = MagicMock()
        api.files.return_value.list.return_value.execute.side_effect = _http_error(500)

        with pytest.raises(UpstreamError):
            DriveBlobStore(service=api).find_file_by_name("folder-1", "banner.jpg")

    @patch("src.adapters.google.drive.MediaIoBaseDownload")
    def test_get_file_bytes_not_found(self, mock_download):
        downloader = MagicMock()
        downloader.next_chunk.side_effect = _http_error(404)
        mock_download.return_value = downloader

        with pytest.raises(NotFoundError):
            DriveBlobStore(service=MagicMock()).get_file_bytes("missing")

    def test_resolve_folder_id(self):
        store = DriveBlobStore(service=MagicMock())

        assert store.resolve_folder_id("https://drive.google.com/drive/folders/abc") == "abc"
