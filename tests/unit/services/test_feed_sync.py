"""Unit tests for the feed sync service."""

from unittest.mock import MagicMock, patch

import pytest

from src.core.audit_logger import AuditLogger
from src.core.config import ConnectionConfig
from src.core.exceptions import ConfigurationError
from src.services.feed_sync import FeedSyncService
from src.services.results import RowAction
from tests.helpers.fakes import FakeDV360Client, InMemoryBlobStore, InMemorySheet, config_sheet, feed_sheet

ROW = {
    "name": "Summer Ad",
    "headline": "Sunny days",
    "body": "Everything for the beach",
    "url": "example.com/summer",
    "asset": "drive:",
    "filename": "summer.jpg",
    "width": "1200",
    "height": "627",
    "call_to_action": "Shop now",
    "line_item_id": "1",
}


def _service(feed: InMemorySheet, client: FakeDV360Client, **config) -> tuple[FeedSyncService, InMemorySheet]:
    log_sheet = InMemorySheet()
    service = FeedSyncService(
        client=client,
        feed_store=feed,
        config_store=config_sheet(drive_folder_id="folder-1", **config),
        blob_store=InMemoryBlobStore({"folder-1": {"summer.jpg": b"SUMMER"}}),
        audit_logger=AuditLogger(log_sheet),
    )
    return service, log_sheet


class TestFeedSyncService:
    """Tests for FeedSyncService."""

    def test_process_feed_cleans_up_then_reconciles(self):
        """Removed rows are cleared first and never reach reconciliation."""
        feed = feed_sheet(
            {**ROW, "name": "Old Ad", "creative_id": "77", "remove": "Remove"},
            ROW,
        )
        client = FakeDV360Client(line_items={"1": ["77"]})
        service, _ = _service(feed, client)

        report = service.process_feed()

        assert report.advertiser_id == "1001"
        assert [r.action for r in report.removal.rows] == [RowAction.REMOVED]
        assert [r.action for r in report.rows] == [RowAction.CREATED]
        assert report.count(RowAction.CREATED) == 1
        assert not report.has_failures
        assert feed.field(2, "name") == ""
        assert feed.field(3, "creative_id") == "5001"
        assert client.line_items["1"] == ["5001"]

    def test_bare_drive_reference_uses_config_folder(self):
        feed = feed_sheet(ROW)
        client = FakeDV360Client(line_items={"1": []})
        service, _ = _service(feed, client)

        service.process_feed()

        assert client.args_of("upload_asset")[0] == ("1001", b"SUMMER", "summer.jpg")

    def test_delete_flag_from_config_sheet(self):
        feed = feed_sheet({**ROW, "creative_id": "77", "remove": "Remove"})
        client = FakeDV360Client(line_items={"1": ["77"]})
        service, _ = _service(feed, client, delete_creative_on_remove="TRUE")

        report = service.cleanup_feed()

        assert report.delete_correction == 1
        assert client.count("delete_creative") == 1

    def test_failures_are_reported(self):
        feed = feed_sheet({**ROW, "url": ""})
        service, _ = _service(feed, FakeDV360Client(line_items={"1": []}))

        report = service.process_feed()

        assert report.has_failures
        assert report.failed[0].row_number == 2

    def test_audit_log_is_mirrored_to_log_sheet(self):
        service, log_sheet = _service(feed_sheet(ROW), FakeDV360Client(line_items={"1": []}))

        service.process_feed()

        messages = [log_sheet.get_cell(row, 2) for row in range(1, log_sheet.last_row + 1)]
        assert messages[0] == "Starting feed sync for advertiser 1001"
        assert "Cleaning up..." in messages
        assert messages[-1].startswith("Feed sync finished: 1 created")

    def test_missing_advertiser_raises(self):
        service = FeedSyncService(
            client=FakeDV360Client(),
            feed_store=feed_sheet(ROW),
            config_store=config_sheet(advertiser_id=""),
        )

        with pytest.raises(ConfigurationError):
            service.process_feed()

    @patch("src.services.feed_sync.DriveBlobStore")
    @patch("src.services.feed_sync.SheetsService")
    @patch("src.services.feed_sync.load_credentials")
    def test_from_connection_wires_worksheets(self, mock_credentials, mock_sheets, mock_drive):
        credentials = MagicMock(valid=True, token="t")
        mock_credentials.return_value = credentials
        connection = ConnectionConfig(
            spreadsheet_id="sheet-1",
            credentials_file="/tmp/sa.json",
            api_base_url="http://localhost/v3",
            timeout=12,
        )

        service = FeedSyncService.from_connection(connection)

        mock_credentials.assert_called_once_with("/tmp/sa.json")
        mock_sheets.assert_called_once_with("sheet-1", credentials=credentials)
        titles = [call.args[0] for call in mock_sheets.return_value.worksheet.call_args_list]
        assert titles == ["Feed", "Config", "Log"]
        mock_drive.assert_called_once_with(credentials=credentials)
        assert service.client.base_url == "http://localhost/v3"
        assert service.client.timeout == 12
        assert service.client.token_provider() == "t"
