"""Unit tests for the feed cleanup (removal) engine."""

from src.adapters.dv360.managers import CreativeManager, LineItemManager
from src.core.config import FeedSyncConfig
from src.core.feed import FeedRow
from src.services.removal import RemovalEngine
from src.services.results import RowAction
from tests.helpers.fakes import FakeDV360Client, InMemorySheet, feed_sheet


def _row(name: str, creative_id: str = "", line_item_id: str = "1", remove: str = "Remove") -> dict:
    return {
        "status": "Success",
        "name": name,
        "headline": "Headline",
        "body": "Body",
        "url": "example.com",
        "asset": "drive:folder-1",
        "filename": "a.jpg",
        "width": "300",
        "height": "250",
        "call_to_action": "Go",
        "creative_id": creative_id,
        "line_item_id": line_item_id,
        "remove": remove,
        "hash": "abc",
    }


def _engine(sheet: InMemorySheet, client: FakeDV360Client, **config) -> RemovalEngine:
    settings = FeedSyncConfig(advertiser_id="1001", **config)
    return RemovalEngine(
        sheet,
        settings,
        CreativeManager(client, "1001"),
        LineItemManager(client, "1001"),
        log_func=lambda msg: None,
    )


class TestRemovalEngine:
    """Tests for RemovalEngine."""

    def test_pause_and_unassign_without_delete(self):
        """Without the delete flag the creative is paused, unassigned and kept."""
        sheet = feed_sheet(_row("Old Ad", creative_id="77"))
        client = FakeDV360Client(line_items={"1": ["77", "10"]})

        report = _engine(sheet, client).run()

        assert client.count("pause_creative") == 1
        assert client.line_items["1"] == ["10"]
        assert client.count("archive_creative") == 0
        assert client.count("delete_creative") == 0
        assert [r.action for r in report.rows] == [RowAction.REMOVED]
        assert report.delete_correction == 0
        assert report.cleared_rows == [2]
        assert sheet.row(2) == [""] * 14

    def test_delete_flag_archives_and_deletes(self):
        sheet = feed_sheet(_row("Old Ad", creative_id="77"))
        client = FakeDV360Client(line_items={"1": ["77"]})

        report = _engine(sheet, client, delete_creative_on_remove=True).run()

        archive_index = next(i for i, (name, _) in enumerate(client.calls) if name == "archive_creative")
        delete_index = next(i for i, (name, _) in enumerate(client.calls) if name == "delete_creative")
        assert archive_index < delete_index
        assert [r.action for r in report.rows] == [RowAction.DELETED]
        assert report.delete_correction == 1

    def test_interleaved_rows(self):
        """Only flagged rows are cleared; the others are untouched."""
        sheet = feed_sheet(
            _row("Keep 1", creative_id="1", remove=""),
            _row("Drop 1", creative_id="2"),
            _row("Keep 2", creative_id="3", remove=""),
            _row("Drop 2", creative_id="4"),
        )
        client = FakeDV360Client(line_items={"1": ["1", "2", "3", "4"]})

        report = _engine(sheet, client).run()

        assert report.cleared_rows == [3, 5]
        assert sheet.field(2, "name") == "Keep 1"
        assert sheet.field(3, "name") == ""
        assert sheet.field(4, "name") == "Keep 2"
        assert sheet.field(5, "name") == ""
        assert client.line_items["1"] == ["1", "3"]

    def test_clear_index_uses_original_positions_by_default(self):
        sheet = feed_sheet(_row("A", creative_id="1"), _row("B", creative_id="2"))
        client = FakeDV360Client(line_items={"1": ["1", "2"]})

        report = _engine(sheet, client, delete_creative_on_remove=True).run()

        assert report.delete_correction == 2
        assert report.cleared_rows == [2, 3]

    def test_delete_correction_shifts_clear_index(self):
        """With the correction enabled each full delete shifts later clears up by one."""
        sheet = feed_sheet(_row("A", creative_id="1"), _row("B", creative_id="2"), _row("C", creative_id="3"))
        client = FakeDV360Client(line_items={"1": ["1", "2", "3"]})

        report = _engine(sheet, client, delete_creative_on_remove=True, apply_delete_correction=True).run()

        assert report.cleared_rows == [2, 2, 2]
        assert report.delete_correction == 3

    def test_correction_only_counts_full_deletes(self):
        sheet = feed_sheet(_row("A", creative_id="1"), _row("B", creative_id="2"))
        client = FakeDV360Client(line_items={"1": ["1", "2"]})

        report = _engine(sheet, client, apply_delete_correction=True).run()

        assert report.delete_correction == 0
        assert report.cleared_rows == [2, 3]

    def test_correction_skips_rows_without_creative(self):
        """A row cleared without a delete leaves the counter alone for later rows."""
        sheet = feed_sheet(_row("D1", creative_id="1"), _row("Never created"), _row("D2", creative_id="2"))
        client = FakeDV360Client(line_items={"1": ["1", "2"]})

        report = _engine(sheet, client, delete_creative_on_remove=True, apply_delete_correction=True).run()

        assert [r.action for r in report.rows] == [RowAction.DELETED, RowAction.REMOVED, RowAction.DELETED]
        assert report.delete_correction == 2
        assert report.cleared_rows == [2, 2, 3]

    def test_row_without_creative_is_cleared_without_calls(self):
        sheet = feed_sheet(_row("Never created"))
        client = FakeDV360Client()

        report = _engine(sheet, client, delete_creative_on_remove=True).run()

        assert client.calls == []
        assert report.cleared_rows == [2]
        assert report.rows[0].action == RowAction.REMOVED

    def test_failure_marks_row_and_continues(self):
        """A failed unassignment leaves the row in place, marked Failed."""
        sheet = feed_sheet(_row("Broken", creative_id="1", line_item_id="404"), _row("Fine", creative_id="2"))
        client = FakeDV360Client(line_items={"1": ["2"]})

        report = _engine(sheet, client).run()

        assert [r.action for r in report.rows] == [RowAction.FAILED, RowAction.REMOVED]
        assert report.failed[0].failed_line_item_ids == ["404"]
        assert sheet.field(2, "status") == "Failed"
        assert sheet.field(2, "name") == "Broken"
        assert sheet.field(3, "name") == ""
        assert report.cleared_rows == [3]

    def test_unflagged_rows_make_no_calls(self):
        sheet = feed_sheet(_row("Keep", creative_id="1", remove=""), _row("Wrong case", creative_id="2", remove="remove"))
        client = FakeDV360Client()

        report = _engine(sheet, client).run()

        assert report.rows == []
        assert client.calls == []

    def test_clear_index(self):
        engine = _engine(InMemorySheet(), FakeDV360Client(), apply_delete_correction=True)

        assert engine.clear_index(FeedRow(row_number=7), 2) == 5
