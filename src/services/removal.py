"""Feed cleanup (removal) engine.

Retires rows whose ``remove`` column holds the ``Remove`` marker: the
creative is paused and unassigned from the row's line items and, when the
Config tab asks for it, archived and deleted. The row is then cleared so the
reconciliation pass that follows treats it as absent.

The scan is a snapshot taken before any mutation. ``delete_correction``
counts fully deleted creatives; when ``apply_delete_correction`` is set the
clear index is shifted up by that count, which only lines up with the sheet
if every earlier deleted row was physically removed from it.
"""

import logging
from collections.abc import Callable

from src.adapters.dv360.managers import CreativeManager, LineItemManager
from src.core.config import FeedSyncConfig
from src.core.exceptions import AggregateError
from src.core.feed import FEED_COLUMN_COUNT, FeedRow, RowStatus
from src.core.interfaces import TabularStore
from src.services.reconciliation import read_feed, write_row
from src.services.results import RemovalReport, RowAction, RowResult

logger = logging.getLogger(__name__)


class RemovalEngine:
    """Pauses, unassigns and optionally deletes creatives flagged for removal."""

    def __init__(
        self,
        feed_store: TabularStore,
        config: FeedSyncConfig,
        creatives: CreativeManager,
        line_items: LineItemManager,
        log_func: Callable[[str], None] | None = None,
    ):
        """Initialize the removal engine.

        Args:
            feed_store: Feed worksheet
            config: Run-scoped configuration (delete and correction flags)
            creatives: Creative lifecycle manager
            line_items: Line item assignment manager
            log_func: Optional logging function
        """
        self.feed_store = feed_store
        self.config = config
        self.creatives = creatives
        self.line_items = line_items
        self.log = log_func or (lambda msg: logger.info(msg))

    def clear_index(self, row: FeedRow, delete_correction: int) -> int:
        if self.config.apply_delete_correction:
            return row.row_number - delete_correction
        return row.row_number

    def run(self, rows: list[FeedRow] | None = None) -> RemovalReport:
        """Retire every row flagged for removal.

        Args:
            rows: Feed snapshot; read from the sheet when omitted

        Returns:
            Report with one result per flagged row and the final delete correction
        """
        self.log("Cleaning up...")

        if rows is None:
            rows = read_feed(self.feed_store)

        report = RemovalReport()
        for row in rows:
            if not row.is_marked_for_removal():
                continue

            target_row = self.clear_index(row, report.delete_correction)
            try:
                deleted = self._retire(row)
                self.feed_store.clear_range(target_row, 1, 1, FEED_COLUMN_COUNT)
                report.cleared_rows.append(target_row)
                if deleted:
                    report.delete_correction += 1

                report.rows.append(
                    RowResult(
                        row_number=row.row_number,
                        name=row.name,
                        action=RowAction.DELETED if deleted else RowAction.REMOVED,
                        status=RowStatus.SUCCESS,
                        creative_id=row.creative_id or None,
                    )
                )
            except Exception as e:
                logger.error(f"Error removing row {row.row_number}: {e}", exc_info=True)
                self.log(f"Removing row {row.row_number} failed: {e}")

                failed = row.copy()
                failed.status = RowStatus.FAILED.value
                write_row(self.feed_store, failed, target_row)

                report.rows.append(
                    RowResult(
                        row_number=row.row_number,
                        name=row.name,
                        action=RowAction.FAILED,
                        status=RowStatus.FAILED,
                        creative_id=row.creative_id or None,
                        error=str(e),
                        error_type=type(e).__name__,
                        failed_line_item_ids=e.failed_ids if isinstance(e, AggregateError) else [],
                    )
                )

        return report

    def _retire(self, row: FeedRow) -> bool:
        """Retire the row's creative; returns True when it was deleted."""
        if not row.creative_id:
            self.log(f"Row {row.row_number} ({row.name}) has no creative; clearing only")
            return False

        self.log(f"Pausing {row.name}")
        self.creatives.pause_creative(row.creative_id)
        self.line_items.unassign_creative(row.line_item_ids(), row.creative_id)

        if not self.config.delete_creative_on_remove:
            return False

        self.creatives.archive_and_delete_creative(row.creative_id)
        return True
