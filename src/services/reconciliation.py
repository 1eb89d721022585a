"""Feed reconciliation engine.

Walks the Feed tab row by row and brings DV360 in line with it:

- no creative ID: upload the main asset, create the creative, assign it to
  the row's line items
- creative ID and a changed fingerprint: update the live creative's name
  and texts, then (re-)assign it to the row's line items
- creative ID and an unchanged fingerprint: nothing to do

Every row is written back to its own position as soon as it is processed,
so progress survives a crash mid-run. An exception fails only its row.
"""

import logging
from collections.abc import Callable

from src.adapters.dv360.managers import AssetResolver, CreativeManager, LineItemManager
from src.core.config import FeedSyncConfig
from src.core.exceptions import AggregateError, ConfigurationError, FeedValidationError
from src.core.feed import FEED_COLUMN_COUNT, FIRST_DATA_ROW, FeedRow, RowStatus, rows_from_matrix
from src.core.hashing import fingerprint
from src.core.helpers.creative_helpers import StaticCreativeConfig, build_native_creative, creative_dimensions
from src.core.interfaces import TabularStore
from src.services.results import RowAction, RowResult

logger = logging.getLogger(__name__)


def read_feed(store: TabularStore) -> list[FeedRow]:
    """Snapshot the non-blank rows of the Feed tab."""
    return rows_from_matrix(store.get_range(FIRST_DATA_ROW, 1, 0, FEED_COLUMN_COUNT))


def write_row(store: TabularStore, row: FeedRow, row_number: int | None = None) -> None:
    """Write a row's 14 cells back to the Feed tab."""
    store.set_range(row_number or row.row_number, 1, [row.to_cells()])


class ReconciliationEngine:
    """Creates and updates creatives so DV360 matches the Feed tab."""

    def __init__(
        self,
        feed_store: TabularStore,
        config: FeedSyncConfig,
        creatives: CreativeManager,
        line_items: LineItemManager,
        assets: AssetResolver,
        log_func: Callable[[str], None] | None = None,
    ):
        """Initialize the reconciliation engine.

        Args:
            feed_store: Feed worksheet
            config: Run-scoped configuration
            creatives: Creative lifecycle manager
            line_items: Line item assignment manager
            assets: Asset resolver for new creatives
            log_func: Optional logging function
        """
        self.feed_store = feed_store
        self.config = config
        self.creatives = creatives
        self.line_items = line_items
        self.assets = assets
        self.log = log_func or (lambda msg: logger.info(msg))

    def run(self, rows: list[FeedRow] | None = None) -> list[RowResult]:
        """Reconcile every named row.

        Args:
            rows: Feed snapshot; read from the sheet when omitted

        Returns:
            One result per named row, in sheet order
        """
        if rows is None:
            rows = read_feed(self.feed_store)

        results: list[RowResult] = []
        for row in rows:
            if not row.name:
                continue

            if row.is_marked_for_removal():
                # Left for the next cleanup pass
                self.log(f"Skipping row {row.row_number}: marked for removal")
                results.append(
                    RowResult(
                        row_number=row.row_number,
                        name=row.name,
                        action=RowAction.SKIPPED,
                        status=RowStatus.parse(row.status),
                        creative_id=row.creative_id or None,
                    )
                )
                continue

            results.append(self.process_row(row))
        return results

    def process_row(self, row: FeedRow) -> RowResult:
        """Reconcile one row and write it back to the sheet.

        The row passed in is not modified; the written copy carries the new
        status, hash and (for new creatives) creative ID.
        """
        self.log(f"Processing row {row.row_number}")
        working = row.copy()

        try:
            action = self._reconcile(working)
            working.hash = fingerprint(working)
            working.status = RowStatus.SUCCESS.value
            result = RowResult(
                row_number=row.row_number,
                name=row.name,
                action=action,
                status=RowStatus.SUCCESS,
                creative_id=working.creative_id,
            )
        except Exception as e:
            logger.error(f"Error processing row {row.row_number}: {e}", exc_info=True)
            self.log(f"Row {row.row_number} failed: {e}")
            working.status = RowStatus.FAILED.value
            result = RowResult(
                row_number=row.row_number,
                name=row.name,
                action=RowAction.FAILED,
                status=RowStatus.FAILED,
                creative_id=working.creative_id or None,
                error=str(e),
                error_type=type(e).__name__,
                failed_line_item_ids=e.failed_ids if isinstance(e, AggregateError) else [],
            )
        finally:
            write_row(self.feed_store, working)

        return result

    def _reconcile(self, row: FeedRow) -> RowAction:
        missing = row.missing_fields()
        if missing:
            raise FeedValidationError(f"Missing required fields: {', '.join(missing)}", missing)

        current_hash = fingerprint(row)
        line_item_ids = row.line_item_ids()
        if not line_item_ids:
            raise FeedValidationError("No line item IDs after parsing lineItemId", ["line_item_id"])

        if not row.creative_id:
            row.creative_id = self._create_creative(row)
            self.line_items.assign_creative(line_item_ids, row.creative_id)
            return RowAction.CREATED

        if row.hash != current_hash:
            self.creatives.update_creative(row.creative_id, row)
            self.line_items.assign_creative(line_item_ids, row.creative_id)
            return RowAction.UPDATED

        return RowAction.UNCHANGED

    def _create_creative(self, row: FeedRow) -> str:
        if not self.config.logo_asset_id:
            raise ConfigurationError("Logo asset ID is not set on the Config sheet")

        # Fail on bad dimensions before uploading anything
        creative_dimensions(row)

        media_id = self.assets.resolve(row.asset, row.filename)
        payload = build_native_creative(
            row,
            media_id,
            StaticCreativeConfig(logo_asset_id=self.config.logo_asset_id, caption_url=self.config.caption_url),
        )
        return self.creatives.create_creative(payload)
