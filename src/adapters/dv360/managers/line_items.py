"""DV360 Line Item Manager.

Assigns creatives to and unassigns them from line items. DV360 has no
"add creative" call: the line item's full ``creativeIds`` list is read,
edited and written back under a ``creativeIds`` field mask.

A failure on one line item is logged and the loop moves on to the next;
afterwards a single :class:`AggregateError` reports every failure.
"""

import logging
from collections.abc import Callable

from src.adapters.dv360.client import DV360Client
from src.adapters.dv360.schemas import LineItemCreativesUpdate, LineItemField
from src.core.exceptions import AggregateError

logger = logging.getLogger(__name__)


class LineItemManager:
    """Manages creative assignment on line items for one advertiser."""

    def __init__(
        self,
        client: DV360Client,
        advertiser_id: str,
        log_func: Callable[[str], None] | None = None,
    ):
        """Initialize the line item manager.

        Args:
            client: DV360 API client
            advertiser_id: DV360 advertiser ID
            log_func: Optional logging function
        """
        self.client = client
        self.advertiser_id = advertiser_id
        self.log = log_func or (lambda msg: logger.info(msg))

    def get_creative_ids(self, line_item_id: str) -> list[str]:
        """Return the creative IDs currently assigned to a line item."""
        line_item = self.client.get_line_item(self.advertiser_id, line_item_id)
        return [str(creative_id) for creative_id in line_item.get("creativeIds", [])]

    def _write_creative_ids(self, line_item_id: str, creative_ids: list[str]) -> None:
        body = LineItemCreativesUpdate(
            advertiser_id=self.advertiser_id,
            line_item_id=line_item_id,
            creative_ids=creative_ids,
        )
        self.client.update_line_item(body.to_wire(), LineItemField.CREATIVE_IDS.value)

    def assign_creative(self, line_item_ids: list[str], creative_id: str) -> None:
        """Append ``creative_id`` to every line item's creative list.

        Duplicates are not filtered out.

        Raises:
            AggregateError: If at least one line item could not be updated
        """
        failures: list[tuple[str, Exception]] = []

        for line_item_id in line_item_ids:
            try:
                existing = self.get_creative_ids(line_item_id)
                self.log(f"Assigning {creative_id} to {line_item_id}")
                self._write_creative_ids(line_item_id, existing + [creative_id])
            except Exception as e:
                logger.error(f"Error assigning creative {creative_id} to {line_item_id}: {e}", exc_info=True)
                self.log(f"Failed to assign Creative to Line Item {line_item_id}: {e}")
                failures.append((line_item_id, e))

        if failures:
            raise AggregateError(
                f"Assigning Creative to {len(failures)} of {len(line_item_ids)} Line Items failed: "
                f"{', '.join(line_item_id for line_item_id, _ in failures)}",
                failures,
            )

    def unassign_creative(self, line_item_ids: list[str], creative_id: str) -> None:
        """Remove every occurrence of ``creative_id`` from each line item.

        Raises:
            AggregateError: If at least one line item could not be updated
        """
        failures: list[tuple[str, Exception]] = []

        for line_item_id in line_item_ids:
            try:
                remaining = [cid for cid in self.get_creative_ids(line_item_id) if cid != creative_id]
                self.log(f"Unassigning {creative_id} from {line_item_id}")
                self._write_creative_ids(line_item_id, remaining)
            except Exception as e:
                logger.error(f"Error unassigning creative {creative_id} from {line_item_id}: {e}", exc_info=True)
                self.log(f"Failed to unassign Creative from Line Item {line_item_id}: {e}")
                failures.append((line_item_id, e))

        if failures:
            raise AggregateError(
                f"Unassigning Creative from {len(failures)} of {len(line_item_ids)} Line Items failed: "
                f"{', '.join(line_item_id for line_item_id, _ in failures)}",
                failures,
            )
