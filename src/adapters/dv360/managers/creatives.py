"""DV360 Creative Manager.

Handles the native creative lifecycle:

- create: upload-backed payload built from a feed row
- update: role-targeted content replacement on the live creative, sent as a
  partial update with a field mask computed from the diff
- retire: pause, then optionally archive and delete (DV360 rejects deleting
  a creative that is not archived)
"""

import logging
from collections.abc import Callable
from typing import Any

from src.adapters.dv360.client import DV360Client, join_update_mask
from src.adapters.dv360.schemas import AssetRole, NativeCreativePayload
from src.core.exceptions import UpstreamError
from src.core.feed import FeedRow
from src.core.helpers.creative_helpers import (
    apply_row_to_creative,
    compute_update_mask,
    find_asset,
    strip_internal_asset_content,
)

logger = logging.getLogger(__name__)


class CreativeManager:
    """Manages native creative operations for one advertiser."""

    def __init__(
        self,
        client: DV360Client,
        advertiser_id: str,
        log_func: Callable[[str], None] | None = None,
    ):
        """Initialize the creative manager.

        Args:
            client: DV360 API client
            advertiser_id: DV360 advertiser ID
            log_func: Optional logging function
        """
        self.client = client
        self.advertiser_id = advertiser_id
        self.log = log_func or (lambda msg: logger.info(msg))

    def create_creative(self, payload: NativeCreativePayload) -> str:
        """Create a creative and return its ID.

        Raises:
            UpstreamError: If the API response carries no creative ID
        """
        self.log(f"Creating creative {payload.display_name}")

        result = self.client.create_creative(self.advertiser_id, payload.to_wire())
        creative_id = result.get("creativeId")
        if not creative_id:
            raise UpstreamError(
                f"Error creating creative {payload.display_name}: no creativeId in response",
                response_body=result,
            )

        self.log(f"Creative {creative_id} created")
        return str(creative_id)

    def update_creative(self, creative_id: str, row: FeedRow) -> list[str]:
        """Bring a live creative's name and texts in line with a feed row.

        Args:
            creative_id: Existing creative ID
            row: Feed row with the desired values

        Returns:
            Update mask that was sent; empty when the live creative already matched
        """
        self.log(f"Updating creative {creative_id}")

        live = self.client.get_creative(self.advertiser_id, creative_id)
        if not live:
            raise UpstreamError(f"Creative {creative_id} returned an empty response")

        original = strip_internal_asset_content(live)
        original.setdefault("advertiserId", self.advertiser_id)
        original.setdefault("creativeId", creative_id)

        updated = apply_row_to_creative(original, row)
        update_mask = compute_update_mask(original, updated)

        if not update_mask:
            self.log(f"Creative {creative_id} already up to date")
            return []

        self.client.update_creative(updated, join_update_mask(update_mask))
        self.log(f"Creative {creative_id} updated ({', '.join(update_mask)})")
        return update_mask

    def pause_creative(self, creative_id: str) -> dict[str, Any]:
        self.log(f"Pausing creative {creative_id}")
        return self.client.pause_creative(self.advertiser_id, creative_id)

    def archive_and_delete_creative(self, creative_id: str) -> None:
        """Archive, then delete a creative."""
        self.log(f"Archiving creative {creative_id}")
        self.client.archive_creative(self.advertiser_id, creative_id)

        self.log(f"Deleting creative {creative_id}")
        self.client.delete_creative(self.advertiser_id, creative_id)

    def get_icon_media_id(self, creative_id: str) -> str | None:
        """Return the media ID of a creative's icon asset, if it has one."""
        creative = self.client.get_creative(self.advertiser_id, creative_id)
        assignment = find_asset(creative, AssetRole.ICON)
        if not assignment:
            return None
        media_id = (assignment.get("asset") or {}).get("mediaId")
        return str(media_id) if media_id else None
