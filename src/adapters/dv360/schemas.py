"""DV360 wire schemas for native creatives and line items.

Only the fields this tool writes are modelled. Live resources read back from
the API are kept as plain dicts so server-generated fields round-trip
untouched on partial updates.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EntityStatus(str, Enum):
    ACTIVE = "ENTITY_STATUS_ACTIVE"
    PAUSED = "ENTITY_STATUS_PAUSED"
    ARCHIVED = "ENTITY_STATUS_ARCHIVED"


class AssetRole(str, Enum):
    MAIN = "ASSET_ROLE_MAIN"
    HEADLINE = "ASSET_ROLE_HEADLINE"
    BODY = "ASSET_ROLE_BODY"
    ICON = "ASSET_ROLE_ICON"
    CAPTION_URL = "ASSET_ROLE_CAPTION_URL"
    CALL_TO_ACTION = "ASSET_ROLE_CALL_TO_ACTION"


class CreativeField(str, Enum):
    """Top-level creative fields this tool may change through a field mask."""

    DISPLAY_NAME = "displayName"
    ASSETS = "assets"
    ENTITY_STATUS = "entityStatus"


class LineItemField(str, Enum):
    CREATIVE_IDS = "creativeIds"
    ENTITY_STATUS = "entityStatus"


# Server-generated image references; sending them back is rejected
INTERNAL_CONTENT_PREFIX = "/simgad"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    def to_wire(self) -> dict[str, Any]:
        """Serialize with API field names, omitting unset values."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Asset(_WireModel):
    """Either a reference to uploaded media or inline text content."""

    media_id: str | None = Field(default=None, alias="mediaId")
    content: str | None = None


class AssetAssignment(_WireModel):
    asset: Asset
    role: AssetRole


class Dimensions(_WireModel):
    width_pixels: int = Field(..., gt=0, alias="widthPixels")
    height_pixels: int = Field(..., gt=0, alias="heightPixels")


class ExitEvent(_WireModel):
    type: str = "EXIT_EVENT_TYPE_DEFAULT"
    url: str


class NativeCreativePayload(_WireModel):
    """Request body for creating a hosted native creative."""

    display_name: str = Field(..., alias="displayName")
    entity_status: EntityStatus = Field(default=EntityStatus.ACTIVE, alias="entityStatus")
    creative_type: str = Field(default="CREATIVE_TYPE_NATIVE", alias="creativeType")
    hosting_source: str = Field(default="HOSTING_SOURCE_HOSTED", alias="hostingSource")
    dimensions: Dimensions
    assets: list[AssetAssignment]
    exit_events: list[ExitEvent] = Field(..., alias="exitEvents")

    def asset_for(self, role: AssetRole) -> Asset | None:
        for assignment in self.assets:
            if assignment.role == role:
                return assignment.asset
        return None


class LineItemCreativesUpdate(_WireModel):
    """Partial line item body used to (re)write the assigned creative list."""

    advertiser_id: str = Field(..., alias="advertiserId")
    line_item_id: str = Field(..., alias="lineItemId")
    creative_ids: list[str] = Field(default_factory=list, alias="creativeIds")
