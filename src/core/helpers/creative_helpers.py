"""Helpers for building and diffing DV360 native creative payloads.

Everything here is pure: no I/O, no API calls. The reconciliation engine
feeds rows and static config in and sends the results to the client.
"""

import copy
import logging
from typing import Any

from pydantic import BaseModel

from src.adapters.dv360.schemas import (
    INTERNAL_CONTENT_PREFIX,
    Asset,
    AssetAssignment,
    AssetRole,
    CreativeField,
    Dimensions,
    ExitEvent,
    NativeCreativePayload,
)
from src.core.config import BODY_MAX_LENGTH, CALL_TO_ACTION_MAX_LENGTH, HEADLINE_MAX_LENGTH
from src.core.exceptions import FeedValidationError
from src.core.feed import FeedRow, normalize_url

logger = logging.getLogger(__name__)

ELLIPSIS = "..."

# Fields compared when computing an update mask, in mask order
MUTABLE_CREATIVE_FIELDS: tuple[CreativeField, ...] = (
    CreativeField.DISPLAY_NAME,
    CreativeField.ASSETS,
    CreativeField.ENTITY_STATUS,
)


class StaticCreativeConfig(BaseModel):
    """Constants shared by every creative in a run."""

    logo_asset_id: str
    caption_url: str


def truncate(text: str, max_length: int) -> str:
    """Shorten ``text`` to ``max_length`` characters, ending in ``...``.

    >>> truncate("012345678901234567890123456789", 10)
    '0123456...'
    >>> truncate("short", 10)
    'short'
    """
    if len(text) > max_length:
        return f"{text[: max_length - len(ELLIPSIS)]}{ELLIPSIS}"
    return text


def parse_dimension(value: Any) -> int:
    """Parse a width/height cell, defaulting to 1 when absent or non-numeric.

    Cells are read as displayed, so thousands separators are dropped first.

    >>> parse_dimension("1,200")
    1200
    >>> parse_dimension("inf")
    1
    """
    try:
        return int(float(str(value).strip().replace(",", "")))
    except (TypeError, ValueError, OverflowError):
        return 1


def creative_dimensions(row: FeedRow) -> Dimensions:
    """Validate and return the creative dimensions of a row.

    Raises:
        FeedValidationError: If url, width and height are all missing, or a
            dimension is not positive
    """
    if not row.url.strip() and not row.width.strip() and not row.height.strip():
        raise FeedValidationError("Creative needs a url, width and height", ["url", "width", "height"])

    width = parse_dimension(row.width)
    height = parse_dimension(row.height)
    if width <= 0 or height <= 0:
        raise FeedValidationError(f"Invalid dimensions {width}x{height}: width and height must be positive")

    return Dimensions(width_pixels=width, height_pixels=height)


def build_native_creative(row: FeedRow, main_media_id: str, static_config: StaticCreativeConfig) -> NativeCreativePayload:
    """Assemble the native creative payload for a feed row.

    Args:
        row: Feed row supplying name, texts, url and dimensions
        main_media_id: Media ID of the uploaded main image
        static_config: Logo media ID and caption URL from the Config tab

    Returns:
        Creative payload with the six role-tagged assets and one exit event

    Raises:
        FeedValidationError: See :func:`creative_dimensions`
    """
    return NativeCreativePayload(
        display_name=row.name,
        dimensions=creative_dimensions(row),
        assets=[
            AssetAssignment(role=AssetRole.MAIN, asset=Asset(media_id=main_media_id)),
            AssetAssignment(role=AssetRole.HEADLINE, asset=Asset(content=truncate(row.headline, HEADLINE_MAX_LENGTH))),
            AssetAssignment(role=AssetRole.BODY, asset=Asset(content=truncate(row.body, BODY_MAX_LENGTH))),
            AssetAssignment(role=AssetRole.ICON, asset=Asset(media_id=static_config.logo_asset_id)),
            AssetAssignment(role=AssetRole.CAPTION_URL, asset=Asset(content=static_config.caption_url)),
            AssetAssignment(
                role=AssetRole.CALL_TO_ACTION,
                asset=Asset(content=truncate(row.call_to_action, CALL_TO_ACTION_MAX_LENGTH)),
            ),
        ],
        exit_events=[ExitEvent(url=normalize_url(row.url))],
    )


def find_asset(creative: dict[str, Any], role: AssetRole | str) -> dict[str, Any] | None:
    """Return the asset assignment with the given role, if any."""
    role_value = role.value if isinstance(role, AssetRole) else role
    for assignment in creative.get("assets", []):
        if assignment.get("role") == role_value:
            return assignment
    return None


def replace_asset_content(creative: dict[str, Any], role: AssetRole, content: str) -> dict[str, Any]:
    """Return a copy of ``creative`` with the content of one role replaced.

    Role tags are unique per creative, so the first match is the only one.

    Raises:
        FeedValidationError: If the creative has no asset with that role
    """
    updated = copy.deepcopy(creative)
    assignment = find_asset(updated, role)
    if assignment is None:
        raise FeedValidationError(f"Creative {creative.get('creativeId')} has no {role.value} asset")

    assignment.setdefault("asset", {})["content"] = content
    return updated


def strip_internal_asset_content(creative: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``creative`` without server-generated asset content.

    Contents starting with ``/simgad`` are internal image references the API
    rejects when sent back verbatim.
    """
    cleaned = copy.deepcopy(creative)
    for assignment in cleaned.get("assets", []):
        asset = assignment.get("asset") or {}
        content = asset.get("content")
        if isinstance(content, str) and content.startswith(INTERNAL_CONTENT_PREFIX):
            del asset["content"]
    return cleaned


def compute_update_mask(original: dict[str, Any], updated: dict[str, Any]) -> list[str]:
    """List the mutable top-level fields whose values differ.

    Args:
        original: Creative as it was read
        updated: Creative with local edits applied

    Returns:
        Field names in ``MUTABLE_CREATIVE_FIELDS`` order, empty if nothing changed
    """
    return [field.value for field in MUTABLE_CREATIVE_FIELDS if original.get(field.value) != updated.get(field.value)]


def apply_row_to_creative(creative: dict[str, Any], row: FeedRow) -> dict[str, Any]:
    """Apply the row's display name, headline, body and CTA to a live creative.

    Args:
        creative: Live creative, already stripped of internal content
        row: Feed row with the desired values

    Returns:
        New creative dict; ``creative`` is not modified
    """
    updated = copy.deepcopy(creative)

    if row.name:
        updated[CreativeField.DISPLAY_NAME.value] = row.name

    texts = (
        (AssetRole.HEADLINE, truncate(row.headline, HEADLINE_MAX_LENGTH)),
        (AssetRole.BODY, truncate(row.body, BODY_MAX_LENGTH)),
        (AssetRole.CALL_TO_ACTION, truncate(row.call_to_action, CALL_TO_ACTION_MAX_LENGTH)),
    )
    for role, content in texts:
        if content:
            updated = replace_asset_content(updated, role, content)

    return updated
