"""Display & Video 360 adapter.

Client and wire schemas for native creatives, line items and assets.
Managers live in :mod:`src.adapters.dv360.managers`.
"""

from .client import DV360APIError, DV360Client, join_update_mask
from .schemas import (
    AssetRole,
    CreativeField,
    EntityStatus,
    LineItemField,
    NativeCreativePayload,
)

__all__ = [
    "AssetRole",
    "CreativeField",
    "DV360APIError",
    "DV360Client",
    "EntityStatus",
    "LineItemField",
    "NativeCreativePayload",
    "join_update_mask",
]
