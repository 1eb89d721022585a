"""Helper modules for native feed sync.

- creative_helpers: Native creative payload building, truncation and
  field-mask diffing
"""

from src.core.helpers.creative_helpers import (
    MUTABLE_CREATIVE_FIELDS,
    StaticCreativeConfig,
    apply_row_to_creative,
    build_native_creative,
    compute_update_mask,
    creative_dimensions,
    find_asset,
    parse_dimension,
    replace_asset_content,
    strip_internal_asset_content,
    truncate,
)

__all__ = [
    "apply_row_to_creative",
    "build_native_creative",
    "compute_update_mask",
    "creative_dimensions",
    "find_asset",
    "parse_dimension",
    "replace_asset_content",
    "strip_internal_asset_content",
    "truncate",
    "StaticCreativeConfig",
    # Constants
    "MUTABLE_CREATIVE_FIELDS",
]
