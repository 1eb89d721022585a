"""DV360 adapter managers.

Managers handle specific operations for the DV360 adapter: creative
lifecycle, line item assignment and asset resolution.
"""

from .assets import AssetResolver, is_drive_reference
from .creatives import CreativeManager
from .line_items import LineItemManager

__all__ = [
    "AssetResolver",
    "CreativeManager",
    "LineItemManager",
    "is_drive_reference",
]
