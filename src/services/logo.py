"""Logo asset assignment.

Every native creative shares one icon asset whose media ID lives on the
Config tab. These flows produce that media ID and store it.
"""

import logging
from collections.abc import Callable

from src.adapters.dv360.client import DV360Client
from src.adapters.dv360.managers import AssetResolver, CreativeManager
from src.core.config import CONFIG_CELLS, DEFAULT_ASSET_FILENAME
from src.core.exceptions import ConfigurationError, NotFoundError
from src.core.interfaces import BlobStore, TabularStore

logger = logging.getLogger(__name__)


class LogoService:
    """Sets the logo asset ID on the Config tab."""

    def __init__(
        self,
        client: DV360Client,
        config_store: TabularStore,
        advertiser_id: str,
        blob_store: BlobStore | None = None,
        log_func: Callable[[str], None] | None = None,
    ):
        self.client = client
        self.config_store = config_store
        self.advertiser_id = advertiser_id
        self.blob_store = blob_store
        self.log = log_func or (lambda msg: logger.info(msg))
        self.assets = AssetResolver(client, advertiser_id, blob_store=blob_store, log_func=self.log)

    def _store(self, media_id: str) -> str:
        row, col = CONFIG_CELLS["logo_asset_id"]
        self.config_store.set_cell(row, col, media_id)
        self.log(f"Successfully set Logo Asset ID to {media_id}")
        return media_id

    def set_from_creative(self, creative_id: str) -> str:
        """Reuse the icon asset of an existing creative.

        Raises:
            NotFoundError: If the creative has no icon asset
        """
        creatives = CreativeManager(self.client, self.advertiser_id, log_func=self.log)
        media_id = creatives.get_icon_media_id(creative_id)
        if not media_id:
            raise NotFoundError(f"Creative {creative_id} has no icon asset")
        return self._store(media_id)

    def set_from_url(self, url: str, filename: str = DEFAULT_ASSET_FILENAME) -> str:
        """Upload a public image URL as the logo."""
        media_id = self.assets.upload(self.assets.fetch_url(url), filename)
        return self._store(media_id)

    def set_from_drive(self, file_id: str, filename: str = DEFAULT_ASSET_FILENAME) -> str:
        """Upload a Drive file as the logo."""
        if self.blob_store is None:
            raise ConfigurationError("Drive access is not configured")
        media_id = self.assets.upload(self.blob_store.get_file_bytes(file_id), filename)
        return self._store(media_id)
