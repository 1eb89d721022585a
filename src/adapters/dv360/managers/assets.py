"""DV360 Asset Resolver.

Turns the asset reference from a feed row into a DV360 media ID.

Two kinds of reference are supported:

- Drive folder: ``drive:<folder id or folder URL>`` or any
  ``https://drive.google.com/...`` URL. The file named after the row's
  ``filename`` column is looked up in that folder. A bare ``drive:`` uses
  the default folder from the Config tab.
- Anything else is treated as a public URL and downloaded.

Either way the bytes end up in a single upload call.
"""

import logging
from collections.abc import Callable

import requests
from requests.exceptions import RequestException

from src.adapters.dv360.client import DV360Client
from src.core.config import DEFAULT_ASSET_FILENAME
from src.core.exceptions import NotFoundError, UpstreamError
from src.core.interfaces import BlobStore

logger = logging.getLogger(__name__)

DRIVE_PREFIX = "drive:"
DRIVE_URL_PREFIXES = ("https://drive.google.com/", "http://drive.google.com/")


def is_drive_reference(asset_ref: str) -> bool:
    return asset_ref.startswith(DRIVE_PREFIX) or asset_ref.startswith(DRIVE_URL_PREFIXES)


class AssetResolver:
    """Resolves asset references to uploaded media IDs."""

    def __init__(
        self,
        client: DV360Client,
        advertiser_id: str,
        blob_store: BlobStore | None = None,
        timeout: int = DV360Client.DEFAULT_TIMEOUT,
        default_folder_id: str = "",
        log_func: Callable[[str], None] | None = None,
    ):
        """Initialize the asset resolver.

        Args:
            client: DV360 API client used for uploads
            advertiser_id: DV360 advertiser ID owning the assets
            blob_store: Drive access for folder references (None disables them)
            timeout: Download timeout in seconds
            default_folder_id: Folder used for a bare ``drive:`` reference
            log_func: Optional logging function
        """
        self.client = client
        self.advertiser_id = advertiser_id
        self.blob_store = blob_store
        self.timeout = timeout
        self.default_folder_id = default_folder_id
        self.log = log_func or (lambda msg: logger.info(msg))

    def resolve(self, asset_ref: str, filename: str | None = None) -> str:
        """Upload the referenced asset and return its media ID.

        Args:
            asset_ref: Drive folder reference or public URL
            filename: Name of the file inside the folder, and of the upload

        Returns:
            DV360 media ID

        Raises:
            NotFoundError: If the folder or file does not exist
            UpstreamError: If the download or upload fails
        """
        asset_ref = asset_ref.strip()
        filename = (filename or "").strip() or DEFAULT_ASSET_FILENAME

        if is_drive_reference(asset_ref):
            content = self._read_from_drive(asset_ref, filename)
        else:
            content = self.fetch_url(asset_ref)

        return self.upload(content, filename)

    def upload(self, content: bytes, filename: str) -> str:
        media_id = self.client.upload_asset(self.advertiser_id, content, filename)
        self.log(f"Asset {media_id} uploaded")
        return media_id

    def _read_from_drive(self, asset_ref: str, filename: str) -> bytes:
        if self.blob_store is None:
            raise NotFoundError(f"Drive access is not configured; cannot resolve {asset_ref}")

        identifier = asset_ref[len(DRIVE_PREFIX) :] if asset_ref.startswith(DRIVE_PREFIX) else asset_ref
        identifier = identifier.strip() or self.default_folder_id
        if not identifier:
            raise NotFoundError(f"No Drive folder given for {filename} and no default folder is configured")

        folder_id = self.blob_store.resolve_folder_id(identifier)
        self.log(f"Reading {filename} from Drive folder {folder_id}")
        return self.blob_store.find_file_by_name(folder_id, filename)

    def fetch_url(self, url: str) -> bytes:
        """Download a public URL.

        Raises:
            UpstreamError: On connection errors or a non-success status
        """
        self.log(f"Downloading asset {url}")
        try:
            response = requests.get(url, timeout=self.timeout)
        except RequestException as e:
            raise UpstreamError(f"Failed to fetch asset {url}: {e}") from e

        if not response.ok:
            raise UpstreamError(
                f"Failed to fetch asset {url} (HTTP {response.status_code})",
                status_code=response.status_code,
            )
        return response.content
