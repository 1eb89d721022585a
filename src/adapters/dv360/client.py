"""Display & Video 360 API client wrapper.

Handles authentication and HTTP requests to the DV360 API.
Base URL: https://displayvideo.googleapis.com/v3
Auth: OAuth bearer token, fetched from a token provider on every call.

Mutations use partial-update semantics: the ``updateMask`` query parameter
names the top-level fields a PATCH may change.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

import requests
from requests.exceptions import RequestException

from src.adapters.dv360.schemas import CreativeField, EntityStatus, LineItemField
from src.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str]


class DV360APIError(UpstreamError):
    """Exception raised for DV360 API errors."""


def join_update_mask(fields: Iterable[str | CreativeField | LineItemField]) -> str:
    """Comma-join field names for the ``updateMask`` query parameter."""
    names = [field.value if isinstance(field, CreativeField | LineItemField) else field for field in fields]
    return ",".join(dict.fromkeys(names))


class DV360Client:
    """Client for the creative, line item and asset resources of DV360.

    Attributes:
        token_provider: Callable returning a valid OAuth access token
        base_url: API base URL (default: https://displayvideo.googleapis.com/v3)
        upload_url: Media upload base URL
        timeout: Request timeout in seconds
    """

    DEFAULT_BASE_URL = "https://displayvideo.googleapis.com/v3"
    DEFAULT_UPLOAD_URL = "https://displayvideo.googleapis.com/upload/v3"
    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        token_provider: TokenProvider,
        base_url: str | None = None,
        upload_url: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        """Initialize the DV360 client.

        Args:
            token_provider: Callable returning a bearer token
            base_url: Optional custom API base URL
            upload_url: Optional custom upload base URL
            timeout: Request timeout in seconds
            session: Optional requests session (defaults to module-level requests)
        """
        self.token_provider = token_provider
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.upload_url = (upload_url or self.DEFAULT_UPLOAD_URL).rstrip("/")
        self.timeout = timeout
        self.session = session

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token_provider()}"}

    def _handle_response(self, response: requests.Response) -> Any:
        """Handle API response and raise errors if needed.

        Args:
            response: Requests response object

        Returns:
            Parsed JSON response body

        Raises:
            DV360APIError: If response indicates an error
        """
        try:
            body = response.json() if response.content else None
        except ValueError:
            body = response.text

        if response.status_code in (401, 403):
            raise DV360APIError(
                f"DV360 API Auth Denied (HTTP {response.status_code})",
                status_code=response.status_code,
                response_body=body,
            )

        if response.status_code == 404:
            raise DV360APIError(
                "Resource not found (HTTP 404)",
                status_code=404,
                response_body=body,
            )

        if response.status_code >= 500:
            raise DV360APIError(
                f"DV360 API server error (HTTP {response.status_code})",
                status_code=response.status_code,
                response_body=body,
            )

        if response.status_code >= 400:
            raise DV360APIError(
                f"DV360 API error (HTTP {response.status_code}): {_error_message(body)}",
                status_code=response.status_code,
                response_body=body,
            )

        return body

    def _request(
        self,
        method: str,
        url: str,
        data: dict[str, Any] | None = None,
        query_params: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        """Make an API request.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            url: Absolute URL
            data: JSON request body
            query_params: Query parameters (None values are dropped)
            files: Multipart files; when set no JSON content type is sent

        Returns:
            Parsed response body

        Raises:
            DV360APIError: If request fails
        """
        params = {k: v for k, v in (query_params or {}).items() if v is not None}
        sender = self.session or requests

        try:
            response = sender.request(
                method=method,
                url=url,
                params=params or None,
                json=data if data is not None and files is None else None,
                files=files,
                headers=self._headers(),
                timeout=self.timeout,
            )
            return self._handle_response(response)
        except RequestException as e:
            raise DV360APIError(f"Request failed: {e}") from e

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def get(self, path: str, query_params: dict[str, Any] | None = None) -> Any:
        """Make a GET request."""
        return self._request("GET", self._url(path), query_params=query_params)

    def post(self, path: str, data: dict[str, Any]) -> Any:
        """Make a POST request."""
        return self._request("POST", self._url(path), data=data)

    def patch(self, path: str, data: dict[str, Any], update_mask: str) -> Any:
        """Make a PATCH request restricted to the fields in ``update_mask``."""
        if not update_mask:
            raise ValueError("PATCH requires a non-empty update mask")
        return self._request("PATCH", self._url(path), data=data, query_params={"updateMask": update_mask})

    def delete(self, path: str) -> Any:
        """Make a DELETE request."""
        return self._request("DELETE", self._url(path))

    # =========================================================================
    # Creative Operations
    # =========================================================================

    def get_creative(self, advertiser_id: str, creative_id: str) -> dict[str, Any]:
        """Get a single creative."""
        return self.get(f"/advertisers/{advertiser_id}/creatives/{creative_id}") or {}

    def list_creatives(self, advertiser_id: str, filter_expr: str | None = None) -> list[dict[str, Any]]:
        """List creatives, following pagination.

        Args:
            advertiser_id: Advertiser ID
            filter_expr: Optional filter, e.g. ``creativeType=CREATIVE_TYPE_NATIVE``

        Returns:
            All matching creatives
        """
        creatives: list[dict[str, Any]] = []
        page_token: str | None = None
        while True:
            result = self.get(
                f"/advertisers/{advertiser_id}/creatives",
                query_params={"filter": filter_expr, "pageToken": page_token},
            )
            if not result:
                break
            creatives.extend(result.get("creatives", []))
            page_token = result.get("nextPageToken")
            if not page_token:
                break
        return creatives

    def create_creative(self, advertiser_id: str, creative: dict[str, Any]) -> dict[str, Any]:
        """Create a creative and return the created resource."""
        return self.post(f"/advertisers/{advertiser_id}/creatives", creative) or {}

    def update_creative(self, creative: dict[str, Any], update_mask: str) -> dict[str, Any]:
        """Patch a creative.

        Args:
            creative: Creative body; must carry ``advertiserId`` and ``creativeId``
            update_mask: Comma-joined names of the fields to change

        Returns:
            Updated creative
        """
        path = f"/advertisers/{creative['advertiserId']}/creatives/{creative['creativeId']}"
        return self.patch(path, creative, update_mask) or {}

    def _set_creative_status(self, advertiser_id: str, creative_id: str, status: EntityStatus) -> dict[str, Any]:
        body = {"creativeId": creative_id, "entityStatus": status.value}
        return (
            self.patch(
                f"/advertisers/{advertiser_id}/creatives/{creative_id}",
                body,
                join_update_mask([CreativeField.ENTITY_STATUS]),
            )
            or {}
        )

    def pause_creative(self, advertiser_id: str, creative_id: str) -> dict[str, Any]:
        """Pause a creative."""
        return self._set_creative_status(advertiser_id, creative_id, EntityStatus.PAUSED)

    def archive_creative(self, advertiser_id: str, creative_id: str) -> dict[str, Any]:
        """Archive a creative (required before deletion)."""
        return self._set_creative_status(advertiser_id, creative_id, EntityStatus.ARCHIVED)

    def delete_creative(self, advertiser_id: str, creative_id: str) -> Any:
        """Delete an archived creative."""
        return self.delete(f"/advertisers/{advertiser_id}/creatives/{creative_id}")

    # =========================================================================
    # Line Item Operations
    # =========================================================================

    def get_line_item(self, advertiser_id: str, line_item_id: str) -> dict[str, Any]:
        """Get a single line item."""
        return self.get(f"/advertisers/{advertiser_id}/lineItems/{line_item_id}") or {}

    def update_line_item(self, line_item: dict[str, Any], update_mask: str | None = None) -> dict[str, Any]:
        """Patch a line item's creative list.

        The API can answer HTTP 200 with an embedded ``error`` object; that is
        treated as a failure too.

        Args:
            line_item: Body with ``advertiserId``, ``lineItemId`` and ``creativeIds``
            update_mask: Defaults to ``creativeIds``

        Raises:
            DV360APIError: On HTTP errors or an embedded error object
        """
        path = f"/advertisers/{line_item['advertiserId']}/lineItems/{line_item['lineItemId']}"
        result = self.patch(path, line_item, update_mask or LineItemField.CREATIVE_IDS.value) or {}

        if isinstance(result, dict) and "error" in result:
            raise DV360APIError(
                f"DV360 API rejected line item update: {_error_message(result)}",
                response_body=result,
            )

        return result

    def set_line_item_status(self, advertiser_id: str, line_item_id: str, active: bool) -> dict[str, Any]:
        """Turn a line item on or off."""
        status = EntityStatus.ACTIVE if active else EntityStatus.PAUSED
        return (
            self.patch(
                f"/advertisers/{advertiser_id}/lineItems/{line_item_id}",
                {"entityStatus": status.value},
                LineItemField.ENTITY_STATUS.value,
            )
            or {}
        )

    # =========================================================================
    # Asset Operations
    # =========================================================================

    def upload_asset(self, advertiser_id: str, content: bytes, filename: str) -> str:
        """Upload binary content as an advertiser asset.

        Args:
            advertiser_id: Advertiser ID
            content: Raw file bytes
            filename: Name given to the uploaded asset

        Returns:
            Media ID of the uploaded asset

        Raises:
            DV360APIError: If the upload fails or returns no media ID
        """
        result = self._request(
            "POST",
            f"{self.upload_url}/advertisers/{advertiser_id}/assets",
            query_params={"filename": filename},
            files={"file": (filename, content)},
        )

        media_id = ((result or {}).get("asset") or {}).get("mediaId")
        if not media_id:
            raise DV360APIError("Asset upload returned no media ID", response_body=result)

        logger.debug(f"Uploaded asset {filename} as media {media_id}")
        return str(media_id)


def _error_message(body: Any) -> str:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message", body["error"]))
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return str(body)
