"""Configuration models for feed synchronisation.

Two layers of configuration exist:

- ``ConnectionConfig``: where to find the spreadsheet and the DV360 API.
  Read from environment variables by the CLI.
- ``FeedSyncConfig``: run-scoped settings maintained by humans on the Config
  tab of the spreadsheet. Loaded once at the start of every run and passed
  to the engines explicitly.
"""

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.core.exceptions import ConfigurationError
from src.core.interfaces import TabularStore

CONFIG_SHEET_NAME = "Config"
LOG_SHEET_NAME = "Log"

HEADLINE_MAX_LENGTH = 25
BODY_MAX_LENGTH = 90
CALL_TO_ACTION_MAX_LENGTH = 15

DEFAULT_ASSET_FILENAME = "asset.jpg"

# (row, col) of each value on the Config tab
CONFIG_CELLS: dict[str, tuple[int, int]] = {
    "advertiser_id": (1, 2),
    "caption_url": (2, 2),
    "logo_asset_id": (3, 2),
    "drive_folder_id": (5, 2),
    "delete_creative_on_remove": (6, 2),
}

_TRUTHY = {"true", "yes", "y", "1", "x"}


class FeedSyncConfig(BaseModel):
    """Run-scoped settings loaded from the Config tab."""

    model_config = ConfigDict(extra="forbid")

    advertiser_id: str = Field(..., min_length=1, description="DV360 advertiser ID")
    caption_url: str = Field(default="", description="Caption URL shown on every native creative")
    logo_asset_id: str = Field(default="", description="Media ID of the icon/logo asset")
    drive_folder_id: str = Field(default="", description="Default Drive folder for asset lookups")
    delete_creative_on_remove: bool = Field(
        default=False,
        description="Archive and delete creatives on removal instead of only pausing them",
    )
    apply_delete_correction: bool = Field(
        default=False,
        description="Offset removal clear indexes by the number of fully deleted creatives",
    )

    @field_validator("advertiser_id", "caption_url", "logo_asset_id", "drive_folder_id", mode="before")
    @classmethod
    def coerce_cell_to_str(cls, v: Any) -> str:
        """Sheet cells may come back as numbers."""
        if v is None:
            return ""
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        return str(v).strip()

    @field_validator("delete_creative_on_remove", mode="before")
    @classmethod
    def parse_checkbox(cls, v: Any) -> bool:
        if isinstance(v, bool):
            return v
        return str(v or "").strip().lower() in _TRUTHY


def load_feed_sync_config(store: TabularStore, **overrides: Any) -> FeedSyncConfig:
    """Read the Config tab into a validated ``FeedSyncConfig``.

    Args:
        store: Config worksheet
        **overrides: Values that take precedence over the sheet (e.g. CLI flags)

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the advertiser ID is missing or a value is invalid
    """
    values: dict[str, Any] = {key: store.get_cell(row, col) for key, (row, col) in CONFIG_CELLS.items()}
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return FeedSyncConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid Config sheet: {e}") from e


class ConnectionConfig(BaseModel):
    """Connection settings for the spreadsheet and the DV360 API."""

    model_config = ConfigDict(extra="forbid")

    spreadsheet_id: str = Field(..., min_length=1, description="Google Sheets spreadsheet ID")
    credentials_file: str | None = Field(
        default=None,
        description="Service account JSON; application default credentials are used when unset",
    )
    api_base_url: str | None = Field(default=None, description="Override for the DV360 API base URL")
    timeout: int = Field(default=30, ge=1, description="HTTP timeout in seconds")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ConnectionConfig":
        """Build connection settings from environment variables.

        Raises:
            ConfigurationError: If ``FEED_SYNC_SPREADSHEET_ID`` is not set
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "spreadsheet_id": env.get("FEED_SYNC_SPREADSHEET_ID", ""),
            "credentials_file": env.get("GOOGLE_APPLICATION_CREDENTIALS") or None,
            "api_base_url": env.get("DV360_API_BASE_URL") or None,
        }
        if env.get("DV360_TIMEOUT"):
            values["timeout"] = env["DV360_TIMEOUT"]

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid connection settings: {e}") from e
