"""Unit tests for Config tab and connection settings."""

import pytest

from src.core.config import ConnectionConfig, FeedSyncConfig, load_feed_sync_config
from src.core.exceptions import ConfigurationError
from tests.helpers.fakes import config_sheet


class TestLoadFeedSyncConfig:
    """Tests for load_feed_sync_config."""

    def test_reads_cells(self):
        """Values are read from their fixed Config tab cells."""
        sheet = config_sheet(
            advertiser_id="1001",
            caption_url="https://brand.example",
            logo_asset_id="555",
            drive_folder_id="folder-1",
            delete_creative_on_remove="TRUE",
        )

        config = load_feed_sync_config(sheet)

        assert config.advertiser_id == "1001"
        assert config.caption_url == "https://brand.example"
        assert config.logo_asset_id == "555"
        assert config.drive_folder_id == "folder-1"
        assert config.delete_creative_on_remove is True
        assert config.apply_delete_correction is False

    def test_numeric_cells_become_strings(self):
        """Sheets may return advertiser and media IDs as numbers."""
        config = load_feed_sync_config(config_sheet(advertiser_id=1001.0, logo_asset_id=42))

        assert config.advertiser_id == "1001"
        assert config.logo_asset_id == "42"

    def test_unchecked_delete_flag(self):
        assert load_feed_sync_config(config_sheet(delete_creative_on_remove="FALSE")).delete_creative_on_remove is False
        assert load_feed_sync_config(config_sheet(delete_creative_on_remove="")).delete_creative_on_remove is False

    def test_overrides_take_precedence(self):
        config = load_feed_sync_config(config_sheet(), delete_creative_on_remove=True, apply_delete_correction=True)

        assert config.delete_creative_on_remove is True
        assert config.apply_delete_correction is True

    def test_missing_advertiser_raises(self):
        with pytest.raises(ConfigurationError):
            load_feed_sync_config(config_sheet(advertiser_id=""))

    def test_unknown_fields_rejected(self):
        with pytest.raises(ConfigurationError):
            load_feed_sync_config(config_sheet(), not_a_setting="x")

    def test_model_defaults(self):
        config = FeedSyncConfig(advertiser_id="1")

        assert config.logo_asset_id == ""
        assert config.delete_creative_on_remove is False


class TestConnectionConfig:
    """Tests for ConnectionConfig.from_env."""

    def test_from_env(self):
        config = ConnectionConfig.from_env(
            {
                "FEED_SYNC_SPREADSHEET_ID": "sheet-1",
                "GOOGLE_APPLICATION_CREDENTIALS": "/tmp/sa.json",
                "DV360_API_BASE_URL": "http://localhost:8080/v3",
                "DV360_TIMEOUT": "10",
            }
        )

        assert config.spreadsheet_id == "sheet-1"
        assert config.credentials_file == "/tmp/sa.json"
        assert config.api_base_url == "http://localhost:8080/v3"
        assert config.timeout == 10

    def test_defaults(self):
        config = ConnectionConfig.from_env({"FEED_SYNC_SPREADSHEET_ID": "sheet-1"})

        assert config.credentials_file is None
        assert config.api_base_url is None
        assert config.timeout == 30

    def test_missing_spreadsheet_raises(self):
        with pytest.raises(ConfigurationError):
            ConnectionConfig.from_env({})

    def test_invalid_timeout_raises(self):
        with pytest.raises(ConfigurationError):
            ConnectionConfig.from_env({"FEED_SYNC_SPREADSHEET_ID": "s", "DV360_TIMEOUT": "soon"})
