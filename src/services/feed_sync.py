"""Feed sync orchestration.

``FeedSyncService`` owns the injected collaborators (DV360 client, Feed,
Config and Log worksheets, Drive) and runs one sync: load the Config tab,
clean up rows flagged for removal, then reconcile the rest.
"""

import logging
from typing import Any

from src.adapters.dv360.client import DV360Client
from src.adapters.dv360.managers import AssetResolver, CreativeManager, LineItemManager
from src.adapters.google import DriveBlobStore, GoogleTokenProvider, SheetsService, load_credentials
from src.core.audit_logger import AuditLogger
from src.core.config import (
    CONFIG_SHEET_NAME,
    LOG_SHEET_NAME,
    ConnectionConfig,
    FeedSyncConfig,
    load_feed_sync_config,
)
from src.core.feed import FEED_SHEET_NAME
from src.core.interfaces import BlobStore, TabularStore
from src.services.reconciliation import ReconciliationEngine, read_feed
from src.services.removal import RemovalEngine
from src.services.results import FeedSyncReport, RemovalReport, RowAction

logger = logging.getLogger(__name__)


class FeedSyncService:
    """Runs cleanup and reconciliation passes against one spreadsheet."""

    def __init__(
        self,
        client: DV360Client,
        feed_store: TabularStore,
        config_store: TabularStore,
        blob_store: BlobStore | None = None,
        audit_logger: AuditLogger | None = None,
    ):
        """Initialize the feed sync service.

        Args:
            client: DV360 API client
            feed_store: Feed worksheet
            config_store: Config worksheet
            blob_store: Drive access for folder asset references
            audit_logger: Audit log (defaults to Python logging only)
        """
        self.client = client
        self.feed_store = feed_store
        self.config_store = config_store
        self.blob_store = blob_store
        self.audit = audit_logger or AuditLogger()

    @classmethod
    def from_connection(cls, connection: ConnectionConfig) -> "FeedSyncService":
        """Wire the service to Google Sheets, Drive and DV360."""
        credentials = load_credentials(connection.credentials_file)
        sheets = SheetsService(connection.spreadsheet_id, credentials=credentials)
        client = DV360Client(
            token_provider=GoogleTokenProvider(credentials),
            base_url=connection.api_base_url,
            timeout=connection.timeout,
        )
        return cls(
            client=client,
            feed_store=sheets.worksheet(FEED_SHEET_NAME),
            config_store=sheets.worksheet(CONFIG_SHEET_NAME),
            blob_store=DriveBlobStore(credentials=credentials),
            audit_logger=AuditLogger(sheets.worksheet(LOG_SHEET_NAME)),
        )

    def load_config(self, **overrides: Any) -> FeedSyncConfig:
        """Read the run-scoped configuration from the Config tab."""
        return load_feed_sync_config(self.config_store, **overrides)

    def _managers(self, config: FeedSyncConfig) -> tuple[CreativeManager, LineItemManager]:
        return (
            CreativeManager(self.client, config.advertiser_id, log_func=self.audit.log),
            LineItemManager(self.client, config.advertiser_id, log_func=self.audit.log),
        )

    def removal_engine(self, config: FeedSyncConfig) -> RemovalEngine:
        creatives, line_items = self._managers(config)
        return RemovalEngine(self.feed_store, config, creatives, line_items, log_func=self.audit.log)

    def reconciliation_engine(self, config: FeedSyncConfig) -> ReconciliationEngine:
        creatives, line_items = self._managers(config)
        assets = AssetResolver(
            self.client,
            config.advertiser_id,
            blob_store=self.blob_store,
            timeout=self.client.timeout,
            default_folder_id=config.drive_folder_id,
            log_func=self.audit.log,
        )
        return ReconciliationEngine(self.feed_store, config, creatives, line_items, assets, log_func=self.audit.log)

    def cleanup_feed(self, config: FeedSyncConfig | None = None) -> RemovalReport:
        """Run only the removal pass."""
        config = config or self.load_config()
        return self.removal_engine(config).run()

    def process_feed(self, config: FeedSyncConfig | None = None) -> FeedSyncReport:
        """Clean up the feed, then reconcile every remaining row.

        The Feed tab is read again after cleanup so cleared rows are absent
        from the reconciliation snapshot.
        """
        config = config or self.load_config()
        self.audit.log(f"Starting feed sync for advertiser {config.advertiser_id}")

        removal = self.cleanup_feed(config)
        rows = self.reconciliation_engine(config).run(read_feed(self.feed_store))

        report = FeedSyncReport(advertiser_id=config.advertiser_id, removal=removal, rows=rows)
        self.audit.log(
            f"Feed sync finished: {report.count(RowAction.CREATED)} created, "
            f"{report.count(RowAction.UPDATED)} updated, {report.count(RowAction.UNCHANGED)} unchanged, "
            f"{len(removal.rows)} removal rows, {len(report.failed)} failed"
        )
        return report
