"""Command line entry point for native feed sync.

Examples:
    native-feed-sync process-feed
    native-feed-sync cleanup-feed
    native-feed-sync logo from-url https://example.com/logo.png
    native-feed-sync list-creatives
    native-feed-sync line-item off 123 456
"""

import argparse
import logging
import os
import sys
from collections.abc import Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from src.core.config import ConnectionConfig
from src.core.exceptions import FeedSyncError
from src.core.version import get_version
from src.services.feed_sync import FeedSyncService
from src.services.logo import LogoService
from src.services.results import FeedSyncReport, RemovalReport, RowResult

logger = logging.getLogger(__name__)

NATIVE_CREATIVE_FILTER = "creativeType=CREATIVE_TYPE_NATIVE"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    # googleapiclient logs every discovery fetch at INFO
    for name in ("googleapiclient", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _results_table(title: str, rows: list[RowResult]) -> Table:
    table = Table(title=title)
    table.add_column("Row", justify="right")
    table.add_column("Name")
    table.add_column("Action")
    table.add_column("Creative ID")
    table.add_column("Error", style="red")
    for result in rows:
        table.add_row(
            str(result.row_number),
            result.name,
            result.action.value,
            result.creative_id or "",
            result.error or "",
        )
    return table


def render_removal(console: Console, report: RemovalReport) -> None:
    if not report.rows:
        console.print("[dim]No rows flagged for removal[/dim]")
        return
    console.print(_results_table("Removal", report.rows))


def render_report(console: Console, report: FeedSyncReport) -> None:
    render_removal(console, report.removal)
    if report.rows:
        console.print(_results_table(f"Feed sync for advertiser {report.advertiser_id}", report.rows))
    else:
        console.print("[dim]No rows to reconcile[/dim]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="native-feed-sync",
        description="Synchronize a Google Sheets feed with DV360 native creatives",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--spreadsheet-id", help="Overrides FEED_SYNC_SPREADSHEET_ID")
    parser.add_argument("--credentials", help="Overrides GOOGLE_APPLICATION_CREDENTIALS")

    commands = parser.add_subparsers(dest="command", required=True)

    process = commands.add_parser("process-feed", help="Clean up flagged rows, then reconcile the feed")
    process.add_argument("--delete", action="store_true", help="Archive and delete creatives of removed rows")
    process.add_argument("--clear-log", action="store_true", help="Clear the Log tab before the run")

    cleanup = commands.add_parser("cleanup-feed", help="Only retire rows flagged for removal")
    cleanup.add_argument("--delete", action="store_true", help="Archive and delete creatives of removed rows")
    cleanup.add_argument("--clear-log", action="store_true", help="Clear the Log tab before the run")

    logo = commands.add_parser("logo", help="Set the shared logo asset on the Config tab")
    logo_sources = logo.add_subparsers(dest="source", required=True)
    from_creative = logo_sources.add_parser("from-creative", help="Reuse the icon of an existing creative")
    from_creative.add_argument("creative_id")
    from_url = logo_sources.add_parser("from-url", help="Upload an image URL")
    from_url.add_argument("url")
    from_url.add_argument("--filename", default="logo.png")
    from_drive = logo_sources.add_parser("from-drive", help="Upload a Drive file")
    from_drive.add_argument("file_id")
    from_drive.add_argument("--filename", default="logo.png")

    commands.add_parser("list-creatives", help="List the advertiser's native creatives")

    line_item = commands.add_parser("line-item", help="Turn line items on or off")
    line_item.add_argument("state", choices=["on", "off"])
    line_item.add_argument("line_item_ids", nargs="+", metavar="LINE_ITEM_ID")
    return parser


def _connection(args: argparse.Namespace) -> ConnectionConfig:
    environ = dict(os.environ)
    if args.spreadsheet_id:
        environ["FEED_SYNC_SPREADSHEET_ID"] = args.spreadsheet_id
    if args.credentials:
        environ["GOOGLE_APPLICATION_CREDENTIALS"] = args.credentials
    return ConnectionConfig.from_env(environ)


def run(args: argparse.Namespace, service: FeedSyncService, console: Console) -> int:
    """Execute a parsed command and return the process exit code."""
    overrides = {"delete_creative_on_remove": True} if getattr(args, "delete", False) else {}
    if getattr(args, "clear_log", False):
        service.audit.clear()

    if args.command == "process-feed":
        report = service.process_feed(service.load_config(**overrides))
        render_report(console, report)
        return 1 if report.has_failures else 0

    if args.command == "cleanup-feed":
        removal = service.cleanup_feed(service.load_config(**overrides))
        render_removal(console, removal)
        return 1 if removal.failed else 0

    config = service.load_config()

    if args.command == "logo":
        logo = LogoService(
            service.client,
            service.config_store,
            config.advertiser_id,
            blob_store=service.blob_store,
            log_func=service.audit.log,
        )
        if args.source == "from-creative":
            media_id = logo.set_from_creative(args.creative_id)
        elif args.source == "from-url":
            media_id = logo.set_from_url(args.url, args.filename)
        else:
            media_id = logo.set_from_drive(args.file_id, args.filename)
        console.print(f"Logo asset ID set to [bold]{media_id}[/bold]")
        return 0

    if args.command == "list-creatives":
        creatives = service.client.list_creatives(config.advertiser_id, NATIVE_CREATIVE_FILTER)
        table = Table(title=f"Native creatives for advertiser {config.advertiser_id}")
        table.add_column("Creative ID")
        table.add_column("Name")
        table.add_column("Status")
        for creative in creatives:
            table.add_row(
                str(creative.get("creativeId", "")),
                creative.get("displayName", ""),
                creative.get("entityStatus", ""),
            )
        console.print(table)
        return 0

    if args.command == "line-item":
        active = args.state == "on"
        failed = 0
        for line_item_id in args.line_item_ids:
            try:
                service.client.set_line_item_status(config.advertiser_id, line_item_id, active)
                service.audit.log(f"Line Item {line_item_id} turned {args.state}")
            except FeedSyncError as e:
                failed += 1
                service.audit.log(f"Could not turn Line Item {line_item_id} {args.state}: {e}")
        return 1 if failed else 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    console = Console()

    try:
        service = FeedSyncService.from_connection(_connection(args))
        return run(args, service, console)
    except FeedSyncError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
