"""Row fingerprinting for change detection."""

import hashlib
import json

from src.core.feed import FeedRow


def fingerprint_cells(cells: list[str]) -> str:
    """Return the MD5 hex digest of the reconciliation-relevant cells.

    The leading status and name columns and the trailing hash column are
    excluded, so editing them never marks a row as changed.
    """
    payload = json.dumps(cells[2:-1], ensure_ascii=False, separators=(",", ":"))
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def fingerprint(row: FeedRow) -> str:
    return fingerprint_cells(row.to_cells())
