"""Typed per-row outcomes of the sync engines.

Engines never let a row's exception escape. Each row yields a ``RowResult``
instead, so callers and tests can inspect why a row failed.
"""

from enum import Enum

from pydantic import BaseModel, Field

from src.core.feed import RowStatus


class RowAction(str, Enum):
    """What the engine did (or tried to do) for a row."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    REMOVED = "removed"
    DELETED = "deleted"
    FAILED = "failed"


class RowResult(BaseModel):
    """Outcome of processing one feed row."""

    row_number: int
    name: str = ""
    action: RowAction
    status: RowStatus
    creative_id: str | None = None
    error: str | None = None
    error_type: str | None = None
    failed_line_item_ids: list[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == RowStatus.SUCCESS


class RemovalReport(BaseModel):
    """Outcome of a cleanup pass."""

    rows: list[RowResult] = Field(default_factory=list)
    delete_correction: int = 0
    cleared_rows: list[int] = Field(default_factory=list)

    @property
    def failed(self) -> list[RowResult]:
        return [r for r in self.rows if r.status == RowStatus.FAILED]


class FeedSyncReport(BaseModel):
    """Outcome of a full run: cleanup followed by reconciliation."""

    advertiser_id: str
    removal: RemovalReport = Field(default_factory=RemovalReport)
    rows: list[RowResult] = Field(default_factory=list)

    def count(self, action: RowAction) -> int:
        return sum(1 for r in self.rows if r.action == action)

    @property
    def failed(self) -> list[RowResult]:
        return [r for r in self.rows if r.status == RowStatus.FAILED] + self.removal.failed

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)
