"""Audit log mirrored to the Log tab and to Python logging.

The audit log is what operators read after a run: every engine writes its
progress through :meth:`AuditLogger.log`, which the managers receive as their
``log_func``.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any

from src.core.interfaces import TabularStore

logger = logging.getLogger(__name__)


class AuditLogger:
    """Append-only sink writing to an optional worksheet and to ``logging``.

    Attributes:
        store: Log worksheet (None to log to ``logging`` only)
        entries: Messages logged during this process, oldest first
    """

    def __init__(self, store: TabularStore | None = None, with_timestamps: bool = True):
        self.store = store
        self.with_timestamps = with_timestamps
        self.entries: list[str] = []
        self._sheet_disabled = False

    @staticmethod
    def _format(message: Any) -> str:
        if isinstance(message, str):
            return message
        if isinstance(message, BaseException):
            return f"{type(message).__name__}: {message}"
        try:
            return json.dumps(message, default=str)
        except (TypeError, ValueError):
            return repr(message)

    def log(self, message: Any) -> None:
        """Record a message in every destination."""
        text = self._format(message)
        self.entries.append(text)
        logger.info(text)

        if self.store is None or self._sheet_disabled:
            return

        row = [datetime.now(UTC).isoformat(timespec="seconds"), text] if self.with_timestamps else [text]
        try:
            self.store.append_row(row)
        except Exception as e:
            # Log tab is best-effort; Python logging keeps the entry
            logger.warning(f"Disabling Log sheet mirror after write failure: {e}", exc_info=True)
            self._sheet_disabled = True

    def __call__(self, message: Any) -> None:
        self.log(message)

    def clear(self) -> None:
        """Clear the Log tab and the in-memory entries."""
        self.entries.clear()
        if self.store is not None:
            self.store.clear()
