"""Error reporting for failures caught off the request path."""

from __future__ import annotations

import json
import traceback
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from household_names.exceptions import HouseholdNamesError
from household_names.logging_config import get_logger
from household_names.repositories.sqlite import SQLiteDatabase

logger = get_logger(__name__)


class ErrorContext(str, Enum):
    HOUSEHOLD_NAMING = "household_naming"
    BULK_REFRESH = "bulk_refresh"


class ErrorReporter(ABC):
    @abstractmethod
    def report(self, exc: BaseException, context_tag: ErrorContext | str) -> None:
        pass


def _tag(context_tag: ErrorContext | str) -> str:
    return context_tag.value if isinstance(context_tag, ErrorContext) else context_tag


def _details(exc: BaseException) -> dict:
    if isinstance(exc, HouseholdNamesError):
        return exc.to_dict()
    return {"error": type(exc).__name__, "message": str(exc), "context": {}}


class LoggingErrorReporter(ErrorReporter):
    def report(self, exc: BaseException, context_tag: ErrorContext | str) -> None:
        logger.error(
            "error_reported",
            context_tag=_tag(context_tag),
            error_type=type(exc).__name__,
            error=str(exc),
        )


class SQLiteErrorReporter(ErrorReporter):
    """Persists reported errors to an ``error_log`` table and logs them."""

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database
        self._ensure_table_exists()

    def _ensure_table_exists(self) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS error_log (
                id TEXT PRIMARY KEY,
                context_tag TEXT NOT NULL,
                error_type TEXT NOT NULL,
                message TEXT NOT NULL,
                details TEXT NOT NULL,
                stack_trace TEXT NOT NULL DEFAULT '',
                created_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_error_log_context_tag ON error_log(context_tag)"
        )

    def report(self, exc: BaseException, context_tag: ErrorContext | str) -> None:
        tag = _tag(context_tag)
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO error_log (id, context_tag, error_type, message, details,
                                   stack_trace, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(uuid4()),
                tag,
                type(exc).__name__,
                str(exc),
                json.dumps(_details(exc)),
                "".join(traceback.format_exception(exc)),
                datetime.now(UTC).isoformat(),
            ),
        )
        logger.error(
            "error_reported",
            context_tag=tag,
            error_type=type(exc).__name__,
            error=str(exc),
        )

    def list_errors(self, context_tag: ErrorContext | str | None = None) -> list[dict]:
        conn = self._db.get_connection()
        if context_tag is None:
            rows = conn.execute(
                "SELECT * FROM error_log ORDER BY created_at"
            ).fetchall()
        else:
            tag = _tag(context_tag)
            rows = conn.execute(
                "SELECT * FROM error_log WHERE context_tag = ? ORDER BY created_at",
                (tag,),
            ).fetchall()
        return [
            {
                "context_tag": row["context_tag"],
                "error_type": row["error_type"],
                "message": row["message"],
                "details": json.loads(row["details"]),
            }
            for row in rows
        ]
