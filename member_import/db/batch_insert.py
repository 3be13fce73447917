from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

from member_import.services.committer import RECORD_COLUMNS

"""DB batch insert.

Member records are written with psycopg2.extras.execute_values. The
PostgreSQL sink wraps the paged INSERT statements in one explicit
transaction, so the whole batch is stored or nothing is.
"""

__all__ = [
    "BatchInsertError",
    "BatchMetrics",
    "InsertResult",
    "batch_insert",
    "validate_identifier",
    "PostgresMemberSink",
    "MockMemberSink",
]

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of a single batch insert call."""
    batch_size: int  # Number of rows in this batch
    elapsed_seconds: float  # Time spent on execute_values call
    start_time: float  # Start timestamp (time.time())
    end_time: float  # End timestamp (time.time())


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int


def validate_identifier(name: str) -> str:
    """Accept `table` or `schema.table` made of letters, digits and underscores."""
    if not _IDENTIFIER_RE.match(name or ""):
        raise BatchInsertError(f"invalid table name: {name!r}")
    return name


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Perform batched INSERT using psycopg2.extras.execute_values.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table (validated identifier)
    columns: insert columns, in the order of each row's values
    rows: row value sequences
    page_size: execute_values page size
    metrics_callback: receives BatchMetrics after the call; not invoked for
        empty `rows` (the function returns early)
    """
    validate_identifier(table)
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0)

    cols_sql = ",".join(f'"{c}"' for c in columns)
    base_sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"

    start_time = time.time()
    try:
        execute_values(cursor, base_sql, rows_list, page_size=page_size)
    except Exception as e:
        raise BatchInsertError(str(e)) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(rows_list),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )

    return InsertResult(inserted_rows=len(rows_list))


class PostgresMemberSink:
    """Member sink writing to a PostgreSQL table in one transaction."""

    def __init__(self, cursor: Any, table: str = "members", page_size: int = 1000) -> None:
        self.cursor = cursor
        self.table = validate_identifier(table)
        self.page_size = page_size

    def _metrics(self, metrics: BatchMetrics) -> None:
        logger.debug(
            "table=%s batch_size=%d elapsed=%.4fs", self.table, metrics.batch_size, metrics.elapsed_seconds
        )

    def insert_members(self, records: Sequence[dict[str, Any]]) -> int:
        rows = [[rec.get(c) for c in RECORD_COLUMNS] for rec in records]
        try:
            self.cursor.execute("BEGIN")
            result = batch_insert(
                self.cursor,
                self.table,
                RECORD_COLUMNS,
                rows,
                page_size=self.page_size,
                metrics_callback=self._metrics,
            )
            self.cursor.execute("COMMIT")
        except Exception as e:
            try:
                self.cursor.execute("ROLLBACK")
            except Exception as rollback_e:
                logger.error("rollback failed table=%s: %s", self.table, rollback_e)
            if isinstance(e, BatchInsertError):
                raise
            raise BatchInsertError(str(e)) from e
        return result.inserted_rows


class MockMemberSink:
    """In-memory sink: keeps every inserted batch (mock mode and tests)."""

    def __init__(self) -> None:
        self.batches: list[list[dict[str, Any]]] = []

    @property
    def records(self) -> list[dict[str, Any]]:
        return [rec for batch in self.batches for rec in batch]

    def insert_members(self, records: Sequence[dict[str, Any]]) -> int:
        self.batches.append([dict(r) for r in records])
        logger.debug("mock mode inserted_rows=%d", len(records))
        return len(records)
