from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from member_import.excel.reader import ParseError, read_member_rows
from member_import.models.candidate_row import CandidateRow
from member_import.models.row_data import RowData

from .committer import BatchCommitter, PersistenceError, RankLookup
from .normalizer import normalize_row
from .validator import apply_validation

"""Import session state machine.

The session owns the preview: the parsed, normalized and validated rows of
the last loaded file. It is the only writer of that row list.

State transitions: empty -> previewing -> committing -> (empty | previewing)

- load_file / load_rows replace every row (never merge) from any state but
  committing; an unreadable file degrades to zero rows with last_error set
- clear discards the rows
- commit sends the valid rows in one batch; success empties the session,
  failure keeps every row for a retry
"""

__all__ = [
    "SessionState",
    "SessionStateError",
    "EmptyImportError",
    "ImportSession",
]

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of an import session.

    - EMPTY: no rows held
    - PREVIEWING: rows parsed (zero or more valid), waiting for commit/clear
    - COMMITTING: bulk insert in flight
    """
    EMPTY = "empty"
    PREVIEWING = "previewing"
    COMMITTING = "committing"


class SessionStateError(Exception):
    """Raised when an operation is not allowed in the current state."""


class EmptyImportError(Exception):
    """Raised when a commit is attempted without any valid row."""


@dataclass(frozen=True)
class _PreviewEntry:
    raw: RowData
    row: CandidateRow


def _build_entry(raw: RowData) -> _PreviewEntry:
    return _PreviewEntry(raw=raw, row=apply_validation(normalize_row(raw.values, raw.row_number)))


class ImportSession:
    """In-memory preview of one spreadsheet import.

    Args:
        committer: Performs the bulk insert of valid rows
        rank_lookup: Advisory rank resolution used at commit time
        on_committed: Called once with the committed count after each
            successful commit (e.g. to refresh dependent views)
    """

    def __init__(
        self,
        committer: BatchCommitter,
        rank_lookup: RankLookup | None = None,
        on_committed: Callable[[int], None] | None = None,
    ) -> None:
        self.committer = committer
        self.rank_lookup = rank_lookup or RankLookup()
        self.on_committed = on_committed
        self._entries: list[_PreviewEntry] = []
        self._state = SessionState.EMPTY
        self.source_name: str | None = None
        self.sheet_name: str | None = None
        self.last_error: str | None = None

    # -- derived, read-only views -------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def rows(self) -> tuple[CandidateRow, ...]:
        return tuple(e.row for e in self._entries)

    @property
    def valid_rows(self) -> list[CandidateRow]:
        return [e.row for e in self._entries if e.row.is_valid]

    @property
    def invalid_rows(self) -> list[CandidateRow]:
        return [e.row for e in self._entries if not e.row.is_valid]

    @property
    def total_count(self) -> int:
        return len(self._entries)

    @property
    def valid_count(self) -> int:
        return sum(1 for e in self._entries if e.row.is_valid)

    @property
    def invalid_count(self) -> int:
        return self.total_count - self.valid_count

    # -- transitions ----------------------------------------------------------

    def _ensure_not_committing(self, action: str) -> None:
        if self._state is SessionState.COMMITTING:
            raise SessionStateError(f"cannot {action} while a commit is in flight")

    def _replace(self, entries: list[_PreviewEntry]) -> None:
        self._entries = entries
        self._state = SessionState.PREVIEWING if entries else SessionState.EMPTY

    def load_rows(
        self, raw_rows: Iterable[RowData | Mapping[str, Any]], source_name: str | None = None
    ) -> int:
        """Replace the preview with already-read rows. Returns the row count."""
        self._ensure_not_committing("load rows")
        entries = []
        for idx, raw in enumerate(raw_rows):
            if not isinstance(raw, RowData):
                # plain mappings are numbered as if read under a header row
                raw = RowData(row_number=idx + 2, values=dict(raw))
            entries.append(_build_entry(raw))
        self._replace(entries)
        self.source_name = source_name
        self.sheet_name = None
        self.last_error = None
        logger.info(
            "loaded %d row(s) from %s: valid=%d invalid=%d",
            self.total_count,
            source_name or "<rows>",
            self.valid_count,
            self.invalid_count,
        )
        return self.total_count

    def load_file(self, path: Path) -> int:
        """Parse `path` and replace the preview with its rows.

        Every call re-reads the file, including a repeat of the previous one.
        A file that cannot be parsed leaves an empty session with last_error
        set instead of raising.
        """
        self._ensure_not_committing("load a file")
        path = Path(path)
        try:
            sheet = read_member_rows(path)
        except ParseError as e:
            logger.error("parse: %s", e)
            self._replace([])
            self.source_name = path.name
            self.sheet_name = None
            self.last_error = str(e)
            return 0
        count = self.load_rows(sheet.rows, source_name=path.name)
        self.sheet_name = sheet.sheet_name
        return count

    def update_row(self, index: int, changes: Mapping[str, Any]) -> CandidateRow:
        """Edit cells of a previewed row and re-validate it.

        `changes` maps column headers to new cell values.
        """
        if self._state is not SessionState.PREVIEWING:
            raise SessionStateError(f"cannot edit rows in state {self._state.value}")
        entry = self._entries[index]
        raw = RowData(row_number=entry.raw.row_number, values={**entry.raw.values, **changes})
        self._entries[index] = _build_entry(raw)
        return self._entries[index].row

    def clear(self) -> None:
        """Discard all rows and return to the empty state."""
        self._ensure_not_committing("clear")
        self._replace([])
        self.source_name = None
        self.sheet_name = None
        self.last_error = None

    def commit(self) -> int | None:
        """Commit all valid rows in one batch.

        Returns:
            Committed row count, or None when a commit is already in flight

        Raises:
            EmptyImportError: no valid rows; nothing changes, sink not called
            PersistenceError: sink failed; rows and previewing state are kept
        """
        if self._state is SessionState.COMMITTING:
            logger.warning("commit ignored: a commit is already in flight")
            return None
        valid = self.valid_rows
        if not valid:
            raise EmptyImportError("no valid rows to import")

        self._state = SessionState.COMMITTING
        try:
            committed = self.committer.commit(valid, self.rank_lookup)
        except PersistenceError as e:
            self._state = SessionState.PREVIEWING
            self.last_error = str(e)
            logger.error("commit failed, %d row(s) kept for retry: %s", self.total_count, e)
            raise
        except Exception:
            self._state = SessionState.PREVIEWING
            raise

        self._replace([])
        self.source_name = None
        self.sheet_name = None
        self.last_error = None
        if self.on_committed is not None:
            self.on_committed(committed)
        return committed
