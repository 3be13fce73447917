from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from member_import.models.candidate_row import CandidateRow
from member_import.models.column_schema import MEMBER_COLUMNS

"""Batch commit of valid rows.

Valid CandidateRows are mapped to the persistence schema and handed to the
sink in one bulk call. From the pipeline's point of view that call is atomic:
it either returns the number of stored records or raises, in which case
nothing is considered committed.

Record mapping rules:
- every column is always present; empty optional fields are sent as None
- the rank name is resolved through RankLookup; unknown names become None
- status_aktif is False only for the exact token "tidak" (case-insensitive)
"""

__all__ = [
    "PersistenceError",
    "MemberSink",
    "RankLookup",
    "BatchCommitter",
    "RECORD_COLUMNS",
    "to_member_record",
]

logger = logging.getLogger(__name__)

RECORD_COLUMNS: tuple[str, ...] = tuple(c.persistence_key for c in MEMBER_COLUMNS)
_RANK_KEY = next(c.persistence_key for c in MEMBER_COLUMNS if c.attribute == "rank_name")


class PersistenceError(Exception):
    """Raised when the bulk insert into the persistence sink fails."""


class MemberSink(Protocol):
    """Bulk-insert target for mapped member records."""

    def insert_members(self, records: Sequence[dict[str, Any]]) -> int:
        """Insert all records at once and return how many were stored."""
        ...


class RankLookup:
    """Advisory, case-insensitive rank name -> identifier map.

    resolve() never raises: an unknown or empty name simply has no rank.
    """

    def __init__(self, mapping: Mapping[str, Any] | None = None) -> None:
        self._by_name: dict[str, Any] = {}
        for name, identifier in (mapping or {}).items():
            self._by_name.setdefault(str(name).strip().lower(), identifier)

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> RankLookup:
        """Build from rank records with `name` and `id` (mappings or objects)."""
        mapping: dict[str, Any] = {}
        for rec in records:
            if isinstance(rec, Mapping):
                name, identifier = rec.get("name"), rec.get("id")
            else:
                name, identifier = getattr(rec, "name", None), getattr(rec, "id", None)
            if name is None:
                continue
            mapping.setdefault(str(name), identifier)
        return cls(mapping)

    def resolve(self, name: str | None) -> Any | None:
        if not name:
            return None
        return self._by_name.get(name.strip().lower())

    def __len__(self) -> int:
        return len(self._by_name)


def to_member_record(row: CandidateRow, rank_lookup: RankLookup) -> dict[str, Any]:
    """Map one valid row to a persistence record."""
    record: dict[str, Any] = {}
    for column in MEMBER_COLUMNS:
        value = getattr(row, column.attribute)
        if column.attribute == "rank_name":
            value = rank_lookup.resolve(value)
        elif column.attribute == "active_status":
            value = row.is_active
        elif isinstance(value, str) and not value:
            value = None
        record[column.persistence_key] = value
    return record


class BatchCommitter:
    """Maps valid rows and performs the single bulk insert."""

    def __init__(self, sink: MemberSink) -> None:
        self.sink = sink

    def commit(self, valid_rows: Sequence[CandidateRow], rank_lookup: RankLookup) -> int:
        """Insert `valid_rows` in one sink call.

        Returns:
            Number of committed rows (0 without calling the sink for no rows)

        Raises:
            PersistenceError: the sink failed; nothing counts as committed
        """
        if not valid_rows:
            return 0
        records = [to_member_record(r, rank_lookup) for r in valid_rows]
        unresolved = sum(
            1 for r, rec in zip(valid_rows, records, strict=True)
            if r.rank_name and rec[_RANK_KEY] is None
        )
        if unresolved:
            logger.warning("%d row(s) with unknown rank name imported without rank", unresolved)
        try:
            self.sink.insert_members(records)
        except Exception as e:
            raise PersistenceError(str(e)) from e
        logger.info("committed %d member(s)", len(records))
        return len(records)
