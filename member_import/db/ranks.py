from __future__ import annotations

import logging
from typing import Any

from member_import.services.committer import RankLookup

from .batch_insert import validate_identifier

"""Rank reference data.

Ranks are read once per import and only used to resolve rank names to ids
at commit time.
"""

logger = logging.getLogger(__name__)


def load_rank_lookup(cursor: Any, table: str = "ranks") -> RankLookup:
    """Read `id, name` from the ranks table into a RankLookup."""
    cursor.execute(f"SELECT id, name FROM {validate_identifier(table)}")
    lookup = RankLookup.from_records({"id": rid, "name": name} for rid, name in cursor.fetchall())
    logger.debug("loaded %d rank(s) from %s", len(lookup), table)
    return lookup
