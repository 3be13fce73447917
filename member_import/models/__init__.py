"""Domain models for the member import pipeline.

This package contains the column schema shared by the template generator,
the normalizer and the committer, plus the row and result dataclasses that
flow between them.
"""

from .candidate_row import CandidateRow
from .column_schema import MEMBER_COLUMNS, ColumnSpec, column_by_key, column_keys
from .import_result import ImportResult
from .row_data import RowData

__all__ = [
    # Schema
    "ColumnSpec",
    "MEMBER_COLUMNS",
    "column_by_key",
    "column_keys",
    # Row models
    "CandidateRow",
    "RowData",
    # Results
    "ImportResult",
]
