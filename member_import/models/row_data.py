from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RowData model for the member import pipeline.

RowData represents a single spreadsheet row as read from the first sheet,
before any member-specific normalization. The session keeps it next to the
normalized row so that preview edits can be re-normalized from raw cells.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """Logical representation of a single spreadsheet row.

    The row_number refers to the spreadsheet row number (header = row 1,
    first data row = row 2).
    """
    row_number: int  # Spreadsheet row number (header row is 1)
    values: dict[str, Any]  # Column name -> cell value (None for empty cells)
