from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Import result model.

Aggregated counts of one file import, used for the SUMMARY output line.
"""

__all__ = [
    "ImportResult",
]


@dataclass(frozen=True)
class ImportResult:
    """Aggregated result of importing one spreadsheet."""
    file_name: str
    total_rows: int  # Rows parsed from the first sheet
    valid_rows: int  # Rows passing validation
    invalid_rows: int  # Rows excluded from the commit
    committed_rows: int  # Rows accepted by the sink (0 on failure)
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float

    @property
    def partial(self) -> bool:
        """True when rows were committed but some invalid ones were left out."""
        return self.committed_rows > 0 and self.invalid_rows > 0
