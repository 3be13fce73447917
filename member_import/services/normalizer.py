from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from member_import.excel.cells import cell_to_text
from member_import.excel.dates import interpret_date_cell
from member_import.models.candidate_row import (
    DEFAULT_ACTIVE_STATUS,
    GENDER_FEMALE,
    GENDER_MALE,
    CandidateRow,
)
from member_import.models.column_schema import MEMBER_COLUMNS

"""Row normalization.

Turns one raw spreadsheet row (header name -> cell) into a CandidateRow.
Validity is left unset; see services.validator.

Gender is handled in two explicit passes: the raw token is kept on the row
(`gender_token`) for validation, and only then collapsed to the stored value.
An unknown token such as "X" is stored as "L" but still fails validation.
"""

__all__ = [
    "normalize_row",
    "normalize_gender",
]

# Fields with their own rules; every other schema column is optional text.
_SPECIAL_ATTRIBUTES = {"full_name", "gender", "birth_date", "active_status"}


def _optional_text(value: Any) -> str | None:
    text = cell_to_text(value)
    return text or None


def normalize_gender(value: Any) -> tuple[str | None, str]:
    """Return (raw token, stored gender) for a gender cell.

    The raw token is the trimmed, upper-cased text or None when blank.
    The stored gender is "P" only for exactly "P", otherwise "L".
    """
    token = cell_to_text(value).upper()
    stored = GENDER_FEMALE if token == GENDER_FEMALE else GENDER_MALE
    return token or None, stored


def normalize_row(raw: Mapping[str, Any], row_number: int | None = None) -> CandidateRow:
    """Map a raw row onto a CandidateRow.

    Unknown keys are ignored and missing keys read as blank cells.
    """
    cells = {c.attribute: raw.get(c.key) for c in MEMBER_COLUMNS}

    gender_token, gender = normalize_gender(cells["gender"])
    optional = {
        attr: _optional_text(value)
        for attr, value in cells.items()
        if attr not in _SPECIAL_ATTRIBUTES
    }
    return CandidateRow(
        full_name=cell_to_text(cells["full_name"]),
        gender=gender,
        gender_token=gender_token,
        birth_date=interpret_date_cell(cells["birth_date"]),
        active_status=cell_to_text(cells["active_status"]) or DEFAULT_ACTIVE_STATUS,
        row_number=row_number,
        **optional,
    )
