from __future__ import annotations

from dataclasses import dataclass

"""CandidateRow model.

A CandidateRow is one normalized, not-yet-committed spreadsheet record. It is
produced by the normalizer with validity unset and completed by the validator.
Optional text fields are either a non-empty string or None, never "".
"""

__all__ = [
    "CandidateRow",
    "INACTIVE_TOKEN",
    "DEFAULT_ACTIVE_STATUS",
    "GENDER_MALE",
    "GENDER_FEMALE",
]

GENDER_MALE = "L"
GENDER_FEMALE = "P"
DEFAULT_ACTIVE_STATUS = "Ya"
INACTIVE_TOKEN = "tidak"


@dataclass(frozen=True)
class CandidateRow:
    """Normalized member row held in the import preview."""
    full_name: str
    gender: str = GENDER_MALE  # Stored value, always L or P
    birth_place: str | None = None
    birth_date: str | None = None  # YYYY-MM-DD or the original text
    member_number: str | None = None
    training_unit: str | None = None
    branch: str | None = None
    rank_name: str | None = None
    whatsapp_number: str | None = None
    active_status: str = DEFAULT_ACTIVE_STATUS
    gender_token: str | None = None  # Raw upper-cased token before defaulting
    row_number: int | None = None  # Spreadsheet row (header = 1)
    is_valid: bool = False
    errors: tuple[str, ...] = ()
    error_summary: str | None = None

    @property
    def is_active(self) -> bool:
        # Only the exact negative token deactivates; anything else is active.
        return self.active_status.strip().lower() != INACTIVE_TOKEN

    @property
    def gender_label(self) -> str:
        return "Putri" if self.gender == GENDER_FEMALE else "Putra"

    @property
    def status_label(self) -> str:
        return "Aktif" if self.is_active else "Tidak Aktif"
