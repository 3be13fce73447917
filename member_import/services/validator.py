from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace

from member_import.models.candidate_row import GENDER_FEMALE, GENDER_MALE, CandidateRow

"""Row validation.

Every rule is evaluated for every row and each failing rule contributes its
own message, in rule order, so the preview shows all problems of a row at
once. The messages are joined with ERROR_SEPARATOR into the row summary.
"""

__all__ = [
    "ValidationOutcome",
    "ROW_RULES",
    "ERROR_SEPARATOR",
    "NAME_EMPTY",
    "GENDER_INVALID",
    "validate_row",
    "apply_validation",
]

ERROR_SEPARATOR = ", "
NAME_EMPTY = "Name empty"
GENDER_INVALID = "Gender must be L/P"


@dataclass(frozen=True)
class ValidationOutcome:
    is_valid: bool
    errors: tuple[str, ...]

    @property
    def summary(self) -> str | None:
        return ERROR_SEPARATOR.join(self.errors) if self.errors else None


def _has_name(row: CandidateRow) -> bool:
    return bool(row.full_name.strip())


def _has_known_gender(row: CandidateRow) -> bool:
    # Checked on the raw token: the stored gender is already defaulted to L.
    return row.gender_token is None or row.gender_token in (GENDER_MALE, GENDER_FEMALE)


ROW_RULES: tuple[tuple[Callable[[CandidateRow], bool], str], ...] = (
    (_has_name, NAME_EMPTY),
    (_has_known_gender, GENDER_INVALID),
)


def validate_row(row: CandidateRow) -> ValidationOutcome:
    errors = tuple(message for check, message in ROW_RULES if not check(row))
    return ValidationOutcome(is_valid=not errors, errors=errors)


def apply_validation(row: CandidateRow) -> CandidateRow:
    """Return a copy of `row` with its derived validity fields filled in."""
    outcome = validate_row(row)
    return replace(
        row,
        is_valid=outcome.is_valid,
        errors=outcome.errors,
        error_summary=outcome.summary,
    )
