from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any

from openpyxl.utils.datetime import from_excel

from .cells import cell_to_text, is_blank, is_numeric

"""Date cell interpretation.

Birth dates arrive as real dates (date-formatted xlsx cells), as spreadsheet
serial numbers (general-formatted cells, or the legacy .xls reader), or as
free text. Dates and serials are rendered as YYYY-MM-DD; text is kept as typed
(trimmed) so a malformed date stays visible in the preview for correction.
"""

__all__ = [
    "interpret_date_cell",
    "ISO_DATE_RE",
]

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _format_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _serial_to_date(serial: float) -> str | None:
    """Convert a 1900-system spreadsheet serial, or None if it is not a date."""
    if serial < 1:
        return None
    try:
        converted = from_excel(float(serial))
    except (OverflowError, ValueError) as e:
        logger.debug("serial %r is not a date: %s", serial, e)
        return None
    if not isinstance(converted, datetime):
        return None
    return _format_date(converted)


def interpret_date_cell(value: Any) -> str | None:
    """Normalize a date cell to YYYY-MM-DD where possible.

    - blank or falsy (None, NaN, 0, "", False) -> None
    - date / datetime / Timestamp -> YYYY-MM-DD
    - number -> spreadsheet serial (1900 date system) -> YYYY-MM-DD
    - "YYYY-MM-DD" text -> unchanged
    - any other text -> trimmed, unchanged

    Never raises; the worst case is the trimmed original text.
    """
    if is_blank(value) or value is False:
        return None
    if isinstance(value, (datetime, date)):
        return _format_date(value)
    if is_numeric(value):
        if value == 0:
            return None
        converted = _serial_to_date(value)
        if converted is not None:
            return converted
        return cell_to_text(value) or None
    text = cell_to_text(value)
    if ISO_DATE_RE.match(text):
        return text
    return text or None
