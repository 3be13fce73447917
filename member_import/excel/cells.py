from __future__ import annotations

from datetime import date, datetime
from typing import Any

import numpy as np
import pandas as pd

"""Cell value helpers.

pandas hands cells over as str, int/float (often numpy scalars), bool,
datetime/Timestamp, or NaN/NaT for empty cells. These helpers give every
later stage one notion of "blank" and one text coercion.
"""

__all__ = [
    "is_blank",
    "is_numeric",
    "cell_to_text",
]


def is_numeric(value: Any) -> bool:
    """True for int/float values including numpy scalars, excluding bool."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def is_blank(value: Any) -> bool:
    """True for None, NaN/NaT and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-like cells are never produced by the reader; treat as present
        return False


def cell_to_text(value: Any) -> str:
    """Coerce a cell to trimmed text; blank cells become "".

    Integral floats drop their `.0` so numeric member numbers read from a
    column containing empty cells keep their original digits.
    """
    if is_blank(value):
        return ""
    if isinstance(value, (bool, np.bool_)):
        return str(bool(value))
    if is_numeric(value):
        if isinstance(value, (float, np.floating)) and float(value).is_integer():
            return str(int(value))
        return str(value.item() if isinstance(value, np.generic) else value)
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.strftime("%Y-%m-%d")
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()
