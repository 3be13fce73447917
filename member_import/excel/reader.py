from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from member_import.models.column_schema import column_keys
from member_import.models.row_data import RowData

from .cells import is_blank

"""Spreadsheet reader.

Only the first sheet of a workbook (or the single table of a CSV file) is
read. Row 1 is the header; every following non-blank row becomes a RowData
keyed by header name. Columns are matched by name, so extra columns are
carried along untouched and missing ones simply read as empty.

Only truly empty cells count as missing: pandas' default NA tokens ("NA",
"null", "None", ...) are kept as text so a branch or name spelled that way
survives the import.
"""

__all__ = [
    "ParseError",
    "SheetHeaderError",
    "SheetData",
    "SUPPORTED_SUFFIXES",
    "sniff_delimiter",
    "read_first_sheet",
    "normalize_sheet",
    "read_member_rows",
]

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
CSV_SUFFIXES = {".csv"}
CSV_DELIMITERS = ",;\t|"
SNIFF_BYTES = 64 * 1024
SUPPORTED_SUFFIXES = EXCEL_SUFFIXES | CSV_SUFFIXES


class ParseError(Exception):
    """Raised when a file cannot be read as a spreadsheet at all."""


class SheetHeaderError(ParseError):
    """Raised when the first sheet has no header row."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[RowData]


def sniff_delimiter(path: Path) -> str:
    """Guess the delimiter of a text table from its first 64 KiB.

    Only `,` `;` tab and `|` are considered. Files the sniffer cannot decide
    on (a single column, an empty file) are read as comma separated.
    """
    with path.open(encoding="utf-8-sig", errors="replace", newline="") as f:
        sample = f.read(SNIFF_BYTES)
    try:
        return csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        return ","


def read_first_sheet(path: Path) -> tuple[str, pd.DataFrame]:
    """Read the first sheet of `path` without interpreting a header.

    Returns:
        (sheet name, raw DataFrame with one row per spreadsheet row)

    Raises:
        ParseError: unsupported extension, unreadable or corrupt file
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ParseError(f"unsupported file type '{path.suffix}': {path.name}")
    if not path.exists():
        raise ParseError(f"file not found: {path}")

    if suffix in CSV_SUFFIXES:
        try:
            df = pd.read_csv(
                path,
                sep=sniff_delimiter(path),
                header=None,
                dtype=str,  # keep leading zeros of phone / member numbers
                keep_default_na=False,
                na_values=[""],
                skip_blank_lines=False,
                encoding="utf-8-sig",
            )
        except pd.errors.EmptyDataError:
            df = pd.DataFrame()
        except Exception as e:
            raise ParseError(f"cannot read {path.name}: {e}") from e
        return path.stem, df

    try:
        with pd.ExcelFile(path) as xls:
            if not xls.sheet_names:
                raise ParseError(f"workbook has no sheets: {path.name}")
            name = str(xls.sheet_names[0])
            df = xls.parse(
                name,
                header=None,
                dtype=object,
                keep_default_na=False,
                na_values=[""],
            )
    except ParseError:
        raise
    except Exception as e:
        raise ParseError(f"cannot read {path.name}: {e}") from e
    return name, df


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Apply the first row as header and collect the data rows.

    Steps:
    1. Validate at least one row exists (the header)
    2. Header cells are trimmed; blank header cells drop their column
    3. Fully blank data rows are skipped
    4. Blank cells become None; other values are kept as read
    """
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header row")
    columns = []
    for c in df.iloc[0].tolist():
        columns.append("" if is_blank(c) else str(c).strip())

    rows: list[RowData] = []
    for idx, raw in df.iloc[1:].iterrows():
        cells = raw.tolist()
        if all(is_blank(v) for v in cells):
            continue
        values: dict[str, object] = {}
        for col, val in zip(columns, cells, strict=False):
            if not col or col in values:
                continue  # unnamed or duplicate header: first one wins
            values[col] = None if is_blank(val) else val
        # header=None keeps a 0-based RangeIndex, so row 1 is index 0
        rows.append(RowData(row_number=int(idx) + 1, values=values))

    return SheetData(sheet_name=sheet_name, columns=[c for c in columns if c], rows=rows)


def read_member_rows(path: Path) -> SheetData:
    """Read the member rows of a user-supplied spreadsheet.

    Missing member columns are reported as a warning only; their values read
    as empty and row validation decides what that means.
    """
    sheet_name, df = read_first_sheet(path)
    sheet = normalize_sheet(df, sheet_name)
    missing = [k for k in column_keys() if k not in sheet.columns]
    if missing:
        logger.warning("file=%s sheet=%s missing columns: %s", path.name, sheet_name, missing)
    logger.debug("file=%s sheet=%s columns=%s rows=%d", path.name, sheet_name, sheet.columns, len(sheet.rows))
    return sheet
