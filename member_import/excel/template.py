from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

import pandas as pd
from openpyxl.utils import get_column_letter

from member_import.models.column_schema import MEMBER_COLUMNS, column_keys

"""Import template generation.

The template is built from MEMBER_COLUMNS, the same schema the normalizer
reads, so the headers users fill in are always the headers the importer
understands. Two sheets are produced:

- "Data Anggota": the column headers with two example members
- "Petunjuk": one line per column saying whether it is required and what it
  accepts
"""

__all__ = [
    "TEMPLATE_FILE_NAME",
    "DATA_SHEET_NAME",
    "GUIDE_SHEET_NAME",
    "EXAMPLE_MEMBERS",
    "generate_template",
    "write_template",
]

logger = logging.getLogger(__name__)

TEMPLATE_FILE_NAME = "Template_Import_Anggota.xlsx"
DATA_SHEET_NAME = "Data Anggota"
GUIDE_SHEET_NAME = "Petunjuk"
GUIDE_COLUMNS = ("Column", "Required", "Description")
GUIDE_WIDTHS = (18, 10, 60)

EXAMPLE_MEMBERS: tuple[dict[str, str], ...] = (
    {
        "nama_lengkap": "Ahmad Fajar",
        "tempat_lahir": "Jakarta",
        "tanggal_lahir": "2005-03-15",
        "nbm": "12345",
        "jenis_kelamin": "L",
        "unit_latihan": "Unit A",
        "cabang": "Cabang Utara",
        "tingkatan": "Polos",
        "no_whatsapp": "081234567890",
        "status_aktif": "Ya",
    },
    {
        "nama_lengkap": "Siti Nurhaliza",
        "tempat_lahir": "Bandung",
        "tanggal_lahir": "2006-07-20",
        "nbm": "12346",
        "jenis_kelamin": "P",
        "unit_latihan": "Unit B",
        "cabang": "Cabang Selatan",
        "tingkatan": "Jambon",
        "no_whatsapp": "081234567891",
        "status_aktif": "Ya",
    },
)


def _set_widths(worksheet, widths) -> None:
    for idx, width in enumerate(widths, start=1):
        worksheet.column_dimensions[get_column_letter(idx)].width = width


def generate_template() -> bytes:
    """Build the import template workbook and return its xlsx bytes."""
    keys = column_keys()
    data_df = pd.DataFrame(list(EXAMPLE_MEMBERS), columns=keys)
    guide_df = pd.DataFrame(
        [
            (c.key, "Yes" if c.required else "No", c.description)
            for c in MEMBER_COLUMNS
        ],
        columns=list(GUIDE_COLUMNS),
    )

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        data_df.to_excel(writer, sheet_name=DATA_SHEET_NAME, index=False)
        guide_df.to_excel(writer, sheet_name=GUIDE_SHEET_NAME, index=False)
        _set_widths(writer.sheets[DATA_SHEET_NAME], [c.width for c in MEMBER_COLUMNS])
        _set_widths(writer.sheets[GUIDE_SHEET_NAME], GUIDE_WIDTHS)
    return buffer.getvalue()


def write_template(path: Path | None = None) -> Path:
    """Write the template to `path` (default: the fixed template file name)."""
    target = path or Path(TEMPLATE_FILE_NAME)
    if target.is_dir():
        target = target / TEMPLATE_FILE_NAME
    target.write_bytes(generate_template())
    logger.info("template written: %s", target)
    return target
