from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pandas as pd
from openpyxl import load_workbook

from member_import.excel.template import (
    DATA_SHEET_NAME,
    EXAMPLE_MEMBERS,
    GUIDE_SHEET_NAME,
    TEMPLATE_FILE_NAME,
    generate_template,
    write_template,
)
from member_import.models.column_schema import MEMBER_COLUMNS, column_keys


def test_template_has_data_and_guide_sheets():
    wb = load_workbook(BytesIO(generate_template()))
    assert wb.sheetnames == [DATA_SHEET_NAME, GUIDE_SHEET_NAME]


def test_data_sheet_headers_follow_schema():
    df = pd.read_excel(BytesIO(generate_template()), sheet_name=DATA_SHEET_NAME, dtype=object)
    assert list(df.columns) == column_keys()
    assert len(df) == len(EXAMPLE_MEMBERS)
    assert df.iloc[1]["nama_lengkap"] == "Siti Nurhaliza"
    assert df.iloc[0]["no_whatsapp"] == "081234567890"


def test_data_sheet_column_widths():
    ws = load_workbook(BytesIO(generate_template()))[DATA_SHEET_NAME]
    assert ws.column_dimensions["A"].width == 25  # nama_lengkap
    assert ws.column_dimensions["C"].width == 15  # tanggal_lahir
    assert ws.column_dimensions["B"].width == 18


def test_guide_sheet_documents_every_column():
    df = pd.read_excel(BytesIO(generate_template()), sheet_name=GUIDE_SHEET_NAME)
    assert list(df.columns) == ["Column", "Required", "Description"]
    assert list(df["Column"]) == column_keys()
    required = dict(zip(df["Column"], df["Required"], strict=True))
    assert required["nama_lengkap"] == "Yes"
    assert required["jenis_kelamin"] == "Yes"
    assert required["cabang"] == "No"
    assert all(isinstance(d, str) and d for d in df["Description"])
    assert len(df) == len(MEMBER_COLUMNS)


def test_template_content_is_deterministic():
    first = pd.read_excel(BytesIO(generate_template()), sheet_name=None, dtype=object)
    second = pd.read_excel(BytesIO(generate_template()), sheet_name=None, dtype=object)
    assert first.keys() == second.keys()
    for name in first:
        pd.testing.assert_frame_equal(first[name], second[name])


def test_write_template_uses_fixed_name(temp_workdir: Path):
    path = write_template()
    assert path == Path(TEMPLATE_FILE_NAME)
    assert (temp_workdir / TEMPLATE_FILE_NAME).exists()


def test_write_template_into_directory(temp_workdir: Path):
    path = write_template(temp_workdir / "data")
    assert path == temp_workdir / "data" / TEMPLATE_FILE_NAME
    assert path.exists()
