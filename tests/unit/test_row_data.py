from __future__ import annotations

import dataclasses

import pytest

from member_import.models.row_data import RowData


def test_row_data_is_frozen():
    row = RowData(row_number=2, values={"nama_lengkap": "Ahmad"})
    with pytest.raises(dataclasses.FrozenInstanceError):
        row.row_number = 3  # type: ignore[misc]
    assert row.values["nama_lengkap"] == "Ahmad"
