from __future__ import annotations

import pytest

from member_import.models.row_data import RowData
from member_import.services.committer import BatchCommitter, PersistenceError
from member_import.services.session import (
    EmptyImportError,
    ImportSession,
    SessionState,
    SessionStateError,
)


def test_new_session_is_empty(session):
    assert session.state is SessionState.EMPTY
    assert (session.total_count, session.valid_count, session.invalid_count) == (0, 0, 0)


def test_load_rows_previews_and_counts(session, member_row):
    n = session.load_rows([member_row(), member_row(nama_lengkap=""), member_row(jenis_kelamin="X")])
    assert n == 3
    assert session.state is SessionState.PREVIEWING
    assert session.valid_count == 1
    assert session.invalid_count == 2
    assert session.total_count == 3
    assert [r.row_number for r in session.rows] == [2, 3, 4]


def test_all_invalid_rows_still_preview(session, member_row):
    session.load_rows([member_row(nama_lengkap=None)])
    assert session.state is SessionState.PREVIEWING
    assert session.valid_count == 0


def test_load_replaces_instead_of_merging(session, member_row):
    session.load_rows([member_row(), member_row()])
    session.load_rows([member_row(nama_lengkap="Siti")])
    assert session.total_count == 1
    assert session.rows[0].full_name == "Siti"


def test_load_keeps_row_numbers_from_row_data(session, member_row):
    session.load_rows([RowData(row_number=7, values=member_row())])
    assert session.rows[0].row_number == 7


def test_clear_returns_to_empty(session, member_row):
    session.load_rows([member_row()])
    session.clear()
    assert session.state is SessionState.EMPTY
    assert session.total_count == 0


def test_commit_without_valid_rows_is_rejected(session, member_row, mock_sink):
    session.load_rows([member_row(nama_lengkap=""), member_row(jenis_kelamin="?")])
    before = session.rows
    with pytest.raises(EmptyImportError):
        session.commit()
    assert session.rows == before
    assert session.state is SessionState.PREVIEWING
    assert mock_sink.batches == []


def test_commit_on_empty_session_is_rejected(session, mock_sink):
    with pytest.raises(EmptyImportError):
        session.commit()
    assert session.state is SessionState.EMPTY
    assert mock_sink.batches == []


def test_commit_sends_only_valid_rows_and_resets(mock_sink, rank_lookup, member_row):
    calls = []
    session = ImportSession(BatchCommitter(mock_sink), rank_lookup, on_committed=calls.append)
    session.load_rows([
        member_row(),
        member_row(nama_lengkap=""),
        member_row(nama_lengkap="Siti", jenis_kelamin="P"),
        member_row(jenis_kelamin="X"),
    ])
    assert session.commit() == 2
    assert len(mock_sink.batches) == 1
    assert [r["nama_lengkap"] for r in mock_sink.records] == ["Ahmad Fajar", "Siti"]
    assert session.state is SessionState.EMPTY
    assert session.total_count == 0
    assert calls == [2]


def test_commit_failure_keeps_every_row(failing_sink, rank_lookup, member_row):
    calls = []
    session = ImportSession(BatchCommitter(failing_sink), rank_lookup, on_committed=calls.append)
    session.load_rows([member_row(), member_row(nama_lengkap="")])
    before = session.rows
    with pytest.raises(PersistenceError):
        session.commit()
    assert session.rows == before
    assert session.state is SessionState.PREVIEWING
    assert session.last_error is not None and "duplicate key" in session.last_error
    assert calls == []
    # retry without re-uploading
    with pytest.raises(PersistenceError):
        session.commit()
    assert failing_sink.calls == 2


def test_commit_while_in_flight_is_a_noop(rank_lookup, member_row):
    class ReentrantSink:
        def __init__(self):
            self.calls = 0
            self.nested = "unset"

        def insert_members(self, records):
            self.calls += 1
            self.nested = session.commit()
            return len(records)

    sink = ReentrantSink()
    session = ImportSession(BatchCommitter(sink), rank_lookup)
    session.load_rows([member_row()])
    assert session.commit() == 1
    assert sink.calls == 1
    assert sink.nested is None


def test_state_is_committing_during_insert(rank_lookup, member_row):
    seen = []

    class ObservingSink:
        def insert_members(self, records):
            seen.append(session.state)
            with pytest.raises(SessionStateError):
                session.clear()
            return len(records)

    session = ImportSession(BatchCommitter(ObservingSink()), rank_lookup)
    session.load_rows([member_row()])
    session.commit()
    assert seen == [SessionState.COMMITTING]


def test_update_row_revalidates(session, member_row):
    session.load_rows([member_row(nama_lengkap="", jenis_kelamin="X")])
    assert session.valid_count == 0
    row = session.update_row(0, {"nama_lengkap": "Budi"})
    assert row.error_summary == "Gender must be L/P"
    row = session.update_row(0, {"jenis_kelamin": "p"})
    assert row.is_valid is True
    assert row.gender == "P"
    assert row.full_name == "Budi"
    assert session.valid_count == 1


def test_update_row_requires_preview(session):
    with pytest.raises(SessionStateError):
        session.update_row(0, {"nama_lengkap": "Budi"})


def test_load_file_parses_first_sheet(session, make_excel, member_row):
    path = make_excel("members.xlsx", [member_row(), member_row(nama_lengkap=None)])
    assert session.load_file(path) == 2
    assert session.source_name == "members.xlsx"
    assert session.sheet_name == "Data Anggota"
    assert session.valid_count == 1
    assert session.rows[1].error_summary == "Name empty"


def test_same_file_can_be_loaded_again_after_commit(session, make_excel, member_row, mock_sink):
    path = make_excel("members.xlsx", [member_row()])
    session.load_file(path)
    session.commit()
    assert session.state is SessionState.EMPTY
    assert session.load_file(path) == 1
    assert session.state is SessionState.PREVIEWING
    session.commit()
    assert len(mock_sink.batches) == 2


def test_unreadable_file_degrades_to_empty(session, temp_workdir, member_row):
    session.load_rows([member_row()])
    bad = temp_workdir / "data" / "broken.xlsx"
    bad.write_bytes(b"this is not a workbook")
    assert session.load_file(bad) == 0
    assert session.state is SessionState.EMPTY
    assert session.last_error is not None
    assert session.source_name == "broken.xlsx"


def test_unsupported_extension_degrades_to_empty(session, temp_workdir):
    txt = temp_workdir / "data" / "members.txt"
    txt.write_text("nama_lengkap\nBudi\n", encoding="utf-8")
    assert session.load_file(txt) == 0
    assert "unsupported file type" in session.last_error
