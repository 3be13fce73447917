# Shared pytest fixtures
from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from member_import.db.batch_insert import MockMemberSink
from member_import.logging.init import reset_logging
from member_import.models.column_schema import column_keys
from member_import.services.committer import BatchCommitter, RankLookup
from member_import.services.session import ImportSession


@pytest.fixture()
def temp_workdir(monkeypatch, tmp_path: Path) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    (tmp_path / "logs").mkdir()
    monkeypatch.chdir(tmp_path)
    yield tmp_path


@pytest.fixture(autouse=True)
def _fresh_logging():
    # handlers bind sys.stdout at creation; rebuild them for every test
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """members_table: members
ranks_table: ranks
logs_directory: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _member_row(**overrides) -> dict[str, object]:
    row: dict[str, object] = {
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
    }
    row.update(overrides)
    return row


@pytest.fixture()
def make_excel(temp_workdir: Path):
    """Write rows (list of dicts) under the member headers to an xlsx file."""
    def _make(name: str, rows: list[dict[str, object]], columns: list[str] | None = None) -> Path:
        p = temp_workdir / "data" / name
        df = pd.DataFrame(rows, columns=columns or column_keys())
        df.to_excel(p, sheet_name="Data Anggota", index=False)
        return p
    return _make


@pytest.fixture()
def make_csv(temp_workdir: Path):
    def _make(name: str, text: str) -> Path:
        p = temp_workdir / "data" / name
        p.write_text(text, encoding="utf-8")
        return p
    return _make


@pytest.fixture()
def member_row():
    """Factory for a valid raw member row; keyword overrides replace cells."""
    return _member_row


class FailingSink:
    """Sink whose bulk insert always fails."""

    def __init__(self, message: str = "duplicate key value violates unique constraint") -> None:
        self.message = message
        self.calls = 0

    def insert_members(self, records):
        self.calls += 1
        raise RuntimeError(self.message)


@pytest.fixture()
def failing_sink() -> FailingSink:
    return FailingSink()


@pytest.fixture()
def mock_sink() -> MockMemberSink:
    return MockMemberSink()


@pytest.fixture()
def rank_lookup() -> RankLookup:
    return RankLookup.from_records([{"id": 1, "name": "Polos"}, {"id": 2, "name": "Jambon"}])


@pytest.fixture()
def session(mock_sink: MockMemberSink, rank_lookup: RankLookup) -> ImportSession:
    return ImportSession(BatchCommitter(mock_sink), rank_lookup)
