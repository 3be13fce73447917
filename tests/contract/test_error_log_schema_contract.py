from __future__ import annotations

import json
import re
from pathlib import Path

from member_import.logging.error_log import ErrorLogBuffer
from member_import.models.error_record import ErrorRecord

"""Error log line format.

Each line: {"timestamp","file","sheet","row","error_type","message"}
- timestamp: ISO8601 UTC ending in Z
- row: spreadsheet row number (>= 2) or -1 for file-level errors
- error_type: UPPER_SNAKE_CASE
"""

TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")
ERROR_TYPE_RE = re.compile(r"^[A-Z][A-Z0-9_]*$")


def test_error_log_lines_follow_contract(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    buf.append(ErrorRecord.create("m.xlsx", "Data Anggota", 2, "ROW_VALIDATION_ERROR", "Name empty"))
    buf.append(ErrorRecord.create("m.xlsx", "<FILE_LEVEL>", -1, "PERSISTENCE_ERROR", "duplicate key"))
    path = buf.flush()
    for line in path.read_text(encoding="utf-8").splitlines():
        data = json.loads(line)
        assert list(data) == ["timestamp", "file", "sheet", "row", "error_type", "message"]
        assert TIMESTAMP_RE.match(data["timestamp"])
        assert ERROR_TYPE_RE.match(data["error_type"])
        assert data["row"] == -1 or data["row"] >= 2
