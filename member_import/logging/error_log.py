from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from member_import.models.error_record import ErrorRecord

"""Per-run import error log.

Invalid rows and file-level failures of one import are kept in memory and
written as JSON Lines when the run ends. A clean run leaves no file behind.
"""

__all__ = [
    "ErrorLogBuffer",
    "error_log_name",
]

DEFAULT_LOGS_DIRECTORY = Path("./logs")


def error_log_name(moment: datetime) -> str:
    """`errors-YYYYMMDD-HHMMSS.log` for a UTC moment."""
    return f"errors-{moment:%Y%m%d-%H%M%S}.log"


class ErrorLogBuffer:
    def __init__(self, directory: Path | None = None) -> None:
        self.directory = directory or DEFAULT_LOGS_DIRECTORY
        self._pending: list[ErrorRecord] = []
        self._target: Path | None = None

    @property
    def file_path(self) -> Path:
        # fixed on first use so repeated flushes of one run share a file
        if self._target is None:
            self._target = self.directory / error_log_name(datetime.now(UTC))
        return self._target

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._pending)

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._pending.extend(records)

    def __len__(self) -> int:
        return len(self._pending)

    def flush(self) -> Path | None:
        """Append pending records to the log file and clear them.

        Returns the file written, or None when nothing was pending.
        """
        if not self._pending:
            return None
        target = self.file_path
        target.parent.mkdir(parents=True, exist_ok=True)
        lines = "".join(r.to_json_line() + "\n" for r in self._pending)
        with target.open("a", encoding="utf-8") as f:
            f.write(lines)
        self._pending.clear()
        return target
