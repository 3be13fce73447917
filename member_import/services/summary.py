from __future__ import annotations

from ..models.import_result import ImportResult

"""Summary line rendering.

Format:
SUMMARY file={name} rows={total} valid={valid} invalid={invalid} committed={committed} elapsed_sec={elapsed}
"""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return str(round(value, 3))


def render_summary_line(result: ImportResult) -> str:
    """Render the SUMMARY line for one import.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ImportResult(
        ...     file_name="members.xlsx", total_rows=3, valid_rows=2, invalid_rows=1,
        ...     committed_rows=2, start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY file=members.xlsx rows=3 valid=2 invalid=1 committed=2 elapsed_sec=2'
    """
    return (
        f"SUMMARY file={result.file_name} "
        f"rows={result.total_rows} "
        f"valid={result.valid_rows} "
        f"invalid={result.invalid_rows} "
        f"committed={result.committed_rows} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)}"
    )
