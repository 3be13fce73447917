from __future__ import annotations

import argparse
import os
import sys
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from member_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, ImportConfig, load_config
from member_import.db.batch_insert import BatchInsertError, MockMemberSink, PostgresMemberSink
from member_import.db.ranks import load_rank_lookup
from member_import.excel.template import write_template
from member_import.logging.error_log import ErrorLogBuffer
from member_import.logging.init import log_summary, setup_logging
from member_import.models.error_record import FILE_LEVEL_ROW, ErrorRecord
from member_import.models.import_result import ImportResult
from member_import.services.committer import BatchCommitter, MemberSink, PersistenceError, RankLookup
from member_import.services.session import EmptyImportError, ImportSession
from member_import.services.summary import render_summary_line

"""CLI entrypoint.

Commands:
- template: write the import template workbook
- preview FILE: parse and validate FILE, print the preview, commit nothing
- import FILE: parse, validate and commit the valid rows in one batch
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

PREVIEW_SHEET_FALLBACK = "<FILE_LEVEL>"


@contextmanager
def _db_connection(cfg: ImportConfig):  # pragma: no cover (thin wrapper; needs a live database)
    """Yield a psycopg2 cursor.

    Connection resolution order:
        1. DATABASE_URL / PGDSN (after `.env` was loaded with override)
        2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        3. the `database` section of the config file
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    # the member sink issues BEGIN/COMMIT itself
    conn.autocommit = True
    cur = conn.cursor()
    try:
        yield cur
    finally:
        cur.close()
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so its connection settings win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="member-import", description="Member spreadsheet importer")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    t = sub.add_parser("template", help="Write the import template workbook")
    t.add_argument("--output", type=Path, default=None, help="Target file or directory")

    pv = sub.add_parser("preview", help="Parse and validate a file without importing")
    pv.add_argument("file", type=Path)

    im = sub.add_parser("import", help="Import the valid rows of a file")
    im.add_argument("file", type=Path)
    im.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    return p.parse_args(argv)


def _print_preview(session: ImportSession) -> None:
    print(
        f"PREVIEW file={session.source_name} sheet={session.sheet_name} "
        f"rows={session.total_count} valid={session.valid_count} invalid={session.invalid_count}"
    )
    if not session.total_count:
        print("  no data rows below the header")
    elif not session.valid_count:
        print("  no valid rows: fix the errors below before importing")
    for i, row in enumerate(session.rows, start=1):
        name = row.full_name or "(empty)"
        unit_branch = " / ".join(v for v in (row.training_unit, row.branch) if v) or "-"
        line = (
            f"  {i:>4} {name:<25} {row.gender_label:<6} {unit_branch:<30} "
            f"{row.rank_name or '-':<12} {row.status_label:<11}"
        )
        if row.error_summary:
            line += f" ! {row.error_summary}"
        print(line.rstrip())


def _log_row_errors(session: ImportSession, error_log: ErrorLogBuffer) -> None:
    error_log.extend(
        ErrorRecord.create(
            file=session.source_name or "",
            sheet=session.sheet_name or PREVIEW_SHEET_FALLBACK,
            row=row.row_number if row.row_number is not None else FILE_LEVEL_ROW,
            error_type="ROW_VALIDATION_ERROR",
            message=row.error_summary or "",
        )
        for row in session.invalid_rows
    )


def _file_error(error_log: ErrorLogBuffer, file_name: str, error_type: str, message: str) -> None:
    error_log.append(
        ErrorRecord.create(
            file=file_name,
            sheet=PREVIEW_SHEET_FALLBACK,
            row=FILE_LEVEL_ROW,
            error_type=error_type,
            message=message,
        )
    )


def _preview(path: Path) -> int:
    session = ImportSession(BatchCommitter(MockMemberSink()))
    session.load_file(path)
    if session.last_error:
        print(f"PREVIEW file={path.name} error={session.last_error}")
        return EXIT_FATAL
    _print_preview(session)
    if not session.valid_count:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def run_import(
    path: Path, sink: MemberSink, rank_lookup: RankLookup, error_log: ErrorLogBuffer
) -> tuple[int, ImportResult]:
    """Load `path`, commit its valid rows to `sink` and report the outcome.

    Returns:
        (exit code, ImportResult)
    """
    logger = setup_logging()
    start_time = datetime.now(UTC)
    session = ImportSession(BatchCommitter(sink), rank_lookup)
    session.load_file(path)

    total, valid, invalid = session.total_count, session.valid_count, session.invalid_count
    committed = 0
    if session.last_error:
        _file_error(error_log, path.name, "PARSE_ERROR", session.last_error)
        code = EXIT_FATAL
    else:
        _log_row_errors(session, error_log)
        for row in session.invalid_rows:
            logger.warning(f"row {row.row_number}: {row.error_summary}")
        try:
            committed = session.commit() or 0
        except EmptyImportError as e:
            logger.error(f"import: {e}")
            _file_error(error_log, path.name, "EMPTY_IMPORT", str(e))
            code = EXIT_FATAL
        except PersistenceError as e:
            logger.error(f"persistence: {e}")
            _file_error(error_log, path.name, "PERSISTENCE_ERROR", str(e))
            code = EXIT_FATAL
        else:
            code = EXIT_PARTIAL_FAILURE if invalid else EXIT_SUCCESS_ALL

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log: {log_path}")

    end_time = datetime.now(UTC)
    result = ImportResult(
        file_name=path.name,
        total_rows=total,
        valid_rows=valid,
        invalid_rows=invalid,
        committed_rows=committed,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
    )
    # log_summary adds the "SUMMARY " prefix itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return code, result


def _import(args: argparse.Namespace) -> int:
    logger = setup_logging()
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer(Path(cfg.logs_directory))

    # DISABLE_DB_CONNECT=1 runs the whole pipeline against an in-memory sink
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.info("mode=mock (DISABLE_DB_CONNECT=1)")
        code, _ = run_import(args.file, MockMemberSink(), RankLookup(), error_log)
        return code

    try:
        with _db_connection(cfg) as cur:
            rank_lookup = load_rank_lookup(cur, cfg.ranks_table)
            sink = PostgresMemberSink(cur, cfg.members_table, page_size=cfg.page_size)
            logger.info(f"mode=live table={cfg.members_table} ranks={len(rank_lookup)}")
            code, _ = run_import(args.file, sink, rank_lookup, error_log)
            return code
    except (psycopg2.Error, BatchInsertError) as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL


def main(argv: list[str] | None = None) -> int:
    # None reads the process arguments; an explicit [] must not pick up pytest's
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)

    if args.command == "template":
        try:
            write_template(args.output)
        except OSError as e:
            logger.error(f"template: {e}")
            return EXIT_FATAL
        return EXIT_SUCCESS_ALL
    if args.command == "preview":
        return _preview(args.file)
    return _import(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
