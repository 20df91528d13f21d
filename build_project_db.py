"""
Region 1 Project Database Builder

Loads project records (a JSON array of project rows joined with their firm,
the same shape the data service returns) into the SQLite database read by
the API.  Firms are de-duplicated by ``firm_id``; rows without a project
number are skipped.

Usage:
    python build_project_db.py --input projects.json      # Build or update
    python build_project_db.py --input projects.json --rebuild
    python build_project_db.py --sample                   # Seed sample data
    python build_project_db.py --db mydb.sqlite --sample
"""

from __future__ import annotations

import argparse
import json
import logging
import sqlite3
import sys
from pathlib import Path
from typing import Any, Iterable

from mapstate.repository import FALLBACK_RECORDS
from utils.config import AppConfig, KnownValues
from utils.database import batch_insert, get_table_count, init_pragmas, init_schema
from utils.patterns import PROJECT_NO, YEAR_TOKEN
from utils.strings import clean_text, coerce_coordinate, safe_float

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = AppConfig.from_env().db_path

_FIRM_INSERT = (
    "INSERT OR REPLACE INTO firms "
    "(firm_id, firm_name, municipality, province, latitude, longitude, sector) "
    "VALUES (?, ?, ?, ?, ?, ?, ?)"
)

_PROJECT_INSERT = (
    "INSERT OR REPLACE INTO projects "
    "(project_no, year, firm_id, title, spin, status, intervention, "
    "fund_source, assistance_amount) "
    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)"
)


def load_records(path: Path) -> list[dict[str, Any]]:
    """Read a JSON array of project records from *path*."""
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON array of project records")
    return data


def split_records(records: Iterable[dict[str, Any]]
                  ) -> tuple[list[tuple], list[tuple], int]:
    """Split joined records into firm rows and project rows.

    Returns:
        (firm_rows, project_rows, skipped_count). A record without a usable
        project number is skipped; one without a ``firm_id`` gets a firm of
        its own keyed ``F-<project_no>``.
    """
    firms: dict[str, tuple] = {}
    projects: list[tuple] = []
    skipped = 0

    for record in records:
        project_no = clean_text(record.get("project_no"))
        if not project_no or not PROJECT_NO.match(project_no):
            logger.warning("Skipping record with bad project number: %r",
                           record.get("project_no"))
            skipped += 1
            continue

        year = clean_text(record.get("year"))
        if year and not YEAR_TOKEN.match(year):
            logger.warning("%s: year %r does not start with a year", project_no, year)

        province = clean_text(record.get("province"))
        if province and not KnownValues.is_known_province(province):
            logger.warning("%s: province %r is outside Region 1", project_no, province)

        status = clean_text(record.get("status"))
        if status and not KnownValues.is_known_status(status):
            logger.warning("%s: unknown status %r", project_no, status)

        firm_id = clean_text(record.get("firm_id")) or f"F-{project_no}"
        if firm_id not in firms:
            firms[firm_id] = (
                firm_id,
                clean_text(record.get("firm_name")),
                clean_text(record.get("municipality")) or None,
                province or None,
                coerce_coordinate(record.get("latitude")),
                coerce_coordinate(record.get("longitude")),
                clean_text(record.get("sector")) or None,
            )

        projects.append((
            project_no,
            year or None,
            firm_id,
            clean_text(record.get("title")) or None,
            clean_text(record.get("spin")) or None,
            status or None,
            clean_text(record.get("intervention")) or None,
            clean_text(record.get("fund_source")) or None,
            safe_float(record.get("assistance_amount"), default=None),
        ))

    return list(firms.values()), projects, skipped


def build_database(db_path: Path, records: Iterable[dict[str, Any]],
                   rebuild: bool = False) -> dict[str, int]:
    """Create (or update) the database at *db_path* from *records*.

    Returns:
        Counts: ``firms`` and ``projects`` now in the database and
        ``skipped`` input records.
    """
    if rebuild and db_path.exists():
        db_path.unlink()
        logger.info("Removed existing database for rebuild: %s", db_path)

    firm_rows, project_rows, skipped = split_records(records)

    conn = sqlite3.connect(str(db_path))
    try:
        init_pragmas(conn)
        init_schema(conn)
        batch_insert(conn, _FIRM_INSERT, firm_rows)
        batch_insert(conn, _PROJECT_INSERT, project_rows)
        counts = {
            "firms": get_table_count(conn, "firms"),
            "projects": get_table_count(conn, "projects"),
            "skipped": skipped,
        }
    finally:
        conn.close()

    logger.info("Database %s: %d firms, %d projects (%d skipped)",
                db_path, counts["firms"], counts["projects"], skipped)
    return counts


def main(argv: list[str] | None = None) -> int:
    """Parse command-line arguments and build the database."""
    parser = argparse.ArgumentParser(description="Build the Region 1 project database")
    parser.add_argument("--db", type=Path, default=DEFAULT_DB_PATH,
                        help=f"Database path (default: {DEFAULT_DB_PATH})")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", type=Path, metavar="JSON",
                        help="JSON array of joined project records")
    source.add_argument("--sample", action="store_true",
                        help="Seed the four built-in sample projects")
    parser.add_argument("--rebuild", action="store_true",
                        help="Delete the existing database first")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log at DEBUG level")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        records = list(FALLBACK_RECORDS) if args.sample else load_records(args.input)
        counts = build_database(args.db, records, rebuild=args.rebuild)
    except (OSError, ValueError, sqlite3.Error) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Built {args.db}: {counts['firms']} firms, {counts['projects']} projects"
          + (f", {counts['skipped']} skipped" if counts["skipped"] else ""))
    return 0


if __name__ == "__main__":
    sys.exit(main())
