"""
Database connection management for the data service.

Provides a get_db() dependency that opens a per-request SQLite connection and
closes it after the response is sent.  The database path is resolved once at
startup from the APP_DB_PATH environment variable (default: projects.sqlite)
and can be overridden by create_app(db_path=...).
"""

import os
import sqlite3
from collections.abc import Generator
from pathlib import Path

from fastapi import HTTPException

_DB_PATH: Path = Path(os.getenv("APP_DB_PATH", "projects.sqlite"))


def get_db_path() -> Path:
    """Return the configured database path."""
    return _DB_PATH


def _make_conn(db_path: Path, read_only: bool = True) -> sqlite3.Connection:
    """Open a single SQLite connection with standard pragmas.

    Args:
        db_path: Path to the SQLite database file.
        read_only: If True (the service never writes), open via a
            ``mode=ro`` URI.
    """
    if read_only:
        uri = f"file:{db_path}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, check_same_thread=False,
                               timeout=10)
    else:
        conn = sqlite3.connect(str(db_path), check_same_thread=False,
                               timeout=10)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA busy_timeout=5000")
    return conn


def get_db() -> Generator[sqlite3.Connection, None, None]:
    """FastAPI dependency: yield a SQLite connection, close on exit.

    Raises HTTP 503 with a friendly message if the database file is
    missing, instead of a cryptic SQLite error.

    Usage in a route::

        from api.database import get_db
        from fastapi import Depends

        @router.get("/example")
        def example(conn=Depends(get_db)):
            ...
    """
    if not _DB_PATH.exists():
        raise HTTPException(
            status_code=503,
            detail=(
                f"Database not found at '{_DB_PATH}'. "
                "Run 'python build_project_db.py' to build it."
            ),
        )
    conn = _make_conn(_DB_PATH)
    try:
        yield conn
    finally:
        conn.close()
