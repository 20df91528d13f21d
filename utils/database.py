"""Database utilities for the project data service.

Provides reusable functions for:
- Schema creation for the firms/projects tables
- SQLite pragmas
- Batch insert operations
- Small query helpers (existence checks, counts, dict rows)
"""

import sqlite3
from typing import List, Dict, Any

SCHEMA = """
CREATE TABLE IF NOT EXISTS firms (
    firm_id      TEXT PRIMARY KEY,
    firm_name    TEXT NOT NULL,
    municipality TEXT,
    province     TEXT,
    latitude     REAL,
    longitude    REAL,
    sector       TEXT
);

CREATE TABLE IF NOT EXISTS projects (
    project_no        TEXT PRIMARY KEY,
    year              TEXT,
    firm_id           TEXT NOT NULL REFERENCES firms(firm_id),
    title             TEXT,
    spin              TEXT,
    status            TEXT,
    intervention      TEXT,
    fund_source       TEXT,
    assistance_amount REAL
);

CREATE INDEX IF NOT EXISTS idx_projects_firm ON projects(firm_id);
CREATE INDEX IF NOT EXISTS idx_projects_status ON projects(status);
CREATE INDEX IF NOT EXISTS idx_firms_province ON firms(province);
"""


def init_pragmas(conn: sqlite3.Connection) -> None:
    """Initialize SQLite performance and reliability pragmas.

    - WAL mode so the API can read while a rebuild writes
    - NORMAL synchronous mode for speed without data loss
    - foreign keys enforced for projects.firm_id
    """
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    conn.execute("PRAGMA foreign_keys=ON")


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the firms and projects tables if they do not exist."""
    conn.executescript(SCHEMA)


def batch_insert(conn: sqlite3.Connection, query: str, rows: List[tuple],
                 batch_size: int = 500) -> int:
    """Insert rows in batches for efficiency.

    Args:
        conn: SQLite connection
        query: INSERT statement with ? placeholders
        rows: List of tuples to insert
        batch_size: Rows per executemany call

    Returns:
        Total number of rows inserted
    """
    total = 0
    for i in range(0, len(rows), batch_size):
        batch = rows[i:i + batch_size]
        conn.executemany(query, batch)
        total += len(batch)
    conn.commit()
    return total


def get_table_count(conn: sqlite3.Connection, table: str) -> int:
    """Get row count for a table created by init_schema()."""
    if table not in ("firms", "projects"):
        raise ValueError(f"Unknown table: {table}")
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    """Check if a table exists in the database.

    Args:
        conn: SQLite connection
        table: Table name

    Returns:
        True if table exists, False otherwise
    """
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table,)
    )
    return cursor.fetchone() is not None


def query_to_dicts(conn: sqlite3.Connection, query: str,
                   params: tuple = ()) -> List[Dict[str, Any]]:
    """Execute query and return results as list of dicts.

    Args:
        conn: SQLite connection (must have row_factory set)
        query: SQL query string
        params: Query parameters tuple

    Returns:
        List of row dicts
    """
    cursor = conn.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]
