"""
Reference and liveness endpoints.

GET /api/provinces      → distinct geocoded provinces, sorted
GET /api/project-stats  → {total, byStatus, byProvince}
GET /api/health         → liveness check (no database access)

Provinces and stats only change when the database is rebuilt, so both are
cached per database path for five minutes.
"""

import sqlite3
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.database import get_db, get_db_path
from api.models import HealthOut, ProjectStatsOut
from utils.cache import TTLCache
from utils.query import GEOCODED, PROJECT_FROM

router = APIRouter(tags=["reference"])

_CACHE_HEADER = {"Cache-Control": "max-age=300"}

_cache = TTLCache(maxsize=16, ttl_seconds=300)


def _load_provinces(conn: sqlite3.Connection) -> list[str]:
    rows = conn.execute(
        "SELECT DISTINCT f.province FROM firms f "
        f"WHERE {GEOCODED} AND f.province IS NOT NULL AND f.province != '' "
        "ORDER BY f.province"
    ).fetchall()
    return [r["province"] for r in rows]


def _load_stats(conn: sqlite3.Connection) -> dict:
    total = conn.execute(
        f"SELECT COUNT(*) AS n {PROJECT_FROM} WHERE {GEOCODED}"
    ).fetchone()["n"]
    by_status = conn.execute(
        f"SELECT p.status AS key, COUNT(*) AS n {PROJECT_FROM} "
        f"WHERE {GEOCODED} AND p.status IS NOT NULL "
        "GROUP BY p.status ORDER BY p.status"
    ).fetchall()
    by_province = conn.execute(
        f"SELECT f.province AS key, COUNT(*) AS n {PROJECT_FROM} "
        f"WHERE {GEOCODED} AND f.province IS NOT NULL "
        "GROUP BY f.province ORDER BY f.province"
    ).fetchall()
    return {
        "total": total,
        "byStatus": {r["key"]: r["n"] for r in by_status},
        "byProvince": {r["key"]: r["n"] for r in by_province},
    }


@router.get(
    "/provinces",
    response_model=list[str],
    summary="List provinces",
)
def list_provinces(conn: sqlite3.Connection = Depends(get_db)) -> JSONResponse:
    """Return every non-empty province that has at least one geocoded firm."""
    data = _cache.get_or_set(("provinces", str(get_db_path())),
                             lambda: _load_provinces(conn))
    return JSONResponse(content=data, headers=_CACHE_HEADER)


@router.get(
    "/project-stats",
    response_model=ProjectStatsOut,
    summary="Project counts by status and province",
)
def project_stats(conn: sqlite3.Connection = Depends(get_db)) -> JSONResponse:
    data = _cache.get_or_set(("project-stats", str(get_db_path())),
                             lambda: _load_stats(conn))
    return JSONResponse(content=data, headers=_CACHE_HEADER)


@router.get(
    "/health",
    response_model=HealthOut,
    summary="Health check",
)
def health() -> dict:
    """Return 200 OK while the process is serving requests."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "message": "API server is running",
    }


def clear_cache() -> None:
    """Drop cached provinces and stats (after a database rebuild)."""
    _cache.clear()
