"""
Project list endpoints.

GET /api/projects-with-location          → every geocoded project
GET /api/projects-by-province?province=  → substring match on province
GET /api/projects-by-status?status=      → exact status
GET /api/search-projects?q=              → title / firm / intervention search

All lists are the projects ⋈ firms join restricted to firms with
coordinates, newest project number first.
"""

import logging
import sqlite3

from fastapi import APIRouter, Depends, Query

from api.database import get_db
from api.models import ErrorResponse, ProjectOut
from utils.database import query_to_dicts
from utils.query import build_project_query

logger = logging.getLogger(__name__)

router = APIRouter(tags=["projects"])

SEARCH_LIMIT = 50

_ERRORS = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _require(value: str | None, name: str) -> str:
    """Reject a missing or blank query parameter with a ValueError (→ 400)."""
    if value is None or not value.strip():
        raise ValueError(f"{name} parameter is required")
    return value.strip()


@router.get(
    "/projects-with-location",
    response_model=list[ProjectOut],
    summary="List geocoded projects",
)
def projects_with_location(conn: sqlite3.Connection = Depends(get_db)) -> list[dict]:
    """Return every project whose firm has a latitude and longitude."""
    sql, params = build_project_query()
    return query_to_dicts(conn, sql, tuple(params))


@router.get(
    "/projects-by-province",
    response_model=list[ProjectOut],
    responses=_ERRORS,
    summary="List projects in a province",
)
def projects_by_province(
    province: str | None = Query(None, description="Province name (case-insensitive substring)"),
    conn: sqlite3.Connection = Depends(get_db),
) -> list[dict]:
    province = _require(province, "Province")
    sql, params = build_project_query(province=province)
    return query_to_dicts(conn, sql, tuple(params))


@router.get(
    "/projects-by-status",
    response_model=list[ProjectOut],
    responses=_ERRORS,
    summary="List projects with a status",
)
def projects_by_status(
    status: str | None = Query(None, description="Exact project status"),
    conn: sqlite3.Connection = Depends(get_db),
) -> list[dict]:
    status = _require(status, "Status")
    sql, params = build_project_query(status=status)
    return query_to_dicts(conn, sql, tuple(params))


@router.get(
    "/search-projects",
    response_model=list[ProjectOut],
    responses=_ERRORS,
    summary="Search projects",
)
def search_projects(
    q: str | None = Query(None, description="Text to find in title, firm name or intervention"),
    conn: sqlite3.Connection = Depends(get_db),
) -> list[dict]:
    """Case-insensitive substring search, at most 50 rows."""
    q = _require(q, "Search query")
    sql, params = build_project_query(q=q, limit=SEARCH_LIMIT)
    rows = query_to_dicts(conn, sql, tuple(params))
    logger.debug("search-projects q=%r rows=%d", q, len(rows))
    return rows
