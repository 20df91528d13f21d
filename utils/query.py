"""Shared SQL query builder for the project API routes.

Every project query is the join of ``projects`` and ``firms`` restricted to
geocoded firms; routes only add conditions and a row limit.
"""

from typing import Any

from utils.strings import escape_like

PROJECT_COLUMNS = """
    p.project_no,
    p.year,
    p.firm_id,
    p.title,
    p.spin,
    p.status,
    p.intervention,
    p.fund_source,
    p.assistance_amount,
    f.firm_name,
    f.municipality,
    f.province,
    f.latitude,
    f.longitude,
    f.sector
"""

PROJECT_FROM = """
    FROM projects p
    INNER JOIN firms f ON p.firm_id = f.firm_id
"""

GEOCODED = "f.latitude IS NOT NULL AND f.longitude IS NOT NULL"

PROJECT_ORDER = "ORDER BY p.project_no DESC"


def build_where_clause(
    province: str | None = None,
    status: str | None = None,
    q: str | None = None,
) -> tuple[str, list[Any]]:
    """Build the WHERE clause for a project query.

    Args:
        province: Case-insensitive substring match on the firm's province.
        status: Exact project status.
        q: Case-insensitive substring over title, firm name and intervention.

    Returns:
        Tuple of (where_clause_string, params_list). The clause always
        restricts to geocoded firms.
    """
    conditions: list[str] = [GEOCODED]
    params: list[Any] = []

    if province:
        conditions.append("LOWER(f.province) LIKE ? ESCAPE '\\'")
        params.append(f"%{escape_like(province.lower())}%")

    if status:
        conditions.append("p.status = ?")
        params.append(status)

    if q:
        pattern = f"%{escape_like(q.lower())}%"
        conditions.append(
            "(LOWER(p.title) LIKE ? ESCAPE '\\'"
            " OR LOWER(f.firm_name) LIKE ? ESCAPE '\\'"
            " OR LOWER(p.intervention) LIKE ? ESCAPE '\\')"
        )
        params.extend([pattern, pattern, pattern])

    return "WHERE " + " AND ".join(conditions), params


def build_project_query(
    province: str | None = None,
    status: str | None = None,
    q: str | None = None,
    limit: int | None = None,
) -> tuple[str, list[Any]]:
    """Full SELECT for projects with location, newest project number first."""
    where, params = build_where_clause(province=province, status=status, q=q)
    sql = f"SELECT {PROJECT_COLUMNS} {PROJECT_FROM} {where} {PROJECT_ORDER}"
    if limit is not None:
        sql += " LIMIT ?"
        params.append(int(limit))
    return sql, params
