"""
Client for the read-only project data service.

``ProjectRepository.load()`` fetches the geocoded projects and the province
list in parallel, once, at startup. Any failure (network error, non-2xx
status, malformed body) falls back to a small embedded dataset so the rest
of the dashboard stays usable; the returned ``LoadResult`` then carries a
non-fatal error message for the UI.

Usage::

    from mapstate.repository import ProjectRepository

    result = ProjectRepository("http://localhost:5000/api").load()
    if result.error:
        print(result.error)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import requests

from mapstate.models import Project, normalize_year, projects_from_records
from utils.config import AppConfig, KnownValues
from utils.http import RetryStrategy, SessionManager, fetch_json

logger = logging.getLogger(__name__)

FALLBACK_ERROR = "Failed to load data. Using fallback data."

FALLBACK_RECORDS: tuple[dict[str, Any], ...] = (
    {"project_no": "PJ001", "title": "Sample Project 1", "firm_name": "Sample Firm 1",
     "status": "Completed", "sector": "Agriculture", "year": "2022",
     "latitude": "18.1", "longitude": "120.7", "province": "Ilocos Norte"},
    {"project_no": "PJ002", "title": "Sample Project 2", "firm_name": "Sample Firm 2",
     "status": "Ongoing", "sector": "Education", "year": "2023",
     "latitude": "17.5", "longitude": "120.3", "province": "Ilocos Sur"},
    {"project_no": "PJ003", "title": "Sample Project 3", "firm_name": "Sample Firm 3",
     "status": "Completed", "sector": "Health", "year": "2021",
     "latitude": "16.5", "longitude": "120.3", "province": "La Union"},
    {"project_no": "PJ004", "title": "Sample Project 4", "firm_name": "Sample Firm 4",
     "status": "Ongoing", "sector": "Transportation", "year": "2024",
     "latitude": "15.9", "longitude": "120.3", "province": "Pangasinan"},
)

FALLBACK_PROVINCES: tuple[str, ...] = KnownValues.PROVINCES


@dataclass(frozen=True)
class LoadResult:
    projects: tuple[Project, ...]
    provinces: tuple[str, ...]
    error: Optional[str] = None
    from_fallback: bool = False


def fallback_result(error: Optional[str] = FALLBACK_ERROR) -> LoadResult:
    return LoadResult(
        projects=tuple(projects_from_records(FALLBACK_RECORDS)),
        provinces=FALLBACK_PROVINCES,
        error=error,
        from_fallback=True,
    )


def prepare_pool(projects: Sequence[Project],
                 excluded_statuses: Sequence[str] = ("Processing",)) -> list[Project]:
    """Projects eligible for the map: geocoded and not in an excluded status."""
    excluded = set(excluded_statuses)
    return [p for p in projects if p.status not in excluded and p.has_location]


def distinct_in_order(values) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)


def status_options(projects: Sequence[Project]) -> list[str]:
    return distinct_in_order(p.status for p in projects)


def sector_options(projects: Sequence[Project]) -> list[str]:
    return distinct_in_order(p.sector for p in projects)


def year_options(projects: Sequence[Project]) -> list[str]:
    """Distinct non-empty normalized years, newest first."""
    years = {normalize_year(p.year) for p in projects}
    years.discard("")
    return sorted(years, reverse=True)


class ProjectRepository:

    def __init__(self, base_url: str, session_manager: Optional[SessionManager] = None,
                 timeout: float = 10) -> None:
        self.base_url = base_url.rstrip("/")
        self.session_manager = session_manager or SessionManager(
            retry_strategy=RetryStrategy(max_retries=0))
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "ProjectRepository":
        config = config or AppConfig.from_env()
        manager = SessionManager(retry_strategy=RetryStrategy(max_retries=config.http_retries))
        return cls(config.api_base_url, session_manager=manager,
                   timeout=config.http_timeout)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def fetch_projects(self) -> list[Project]:
        """GET projects-with-location.

        Raises:
            requests.RequestException: transport or HTTP status failure
            ValueError: body is not a JSON list
        """
        body = fetch_json(self.session_manager.session,
                          self._url("projects-with-location"), timeout=self.timeout)
        if not isinstance(body, list):
            raise ValueError(f"expected a list of projects, got {type(body).__name__}")
        return projects_from_records(body)

    def fetch_provinces(self) -> list[str]:
        """GET provinces.

        Raises:
            requests.RequestException: transport or HTTP status failure
            ValueError: body is not a JSON list
        """
        body = fetch_json(self.session_manager.session,
                          self._url("provinces"), timeout=self.timeout)
        if not isinstance(body, list):
            raise ValueError(f"expected a list of provinces, got {type(body).__name__}")
        return [str(p) for p in body if p]

    def load(self) -> LoadResult:
        """Fetch projects and provinces in parallel; fall back on any failure."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            projects_future = pool.submit(self.fetch_projects)
            provinces_future = pool.submit(self.fetch_provinces)
            try:
                projects = projects_future.result()
                provinces = provinces_future.result()
            except (requests.RequestException, ValueError) as e:
                logger.warning("Error loading data from %s: %s", self.base_url, e)
                return fallback_result()
        logger.info("Loaded %d projects and %d provinces from %s",
                    len(projects), len(provinces), self.base_url)
        return LoadResult(projects=tuple(projects), provinces=tuple(provinces))

    def close(self) -> None:
        self.session_manager.close()
