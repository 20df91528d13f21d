"""
Pytest fixtures for the Region 1 project dashboard tests.

Provides a deterministic project pool, a headless map widget, a virtual-time
scheduler, a loaded Dashboard, and a temporary SQLite database built with
build_project_db.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from mapstate.dashboard import Dashboard  # noqa: E402
from mapstate.models import Project, projects_from_records  # noqa: E402
from mapstate.repository import LoadResult  # noqa: E402
from mapstate.scheduler import ManualScheduler  # noqa: E402
from mapstate.widget import InMemoryMapWidget  # noqa: E402
from utils.config import KnownValues  # noqa: E402


# ── Sample data ───────────────────────────────────────────────────────────────
# PJ007 (Processing) and PJ008 (no coordinates) never reach the mapped pool.

POOL_RECORDS = [
    {"project_no": "PJ001", "title": "Coffee Processing Upgrade",
     "firm_name": "Ilocos Coffee Growers", "firm_id": "F001",
     "status": "Completed", "sector": "Food Processing", "year": "2022-2023",
     "province": "Ilocos Norte", "municipality": "Laoag City",
     "latitude": 18.1977, "longitude": 120.5936,
     "fund_source": "SETUP", "intervention": "Equipment Upgrading",
     "assistance_amount": 250000, "spin": "SPIN-2022-001"},
    {"project_no": "PJ002", "title": "Loom Modernization",
     "firm_name": "Vigan Weavers Cooperative", "firm_id": "F002",
     "status": "Ongoing", "sector": "Textile", "year": "2023",
     "province": "Ilocos Sur", "municipality": "Vigan City",
     "latitude": "17.5747", "longitude": "120.3869",
     "fund_source": "GIA", "intervention": "Technology Transfer",
     "assistance_amount": "180,500.75"},
    {"project_no": "PJ003", "title": "Fish Drying Facility",
     "firm_name": "Bauang Fisherfolk Association", "firm_id": "F003",
     "status": "Completed", "sector": "Agriculture", "year": "2023",
     "province": "La Union", "municipality": "Bauang",
     "latitude": 16.5308, "longitude": 120.3317,
     "fund_source": "SETUP", "intervention": "Equipment Upgrading",
     "assistance_amount": 320000},
    {"project_no": "PJ004", "title": "Bamboo Furniture Tooling",
     "firm_name": "Pangasinan Bamboo Crafts", "firm_id": "F004",
     "status": "Ongoing", "sector": "Furniture", "year": "2024",
     "province": "Pangasinan", "municipality": "Dagupan City",
     "latitude": 16.0433, "longitude": 120.3333,
     "fund_source": "SETUP", "intervention": "Product Development",
     "assistance_amount": None},
    {"project_no": "PJ005", "title": "Bagoong Packaging Line",
     "firm_name": "Lingayen Bagoong Makers", "firm_id": "F005",
     "status": "Completed", "sector": "Food Processing", "year": "2024",
     "province": "Pangasinan", "municipality": "Lingayen",
     "latitude": 16.0217, "longitude": 120.2319,
     "fund_source": "GIA", "intervention": "Packaging and Labeling",
     "assistance_amount": 95000},
    {"project_no": "PJ006", "title": "Garlic Storage",
     "firm_name": "Sinait Garlic Farmers", "firm_id": "F006",
     "status": "Terminated", "sector": "Agriculture", "year": "2021",
     "province": "Ilocos Sur", "municipality": "Sinait",
     "latitude": 17.8667, "longitude": 120.4583,
     "fund_source": "SETUP", "intervention": "Cold Storage",
     "assistance_amount": 150000},
    {"project_no": "PJ007", "title": "Vinegar Bottling",
     "firm_name": "Paoay Sukang Iloko", "firm_id": "F007",
     "status": "Processing", "sector": "Food Processing", "year": "2024",
     "province": "Ilocos Norte", "municipality": "Paoay",
     "latitude": 18.0619, "longitude": 120.5211,
     "fund_source": "SETUP", "intervention": "Equipment Upgrading",
     "assistance_amount": 120000},
    {"project_no": "PJ008", "title": "Ungeocoded Project",
     "firm_name": "Nowhere Trading", "firm_id": "F008",
     "status": "Ongoing", "sector": "ICT", "year": "2023",
     "province": "La Union", "municipality": "San Fernando City",
     "latitude": None, "longitude": None,
     "fund_source": "GIA", "intervention": "Training",
     "assistance_amount": 50000},
]

MAPPED_IDS = ["PJ001", "PJ002", "PJ003", "PJ004", "PJ005", "PJ006"]


def make_project(project_id: str, **fields) -> Project:
    """A Project with sensible coordinates unless overridden."""
    fields.setdefault("latitude", 17.0)
    fields.setdefault("longitude", 120.5)
    return Project(id=project_id, **fields)


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture()
def records():
    return [dict(r) for r in POOL_RECORDS]


@pytest.fixture()
def projects(records):
    return projects_from_records(records)


@pytest.fixture()
def load_result(projects):
    return LoadResult(projects=tuple(projects), provinces=KnownValues.PROVINCES)


@pytest.fixture()
def widget():
    return InMemoryMapWidget()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def dashboard(widget, scheduler, load_result):
    """A Dashboard loaded with the sample pool, at the region default view."""
    dash = Dashboard(widget, scheduler)
    dash.load(load_result)
    return dash


@pytest.fixture()
def project_db(tmp_path, records):
    """Temporary SQLite database built from the sample records."""
    from build_project_db import build_database

    db_path = tmp_path / "projects.sqlite"
    build_database(db_path, records)
    return db_path
