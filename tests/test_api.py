"""
Tests for the data service: api/app.py, api/routes/projects.py and
api/routes/reference.py

Uses FastAPI's TestClient against a temporary database built from the
sample records in conftest.py.
"""
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from api.app import create_app  # noqa: E402
from api.routes import reference  # noqa: E402


@pytest.fixture()
def client(project_db):
    reference.clear_cache()
    return TestClient(create_app(db_path=project_db))


def _ids(resp):
    return [row["project_no"] for row in resp.json()]


# ── Project lists ─────────────────────────────────────────────────────────────

class TestProjectsWithLocation:
    def test_geocoded_only_newest_first(self, client):
        resp = client.get("/api/projects-with-location")
        assert resp.status_code == 200
        assert _ids(resp) == ["PJ007", "PJ006", "PJ005", "PJ004",
                              "PJ003", "PJ002", "PJ001"]

    def test_row_is_joined_with_firm(self, client):
        rows = {r["project_no"]: r for r in client.get("/api/projects-with-location").json()}
        row = rows["PJ002"]
        assert row["firm_name"] == "Vigan Weavers Cooperative"
        assert row["province"] == "Ilocos Sur"
        assert row["latitude"] == pytest.approx(17.5747)
        assert row["assistance_amount"] == pytest.approx(180500.75)
        assert rows["PJ004"]["assistance_amount"] is None

    def test_processing_projects_are_served(self, client):
        rows = client.get("/api/projects-with-location").json()
        assert "Processing" in {r["status"] for r in rows}


class TestProjectsByProvince:
    def test_case_insensitive_substring(self, client):
        resp = client.get("/api/projects-by-province", params={"province": "ilocos"})
        assert resp.status_code == 200
        assert _ids(resp) == ["PJ007", "PJ006", "PJ002", "PJ001"]

    def test_exact_name(self, client):
        resp = client.get("/api/projects-by-province", params={"province": "La Union"})
        assert _ids(resp) == ["PJ003"]

    def test_missing_parameter(self, client):
        resp = client.get("/api/projects-by-province")
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Bad request"
        assert body["detail"] == "Province parameter is required"
        assert body["status_code"] == 400

    def test_blank_parameter(self, client):
        resp = client.get("/api/projects-by-province", params={"province": "  "})
        assert resp.status_code == 400


class TestProjectsByStatus:
    def test_exact_status(self, client):
        resp = client.get("/api/projects-by-status", params={"status": "Completed"})
        assert _ids(resp) == ["PJ005", "PJ003", "PJ001"]

    def test_status_is_case_sensitive(self, client):
        assert client.get("/api/projects-by-status", params={"status": "completed"}).json() == []

    def test_missing_parameter(self, client):
        resp = client.get("/api/projects-by-status")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Status parameter is required"


class TestSearchProjects:
    def test_title_match(self, client):
        assert _ids(client.get("/api/search-projects", params={"q": "coffee"})) == ["PJ001"]

    def test_firm_name_match(self, client):
        assert _ids(client.get("/api/search-projects", params={"q": "WEAVERS"})) == ["PJ002"]

    def test_intervention_match(self, client):
        assert _ids(client.get("/api/search-projects", params={"q": "cold storage"})) == ["PJ006"]

    def test_like_wildcards_are_literal(self, client):
        assert client.get("/api/search-projects", params={"q": "%"}).json() == []
        assert client.get("/api/search-projects", params={"q": "_"}).json() == []

    def test_missing_query(self, client):
        resp = client.get("/api/search-projects")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Search query parameter is required"


# ── Reference endpoints ───────────────────────────────────────────────────────

class TestReference:
    def test_provinces_sorted(self, client):
        resp = client.get("/api/provinces")
        assert resp.status_code == 200
        assert resp.json() == ["Ilocos Norte", "Ilocos Sur", "La Union", "Pangasinan"]
        assert resp.headers["cache-control"] == "max-age=300"

    def test_project_stats(self, client):
        body = client.get("/api/project-stats").json()
        assert body["total"] == 7
        assert body["byStatus"] == {"Completed": 3, "Ongoing": 2,
                                    "Processing": 1, "Terminated": 1}
        assert body["byProvince"] == {"Ilocos Norte": 2, "Ilocos Sur": 2,
                                      "La Union": 1, "Pangasinan": 2}

    def test_stats_are_cached(self, client):
        first = client.get("/api/project-stats").json()
        assert client.get("/api/project-stats").json() == first
        assert reference._cache.stats()["hits"] >= 1

    def test_health(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "ok"
        assert body["message"] == "API server is running"
        assert body["timestamp"].endswith("+00:00")


# ── App behaviour ─────────────────────────────────────────────────────────────

class TestApp:
    def test_request_id_header(self, client):
        resp = client.get("/api/health")
        assert len(resp.headers["X-Request-ID"]) == 8

    def test_missing_database_is_503(self, tmp_path):
        reference.clear_cache()
        client = TestClient(create_app(db_path=tmp_path / "absent.sqlite"))
        resp = client.get("/api/projects-with-location")
        assert resp.status_code == 503
        assert "build_project_db.py" in resp.json()["detail"]

    def test_health_without_database(self, tmp_path):
        client = TestClient(create_app(db_path=tmp_path / "absent.sqlite"))
        assert client.get("/api/health").status_code == 200

    def test_unbuilt_database_is_500(self, tmp_path):
        empty = tmp_path / "empty.sqlite"
        empty.touch()
        client = TestClient(create_app(db_path=empty), raise_server_exceptions=False)
        resp = client.get("/api/projects-with-location")
        assert resp.status_code == 500
        assert resp.json()["error"] == "Internal server error"

    def test_openapi_lists_routes(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        for path in ("/api/projects-with-location", "/api/projects-by-province",
                     "/api/projects-by-status", "/api/search-projects",
                     "/api/provinces", "/api/project-stats", "/api/health"):
            assert path in paths
