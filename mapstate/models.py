"""
Project records as consumed by the dashboard core.

A ``Project`` is built once from a data-service record and never mutated.
Field names follow Python conventions; ``Project.from_record`` accepts the
snake_case keys returned by ``GET /api/projects-with-location`` and also the
camelCase keys some exports use (``firmName``, ``assistanceAmount``).

Usage::

    from mapstate.models import Project, normalize_year

    p = Project.from_record({"project_no": "PJ001", "year": "2022-2023", ...})
    normalize_year(p.year)      # "2022"
    p.has_location              # True when both coordinates parsed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from utils.strings import clean_text, coerce_coordinate, safe_float

logger = logging.getLogger(__name__)


def normalize_year(year: Optional[str]) -> str:
    """Leading year token of a possibly range-valued year field.

    ``"2022-2023"`` -> ``"2022"``, ``"2024"`` -> ``"2024"``, ``None`` or
    ``""`` -> ``""``. The empty result never equals a concrete year.
    """
    if year is None:
        return ""
    text = str(year).strip()
    if not text:
        return ""
    return text.split("-", 1)[0].strip()


def _pick(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


@dataclass(frozen=True)
class Project:
    """One assistance project joined with its firm's location."""

    id: str
    title: str = ""
    firm_name: str = ""
    status: str = ""
    sector: str = ""
    year: str = ""
    province: str = ""
    municipality: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    fund_source: str = ""
    intervention: str = ""
    assistance_amount: Optional[float] = None
    amount_text: str = ""
    spin: str = ""
    firm_id: str = ""

    @property
    def normalized_year(self) -> str:
        return normalize_year(self.year)

    @property
    def has_location(self) -> bool:
        """True when both coordinates are present; required for mapping."""
        return self.latitude is not None and self.longitude is not None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Project":
        """Build a Project from a data-service row.

        Raises:
            ValueError: if the record carries no project number.
        """
        project_id = clean_text(_pick(record, "project_no", "id", "projectNo"))
        if not project_id:
            raise ValueError("project record has no project_no")

        amount_raw = _pick(record, "assistance_amount", "assistanceAmount")
        amount: Optional[float] = None
        if amount_raw not in (None, ""):
            amount = safe_float(amount_raw, default=float("nan"))
            if amount != amount:  # NaN: unparseable amount
                logger.debug("Project %s: unparseable amount %r", project_id, amount_raw)
                amount = None

        return cls(
            id=project_id,
            title=clean_text(_pick(record, "title", "project_title")),
            firm_name=clean_text(_pick(record, "firm_name", "firmName")),
            status=clean_text(record.get("status")),
            sector=clean_text(record.get("sector")),
            year=clean_text(record.get("year")),
            province=clean_text(record.get("province")),
            municipality=clean_text(record.get("municipality")),
            latitude=coerce_coordinate(record.get("latitude")),
            longitude=coerce_coordinate(record.get("longitude")),
            fund_source=clean_text(_pick(record, "fund_source", "fundSource")),
            intervention=clean_text(record.get("intervention")),
            assistance_amount=amount,
            amount_text=clean_text(amount_raw),
            spin=clean_text(_pick(record, "spin", "SPIN")),
            firm_id=clean_text(_pick(record, "firm_id", "firmId")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Snake_case dict matching the data-service record shape."""
        return {
            "project_no": self.id,
            "title": self.title,
            "firm_name": self.firm_name,
            "status": self.status,
            "sector": self.sector,
            "year": self.year,
            "province": self.province,
            "municipality": self.municipality,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "fund_source": self.fund_source,
            "intervention": self.intervention,
            "assistance_amount": self.assistance_amount,
            "spin": self.spin,
            "firm_id": self.firm_id,
        }


def projects_from_records(records) -> list[Project]:
    """Convert raw records, skipping (and logging) ones with no project number."""
    projects: list[Project] = []
    for record in records:
        if not isinstance(record, Mapping):
            logger.warning("Skipping non-object project record: %r", record)
            continue
        try:
            projects.append(Project.from_record(record))
        except ValueError as exc:
            logger.warning("Skipping project record: %s", exc)
    return projects
