"""
Pydantic response models for the data service.

Optional fields default to None so that rows with NULL columns are still
valid responses.  Field() descriptions and examples feed the OpenAPI docs.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


# ── Project models ────────────────────────────────────────────────────────────

class ProjectOut(BaseModel):
    """One assistance project joined with its firm."""
    project_no: str = Field(..., description="Project number", examples=["PJ001"])
    year: str | None = Field(None, description="Project year or year range", examples=["2023"])
    firm_id: str | None = Field(None, description="Identifier of the assisted firm", examples=["F001"])
    title: str | None = Field(None, description="Project title", examples=["Coffee Processing Upgrade"])
    spin: str | None = Field(None, description="SPIN reference code", examples=["SPIN-2023-001"])
    status: str | None = Field(None, description="Completed | Ongoing | Processing | Terminated", examples=["Completed"])
    intervention: str | None = Field(None, description="Type of intervention", examples=["Equipment Upgrading"])
    fund_source: str | None = Field(None, description="Funding source", examples=["SETUP"])
    assistance_amount: float | None = Field(None, description="Assistance amount in pesos", examples=[250000.0])
    firm_name: str | None = Field(None, description="Firm name", examples=["Ilocos Coffee Growers"])
    municipality: str | None = Field(None, description="Firm municipality", examples=["Laoag City"])
    province: str | None = Field(None, description="Firm province", examples=["Ilocos Norte"])
    latitude: float = Field(..., description="Firm latitude", examples=[18.1977])
    longitude: float = Field(..., description="Firm longitude", examples=[120.5936])
    sector: str | None = Field(None, description="Industry sector", examples=["Food Processing"])


# ── Reference models ──────────────────────────────────────────────────────────

class ProjectStatsOut(BaseModel):
    """Project totals grouped by status and by province."""
    total: int = Field(..., description="Number of geocoded projects", examples=[128])
    byStatus: dict[str, int] = Field(
        default_factory=dict, description="Project count per status",
        examples=[{"Completed": 80, "Ongoing": 40}],
    )
    byProvince: dict[str, int] = Field(
        default_factory=dict, description="Project count per province",
        examples=[{"Ilocos Norte": 30, "Pangasinan": 55}],
    )


class HealthOut(BaseModel):
    """Liveness response."""
    status: str = Field(..., examples=["ok"])
    timestamp: str = Field(..., description="ISO-8601 UTC time of the check")
    message: str = Field(..., examples=["API server is running"])


class ErrorResponse(BaseModel):
    """Body returned by the exception handlers."""
    error: str = Field(..., description="Short error title", examples=["Bad request"])
    detail: str | None = Field(None, description="Error detail message")
    status_code: int = Field(..., description="HTTP status code", examples=[400])
