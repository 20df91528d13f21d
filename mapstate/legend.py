"""
Marker colours, sector glyphs and popup content.
"""

from __future__ import annotations

from typing import Optional

from mapstate.models import Project
from utils.formatting import (
    INVALID_AMOUNT,
    format_coordinates,
    format_currency,
    format_date,
    text_or_placeholder,
)

STATUS_COLORS = {
    "Completed": "#28a745",
    "Ongoing": "#ffc107",
    "Processing": "#17a2b8",
    "Terminated": "#dc3545",
}
DEFAULT_COLOR = "#007bff"

DEFAULT_SECTOR_ICON = "📋"

# First match wins; keywords are matched as lowercase substrings.
SECTOR_ICONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("agri", "fishery", "natural"), "🌾"),
    (("food", "beverage"), "🥫"),
    (("textile", "apparel"), "👕"),
    (("leather", "wood", "paper", "furniture"), "🪑"),
    (("chemical", "pharma"), "⚗️"),
    (("plastic", "rubber", "non-metallic"), "🛢️"),
    (("metal", "machinery", "transport"), "⚙️"),
    (("information", "communication", "ict"), "💻"),
    (("other", "regional"), "🏢"),
)


def marker_color(status: Optional[str]) -> str:
    return STATUS_COLORS.get(status or "", DEFAULT_COLOR)


def sector_icon(sector: Optional[str]) -> str:
    if not sector:
        return DEFAULT_SECTOR_ICON
    lowered = sector.lower()
    for keywords, icon in SECTOR_ICONS:
        if any(k in lowered for k in keywords):
            return icon
    return DEFAULT_SECTOR_ICON


def legend_entries() -> list[tuple[str, str]]:
    """(status, colour) pairs shown in the map legend."""
    return list(STATUS_COLORS.items())


def popup_fields(project: Project) -> list[tuple[str, str]]:
    """Labelled rows for a project's popup. Never raises."""
    if project.assistance_amount is not None:
        amount = format_currency(project.assistance_amount)
    elif project.amount_text:
        amount = INVALID_AMOUNT
    else:
        amount = format_currency(None)

    location = ", ".join(p for p in (project.municipality, project.province) if p)

    return [
        ("Title", text_or_placeholder(project.title)),
        ("Status", text_or_placeholder(project.status)),
        ("Firm", text_or_placeholder(project.firm_name)),
        ("SPIN", text_or_placeholder(project.spin)),
        ("Intervention", text_or_placeholder(project.intervention)),
        ("Fund Source", text_or_placeholder(project.fund_source)),
        ("Assistance Amount", amount),
        ("Year", format_date(project.year)),
        ("Sector", text_or_placeholder(project.sector)),
        ("Location", text_or_placeholder(location)),
        ("Coordinates", format_coordinates(project.latitude, project.longitude)),
    ]
