"""Display formatting utilities for the project dashboard.

Every formatter here is total: bad input produces a placeholder string,
never an exception, because popup content is computed for whatever record
happens to be focused.

Provides:
- format_currency / format_date / format_coordinates for popup fields
- format_count and truncate_text for lists and badges
- TableFormatter for aligned CLI output
"""

import datetime as _dt
import math
import re
from typing import Any, List, Optional

from utils.patterns import CURRENCY_SYMBOLS

NOT_SPECIFIED = "Not specified"
INVALID_AMOUNT = "Invalid amount"
INVALID_DATE = "Invalid date"

_YEAR_ONLY = re.compile(r"^\d{4}$")
_YEAR_RANGE = re.compile(r"^(\d{4})\s*-\s*(\d{4})$")


def format_currency(value: Any, symbol: str = "₱") -> str:
    """Format an assistance amount in Philippine pesos.

    Examples:
        format_currency(1234.5) -> "₱1,234.50"
        format_currency("250000") -> "₱250,000.00"
        format_currency(None) -> "Not specified"
        format_currency("n/a") -> "Invalid amount"
    """
    if value is None or value == "":
        return NOT_SPECIFIED
    if isinstance(value, bool):
        return INVALID_AMOUNT
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        text = CURRENCY_SYMBOLS.sub("", str(value)).replace(",", "").strip()
        try:
            amount = float(text)
        except ValueError:
            return INVALID_AMOUNT
    if math.isnan(amount) or math.isinf(amount):
        return INVALID_AMOUNT
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_date(value: Any) -> str:
    """Format a date-like value as "Month D, YYYY".

    Bare years ("2022") and year ranges ("2022-2023") are shown as given.

    Examples:
        format_date("2023-03-05") -> "March 5, 2023"
        format_date("2022") -> "2022"
        format_date("") -> "Not specified"
        format_date("soon") -> "Invalid date"
    """
    if value is None or value == "":
        return NOT_SPECIFIED
    if isinstance(value, _dt.datetime):
        value = value.date()
    if isinstance(value, _dt.date):
        return f"{value:%B} {value.day}, {value.year}"
    text = str(value).strip()
    if not text:
        return NOT_SPECIFIED
    if _YEAR_ONLY.match(text):
        return text
    m = _YEAR_RANGE.match(text)
    if m:
        return f"{m.group(1)}-{m.group(2)}"
    try:
        parsed = _dt.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return INVALID_DATE
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def format_coordinates(lat: Any, lng: Any, precision: int = 4) -> str:
    """Render as "18.1000, 120.7000"; "Not specified" if either is unusable."""
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError):
        return NOT_SPECIFIED
    if any(math.isnan(v) or math.isinf(v) for v in (lat_f, lng_f)):
        return NOT_SPECIFIED
    return f"{lat_f:.{precision}f}, {lng_f:.{precision}f}"


def format_count(value: Optional[int]) -> str:
    """Format a count with thousands separator.

    Examples:
        format_count(1234567) -> "1,234,567"
        format_count(None) -> "-"
    """
    if value is None:
        return "-"
    return f"{value:,d}"


def text_or_placeholder(value: Any) -> str:
    """The value as text, or "Not specified" when empty."""
    if value is None:
        return NOT_SPECIFIED
    text = str(value).strip()
    return text if text else NOT_SPECIFIED


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate text to maximum length with ellipsis.

    Examples:
        truncate_text("Long text here", 10) -> "Long te..."
        truncate_text("Short", 10) -> "Short"
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


class TableFormatter:
    """Formats rows as aligned tabular output."""

    def __init__(self, columns: List[str]):
        self.columns = columns
        self.column_widths = [len(col) for col in columns]
        self.rows: List[List[str]] = []

    def add_row(self, values: List[Any]) -> None:
        """Add a row to the table.

        Raises:
            ValueError: If value count doesn't match column count
        """
        if len(values) != len(self.columns):
            raise ValueError(f"Expected {len(self.columns)} values, got {len(values)}")

        str_values = []
        for i, val in enumerate(values):
            str_val = str(val) if val is not None else "-"
            str_values.append(str_val)
            self.column_widths[i] = max(self.column_widths[i], len(str_val))
        self.rows.append(str_values)

    def _format_row(self, values: List[str], is_header: bool = False) -> str:
        cells = []
        for i, val in enumerate(values):
            width = self.column_widths[i]
            # Numbers right-aligned, text and headers left-aligned
            if not is_header and val.replace(",", "").isdigit():
                cells.append(val.rjust(width))
            else:
                cells.append(val.ljust(width))
        return "  ".join(cells).rstrip()

    def to_string(self, show_header: bool = True) -> str:
        lines = []
        if show_header:
            lines.append(self._format_row(self.columns, is_header=True))
            lines.append("  ".join("-" * w for w in self.column_widths))
        for row in self.rows:
            lines.append(self._format_row(row))
        return "\n".join(lines)
