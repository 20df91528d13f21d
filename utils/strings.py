"""String processing utilities for the project dashboard tools.

safe_float() is used for amounts that feed display and aggregation where a
zero default is acceptable. coerce_coordinate() is used wherever a missing
value must stay missing (latitude/longitude), so a bad value never becomes a
plausible-looking 0.0 position.
"""

import math
from typing import Optional

from utils.patterns import WHITESPACE, CURRENCY_SYMBOLS, LIKE_SPECIAL_CHARS


def safe_float(val, default: float = 0.0) -> float:
    """Safely convert value to float with fallback default.

    Handles:
    - None, empty strings -> default
    - Numeric types -> float
    - Strings with currency symbols, whitespace, commas
    - Invalid input -> default

    Args:
        val: Value to convert (any type)
        default: Value to return on failure (default: 0.0)

    Returns:
        float: Parsed value or default
    """
    if val is None or val == '':
        return default
    if isinstance(val, bool):
        return default
    if isinstance(val, (int, float)):
        return float(val)

    try:
        s = str(val).strip()
        s = CURRENCY_SYMBOLS.sub('', s)
        s = s.replace(',', '').strip()
        return float(s) if s else default
    except (ValueError, TypeError):
        return default


def coerce_coordinate(val) -> Optional[float]:
    """Convert a latitude/longitude value to float, or None if unusable.

    The data service sends coordinates as strings ("18.1") or numbers, and
    a firm without a geocode has NULL. NaN and infinities count as missing.
    """
    if val is None or isinstance(val, bool):
        return None
    try:
        result = float(str(val).strip()) if isinstance(val, str) else float(val)
    except (ValueError, TypeError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def normalize_whitespace(s: str) -> str:
    """Normalize multiple whitespace characters to single spaces.

    Example:
        "Food   Processing\\n Region 1" -> "Food Processing Region 1"
    """
    return WHITESPACE.sub(' ', s).strip()


def escape_like(term: str) -> str:
    """Escape %, _ and backslash so *term* matches literally in a LIKE.

    Use together with ``ESCAPE '\\'`` in the SQL.

    Example:
        '50%_off' -> '50\\%\\_off'
    """
    return LIKE_SPECIAL_CHARS.sub(r'\\\1', term)


def clean_text(val) -> str:
    """Return *val* as a stripped string; None becomes ''."""
    if val is None:
        return ''
    return normalize_whitespace(str(val))

