"""Shared utilities for the Region 1 project dashboard tools."""

# Pattern definitions
from utils.patterns import PROJECT_NO, YEAR_TOKEN, WHITESPACE, CURRENCY_SYMBOLS

# String utilities
from utils.strings import (
    safe_float,
    coerce_coordinate,
    normalize_whitespace,
    escape_like,
    clean_text,
)

# Database utilities
from utils.database import (
    SCHEMA,
    init_pragmas,
    init_schema,
    batch_insert,
    get_table_count,
    table_exists,
    query_to_dicts,
)

# Formatting utilities
from utils.formatting import (
    format_currency,
    format_date,
    format_coordinates,
    format_count,
    truncate_text,
    TableFormatter,
)

# Configuration
from utils.config import AppConfig, Config, KnownValues, MapSettings

# HTTP
from utils.http import RetryStrategy, SessionManager, fetch_json

# Cache
from utils.cache import TTLCache

__all__ = [
    # Patterns
    "PROJECT_NO",
    "YEAR_TOKEN",
    "WHITESPACE",
    "CURRENCY_SYMBOLS",
    # Strings
    "safe_float",
    "coerce_coordinate",
    "normalize_whitespace",
    "escape_like",
    "clean_text",
    # Database
    "SCHEMA",
    "init_pragmas",
    "init_schema",
    "batch_insert",
    "get_table_count",
    "table_exists",
    "query_to_dicts",
    # Formatting
    "format_currency",
    "format_date",
    "format_coordinates",
    "format_count",
    "truncate_text",
    "TableFormatter",
    # Config
    "AppConfig",
    "Config",
    "KnownValues",
    "MapSettings",
    # HTTP
    "RetryStrategy",
    "SessionManager",
    "fetch_json",
    # Cache
    "TTLCache",
]
