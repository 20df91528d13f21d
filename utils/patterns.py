"""Pre-compiled regex patterns for the project dashboard tools.

All patterns are compiled once at module import.

Usage:
    from utils.patterns import PROJECT_NO, YEAR_TOKEN

    if YEAR_TOKEN.match(text):
        ...
"""

import re

# Project numbers as issued by the regional office, e.g. "PJ001", "2023-ILN-014"
PROJECT_NO = re.compile(r'^[A-Z0-9][A-Z0-9\-]*$', re.IGNORECASE)

# A four-digit year at the start of a value: "2022", "2022-2023"
YEAR_TOKEN = re.compile(r'^\s*(\d{4})')

# Whitespace normalization: multiple spaces/tabs/newlines
WHITESPACE = re.compile(r'\s+')

# Currency symbols and codes stripped during numeric conversion
CURRENCY_SYMBOLS = re.compile(r'(?:[\$€£¥₱]|\bPHP\b|\bPhp\b)')

# Characters with special meaning inside a SQL LIKE pattern
LIKE_SPECIAL_CHARS = re.compile(r'([%_\\])')
