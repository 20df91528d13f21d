"""
Tests for utils/formatting.py: popup field formatters and TableFormatter
"""
import datetime
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.formatting import (  # noqa: E402
    INVALID_AMOUNT,
    INVALID_DATE,
    NOT_SPECIFIED,
    TableFormatter,
    format_coordinates,
    format_count,
    format_currency,
    format_date,
    text_or_placeholder,
    truncate_text,
)


@pytest.mark.parametrize("value, expected", [
    (1234.5, "₱1,234.50"),
    (250000, "₱250,000.00"),
    ("180,500.75", "₱180,500.75"),
    ("₱1,000", "₱1,000.00"),
    (0, "₱0.00"),
    (-50, "-₱50.00"),
    (None, NOT_SPECIFIED),
    ("", NOT_SPECIFIED),
    ("n/a", INVALID_AMOUNT),
    (float("nan"), INVALID_AMOUNT),
    (True, INVALID_AMOUNT),
])
def test_format_currency(value, expected):
    assert format_currency(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("2023-03-05", "March 5, 2023"),
    ("2023-03-05T10:00:00Z", "March 5, 2023"),
    (datetime.date(2021, 12, 1), "December 1, 2021"),
    (datetime.datetime(2020, 1, 2, 8, 30), "January 2, 2020"),
    ("2022", "2022"),
    ("2022-2023", "2022-2023"),
    ("2022 - 2023", "2022-2023"),
    ("", NOT_SPECIFIED),
    (None, NOT_SPECIFIED),
    ("soon", INVALID_DATE),
])
def test_format_date(value, expected):
    assert format_date(value) == expected


class TestFormatCoordinates:
    def test_numbers(self):
        assert format_coordinates(18.1, 120.7) == "18.1000, 120.7000"

    def test_strings(self):
        assert format_coordinates("16.5308", "120.3317") == "16.5308, 120.3317"

    def test_precision(self):
        assert format_coordinates(18.12345, 120.5, precision=2) == "18.12, 120.50"

    @pytest.mark.parametrize("lat, lng", [(None, 120.0), (18.0, None), ("x", 1), (float("inf"), 1)])
    def test_unusable(self, lat, lng):
        assert format_coordinates(lat, lng) == NOT_SPECIFIED


class TestSmallFormatters:
    def test_format_count(self):
        assert format_count(1234567) == "1,234,567"
        assert format_count(None) == "-"

    def test_text_or_placeholder(self):
        assert text_or_placeholder("  ") == NOT_SPECIFIED
        assert text_or_placeholder(None) == NOT_SPECIFIED
        assert text_or_placeholder("SETUP") == "SETUP"

    def test_truncate(self):
        assert truncate_text("Long text here", 10) == "Long te..."
        assert truncate_text("Short", 10) == "Short"


class TestTableFormatter:
    def test_alignment(self):
        table = TableFormatter(["No.", "Projects"])
        table.add_row(["PJ001", "1,200"])
        table.add_row(["PJ0002", None])
        lines = table.to_string().splitlines()
        assert lines[0].startswith("No.")
        assert set(lines[1].replace(" ", "")) == {"-"}
        assert lines[2] == "PJ001      1,200"
        assert lines[3] == "PJ0002  -"

    def test_no_header(self):
        table = TableFormatter(["A"])
        table.add_row(["x"])
        assert table.to_string(show_header=False) == "x"

    def test_wrong_width(self):
        with pytest.raises(ValueError):
            TableFormatter(["A", "B"]).add_row(["only one"])
