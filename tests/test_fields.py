from datetime import date

import pytest

from domain.models import CatalogFormat
from fields.catalog_format import detect_catalog_format
from fields.price import parse_price
from fields.text import cell_to_text, is_blank, sanitize_input
from conftest import catalog_entry


@pytest.mark.parametrize(
    "value,expected",
    [
        (45, 45.0),
        (45.5, 45.5),
        ("45.50", 45.5),
        ("€ 1,299.00", 1299.0),
        ("12.5 £", 12.5),
        ("1.234.56", 1234.56),
        ("12abc", 12.0),
        ("9999.99", 9999.99),
        (0, 0.0),
    ],
)
def test_parse_price_accepts(value, expected):
    assert parse_price(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", [None, "", "abc", "-5", -1, 10000, "10 000", True, float("nan"), date(2025, 1, 1)])
def test_parse_price_rejects(value):
    assert parse_price(value) is None


def test_cell_to_text_renders_integral_floats_without_decimals():
    assert cell_to_text(3605168507131.0) == "3605168507131"
    assert cell_to_text(12.5) == "12.5"
    assert cell_to_text(None) == ""
    assert cell_to_text(float("nan")) == ""
    assert cell_to_text(date(2025, 3, 1)) == "2025-03-01"


def test_sanitize_input_strips_markup_and_control_characters():
    assert sanitize_input(' <b>"Navy" & co</b>\x07 ') == "bNavy  co/b"
    assert sanitize_input("") == ""
    assert is_blank("   ")
    assert not is_blank(0)


def test_catalog_format_requires_color_size_and_dual_currency():
    rich = [
        catalog_entry("3605168507131", color="NAVY"),
        catalog_entry("3605168507148", size="M", price_euro=45.0, price_pound=39.0),
    ]
    assert detect_catalog_format(rich) is CatalogFormat.RICH

    no_pound = [catalog_entry("3605168507131", color="NAVY", size="M", price_euro=45.0)]
    assert detect_catalog_format(no_pound) is CatalogFormat.LEGACY
    assert detect_catalog_format([]) is CatalogFormat.LEGACY
