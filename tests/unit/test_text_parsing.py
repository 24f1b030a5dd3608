from datetime import date

import pytest

from lifepa.documents.text_parsing import (
    detect_category,
    extract_currency,
    extract_date,
    extract_items,
    extract_merchant_name,
    extract_total_amount,
    parse_amount,
    parse_date_string,
)
from lifepa.documents.types import LineItem

RECEIPT = """Joe's Coffee House
12 High Street
01/02/2025
Latte 3.50
Muffin x2 5.00
Total $8.50"""


@pytest.mark.parametrize(
    ("value", "expected"),
    [("£1,234.56", 1234.56), ("12,50", 12.5), (7, 7.0), ("abc", None), (True, None)],
)
def test_parse_amount(value: object, expected: float | None) -> None:
    assert parse_amount(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2025-01-02", date(2025, 1, 2)),
        ("05/03/2025", date(2025, 3, 5)),
        ("03/25/2025", date(2025, 3, 25)),
        ("3rd March 2025", date(2025, 3, 3)),
        ("Mar 4, 2025", date(2025, 3, 4)),
        ("not a date", None),
        ("", None),
    ],
)
def test_parse_date_string(value: str, expected: date | None) -> None:
    assert parse_date_string(value) == expected


def test_total_picks_highest_amount() -> None:
    assert extract_total_amount("Subtotal 10.00\nVAT 2.00\nTotal: £12.00") == 12.0
    assert extract_total_amount("nothing to pay") is None


def test_missing_date_is_none_not_today() -> None:
    assert extract_date("Receipt\nthanks for shopping") is None
    assert extract_date(RECEIPT) == date(2025, 2, 1)


def test_merchant_and_items() -> None:
    assert extract_merchant_name(RECEIPT) == "Joe's Coffee House"
    assert extract_merchant_name("") == "Unknown Merchant"
    assert extract_items(RECEIPT) == [
        LineItem(name="Latte", quantity=1, price=3.5),
        LineItem(name="Muffin", quantity=2, price=5.0),
    ]


def test_category_and_currency() -> None:
    assert detect_category("Joe's Coffee House") == "Dining"
    assert detect_category("Acme", [LineItem(name="Petrol unleaded")]) == "Transport"
    assert detect_category("Acme") == "Other"
    assert extract_currency("Total 5.00 EUR") == "EUR"
    assert extract_currency("Total 5.00", default="GBP") == "GBP"
