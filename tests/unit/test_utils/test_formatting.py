"""Tests for display formatting helpers."""

import pytest
from landmarket.utils.formatting import NO_PRICE_LABEL, format_inr, group_indian_digits


@pytest.mark.unit
@pytest.mark.parametrize("digits,expected", [
    ("5", "5"),
    ("999", "999"),
    ("1000", "1,000"),
    ("123456", "1,23,456"),
    ("1234567", "12,34,567"),
    ("123456789", "12,34,56,789"),
])
def test_group_indian_digits(digits, expected):
    assert group_indian_digits(digits) == expected


@pytest.mark.unit
@pytest.mark.parametrize("value,expected", [
    (2500000, "₹25,00,000"),
    ("750000.00", "₹7,50,000"),
    (999.6, "₹1,000"),
    (0, "₹0"),
])
def test_format_inr(value, expected):
    assert format_inr(value) == expected


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, "", "call us", float("nan"), True])
def test_format_inr_without_price(value):
    assert format_inr(value) == NO_PRICE_LABEL
