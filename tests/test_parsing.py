"""
Tests for form input coercion helpers.
"""

import pytest

from washregistry.domain.parsing import (
    format_hour,
    is_valid_time,
    parse_capacity,
    parse_price,
    sanitize_phone_number,
)


@pytest.mark.parametrize(
    "value, expected",
    [("4", 4), (" 12 ", 12), ("2.9", 2), ("+3", 3), ("-1", 0), ("x1", 0), (True, 0), (3.7, 3), (float("inf"), 0), (float("-inf"), 0), (float("nan"), 0)],
)
def test_parse_capacity(value, expected):
    assert parse_capacity(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [("20", 20.0), ("19.5 EGP", 19.5), (".5", 0.5), (40, 40.0), ("", None), ("free", None), ("-5", None), (None, None), ("1e999", None), (float("inf"), None), (float("nan"), None)],
)
def test_parse_price(value, expected):
    assert parse_price(value) == expected


class TestPhoneNumber:
    def test_strips_non_digits(self):
        assert sanitize_phone_number("10-1234-5678") == "1012345678"
        assert sanitize_phone_number("(010) 123 4567") == "0101234567"

    def test_too_many_digits(self):
        assert sanitize_phone_number("12345678901") is None

    def test_empty(self):
        assert sanitize_phone_number("") == ""


@pytest.mark.parametrize(
    "value, expected",
    [("09:00", True), ("23:59", True), ("24:00", False), ("9:00", False), ("12:60", False), ("noon", False), (None, False), ("09:00\n", False)],
)
def test_is_valid_time(value, expected):
    assert is_valid_time(value) is expected


def test_format_hour_wraps():
    assert format_hour(12) == "12:00"
    assert format_hour(24) == "00:00"
    assert format_hour(35) == "11:00"
