"""Command argument parsing and the per-user rate limiter."""

from decimal import Decimal

import pytest

from handlers.common import money, parse_fields, to_int, to_number
from security import rate_limiter


def test_parse_fields_splits_positional_and_fields():
    positional, fields = parse_fields(["12.50", "cat:3", "acc:1", "desc:Lunch", "with", "the", "team"])

    assert positional == ["12.50"]
    assert fields == {"cat": "3", "acc": "1", "desc": "Lunch with the team"}


def test_parse_fields_lowercases_keys():
    assert parse_fields(["Amount:75"]) == ([], {"amount": "75"})


def test_parse_fields_empty():
    assert parse_fields(None) == ([], {})


@pytest.mark.parametrize("raw, expected", [("12", 12), ("#7", 7), ("abc", None), (None, None)])
def test_to_int(raw, expected):
    assert to_int(raw) == expected


def test_to_number_accepts_decimal_comma():
    assert to_number(" 12,50 ") == "12.50"


def test_money():
    assert money(Decimal("1234.5"), "EUR") == "1,234.50 EUR"


def test_rate_limiter_window(monkeypatch):
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_MESSAGES", 2)
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_WINDOW_SECONDS", 60)
    monkeypatch.setattr(rate_limiter, "_user_timestamps", rate_limiter.defaultdict(list))

    assert rate_limiter.allow(7, now=1000.0) is True
    assert rate_limiter.allow(7, now=1001.0) is True
    assert rate_limiter.allow(7, now=1002.0) is False
    assert rate_limiter.allow(7, now=1061.0) is True
