"""Currency change, display conversion and the exchange-rate client."""

from decimal import Decimal

import httpx
import pytest

from clients import exchange_rates
from services.account_service import AccountService
from services.currency_service import CurrencyService
from services.errors import RateUnavailable


def fixed_rate(rate):
    def lookup(base, quote):
        return Decimal(rate)
    return lookup


def no_rate(base, quote):
    raise RateUnavailable("Exchange rate service is unreachable")


class TestChangeCurrency:
    def test_converts_every_account(self, users, accounts, store, owner, make_account):
        a = make_account("100")
        b = make_account("-20", name="Card")
        service = CurrencyService(user_repo=users, store=store, rate_lookup=fixed_rate("1.1"))

        result = service.change_currency(owner, "usd")

        assert result["success"] is True
        assert result["data"]["accounts_converted"] == 2
        assert result["message"] == "Currency updated to USD, and all account amounts converted."
        assert accounts.balance(a.id) == Decimal("110.00")
        assert accounts.balance(b.id) == Decimal("-22.00")
        assert users.get_by_telegram_id(owner.user_id)["currency"] == "USD"

    def test_rate_failure_writes_nothing(self, users, accounts, store, owner, make_account):
        a = make_account("100")
        service = CurrencyService(user_repo=users, store=store, rate_lookup=no_rate)

        result = service.change_currency(owner, "USD")

        assert result["error"] == "RateUnavailable"
        assert result["status"] == 502
        assert accounts.balance(a.id) == Decimal("100")
        assert users.get_by_telegram_id(owner.user_id)["currency"] == "EUR"

    def test_same_currency(self, users, store, owner):
        service = CurrencyService(user_repo=users, store=store, rate_lookup=fixed_rate("1"))

        assert service.change_currency(owner, "EUR")["error"] == "ValidationFailed"

    def test_bad_code(self, users, store, owner):
        service = CurrencyService(user_repo=users, store=store, rate_lookup=fixed_rate("1"))

        assert service.change_currency(owner, "dollars")["error"] == "ValidationFailed"

    def test_unknown_user(self, users, store, stranger):
        service = CurrencyService(user_repo=users, store=store, rate_lookup=fixed_rate("1"))

        assert service.change_currency(stranger, "USD")["error"] == "NotFound"


class TestDisplayConversion:
    def test_foreign_account_gets_converted_amount(self, accounts, owner, make_account):
        make_account("100", currency="USD")
        make_account("50", name="Cash")
        service = AccountService(accounts, rate_lookup=fixed_rate("0.9"))

        usd, eur = service.list_accounts(owner)["data"]

        assert usd["converted_amount"] == Decimal("90.00")
        assert usd["display_currency"] == "EUR"
        assert "converted_amount" not in eur

    def test_rate_failure_leaves_account_unconverted(self, accounts, owner, make_account):
        make_account("100", currency="USD")
        service = AccountService(accounts, rate_lookup=no_rate)

        result = service.list_accounts(owner)

        assert result["success"] is True
        assert "converted_amount" not in result["data"][0]


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class TestExchangeRateClient:
    def test_pair_rate(self, monkeypatch):
        calls = []

        def fake_get(url, timeout):
            calls.append(url)
            return FakeResponse({"result": "success", "conversion_rate": 1.0842})

        monkeypatch.setattr(exchange_rates.httpx, "get", fake_get)

        assert exchange_rates.get_rate("eur", "usd") == Decimal("1.0842")
        assert calls[0].endswith("/pair/EUR/USD")

    def test_same_currency_needs_no_request(self, monkeypatch):
        monkeypatch.setattr(exchange_rates.httpx, "get", pytest.fail)

        assert exchange_rates.get_rate("EUR", "EUR") == Decimal("1")

    @pytest.mark.parametrize("response", [
        FakeResponse({}, status_code=500),
        FakeResponse(ValueError("not json")),
        FakeResponse({"result": "error", "error-type": "invalid-key"}),
        FakeResponse({"result": "success", "conversion_rate": 0}),
        FakeResponse({"result": "success"}),
    ])
    def test_unusable_responses(self, monkeypatch, response):
        monkeypatch.setattr(exchange_rates.httpx, "get", lambda url, timeout: response)

        with pytest.raises(RateUnavailable):
            exchange_rates.get_rate("EUR", "USD")

    def test_transport_error(self, monkeypatch):
        def fake_get(url, timeout):
            raise httpx.ConnectTimeout("timed out")

        monkeypatch.setattr(exchange_rates.httpx, "get", fake_get)

        with pytest.raises(RateUnavailable):
            exchange_rates.get_rate("EUR", "USD")

    def test_latest(self, monkeypatch):
        monkeypatch.setattr(
            exchange_rates.httpx, "get",
            lambda url, timeout: FakeResponse({"result": "success", "conversion_rates": {"USD": 1.08}}),
        )

        assert exchange_rates.get_latest("eur") == {"USD": 1.08}
