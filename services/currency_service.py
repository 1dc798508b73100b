"""
services/currency_service.py
-----------------------------
Changing a user's currency re-denominates every account they own.
"""

import re
from decimal import Decimal
from typing import Callable

from clients.exchange_rates import get_latest, get_rate
from models.user import Identity
from repositories.user_repo import UserRepository
from services.account_store import AccountStore
from services.errors import NotFound, ValidationFailed, ok, operation
from utils.logger import get_logger

logger = get_logger(__name__)

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


def normalize_currency(code: str | None) -> str:
    code = (code or "").strip().upper()
    if not _CURRENCY_CODE.match(code):
        raise ValidationFailed("Currency must be a 3-letter ISO code, e.g. USD")
    return code


class CurrencyService:
    """Currency preference changes and rate lookups."""

    def __init__(
        self,
        user_repo: UserRepository | None = None,
        store: AccountStore | None = None,
        rate_lookup: Callable[[str, str], Decimal] = get_rate,
        latest_lookup: Callable[[str], dict] = get_latest,
    ):
        self.user_repo = user_repo or UserRepository()
        self.store = store or AccountStore()
        self.rate_lookup = rate_lookup
        self.latest_lookup = latest_lookup

    @operation
    def change_currency(self, identity: Identity, currency: str) -> dict:
        """
        Switch the caller to `currency` and convert all their balances.

        The rate is fetched first; without it nothing is written. The
        conversion of all accounts and the user's currency change commit
        together.
        """
        user = self.user_repo.get_by_telegram_id(identity.user_id)
        if user is None:
            raise NotFound("User not found")

        new_currency = normalize_currency(currency)
        if user["currency"] == new_currency:
            raise ValidationFailed(f"Currency is already set to {new_currency}")

        rate = self.rate_lookup(user["currency"], new_currency)
        converted = self.store.convert_all(identity.user_id, user["currency"], new_currency, rate)
        return ok(
            {"currency": new_currency, "exchange_rate": rate, "accounts_converted": converted},
            message=f"Currency updated to {new_currency}, and all account amounts converted.",
        )

    @operation
    def rates(self, base: str) -> dict:
        """All published rates for `base`."""
        code = normalize_currency(base)
        return ok({"base": code, "rates": self.latest_lookup(code)})
