"""
services/account_store.py
--------------------------
The only writer of account balances after creation.

Ledger and transfer services call `adjust` and `move` as explicit steps
after persisting their own rows; the currency flow calls `convert_all`.
Each primitive is atomic in the database, so concurrent callers never
lose an increment.
"""

from decimal import Decimal

from repositories.account_repo import (
    MOVE_INSUFFICIENT,
    MOVE_MISSING,
    AccountRepository,
)
from services.errors import InsufficientFunds, NotFound
from utils.logger import get_logger

logger = get_logger(__name__)


class AccountStore:
    """Balance-adjustment primitives over the accounts table."""

    def __init__(self, repo: AccountRepository | None = None):
        self.repo = repo or AccountRepository()

    def adjust(self, account_id: int, delta: Decimal) -> Decimal:
        """
        Apply `amount += delta` to one account.

        Returns:
            The new balance.

        Raises:
            NotFound: If the account does not exist.
        """
        balance = self.repo.adjust(account_id, delta)
        if balance is None:
            raise NotFound(f"Account #{account_id} not found")
        return balance

    def move(self, from_id: int, to_id: int, amount: Decimal, require_funds: bool = True) -> None:
        """
        Decrement `from_id` and increment `to_id` by `amount` as one unit.

        Raises:
            NotFound: If either account does not exist.
            InsufficientFunds: If `require_funds` and the source balance,
                read under lock, is below `amount`.
        """
        outcome = self.repo.move(from_id, to_id, amount, require_funds)
        if outcome == MOVE_MISSING:
            raise NotFound("Source or destination account not found")
        if outcome == MOVE_INSUFFICIENT:
            raise InsufficientFunds(f"Insufficient funds in account #{from_id}")

    def convert_all(self, user_id: int, from_currency: str, to_currency: str, rate: Decimal) -> int:
        """
        Re-denominate every account of a user at `rate`, all or nothing.

        Returns:
            Number of accounts converted.
        """
        converted = self.repo.convert_all(user_id, to_currency, rate)
        logger.info(f"User {user_id}: {from_currency} -> {to_currency}, {converted} accounts")
        return converted
