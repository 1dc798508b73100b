"""
services/account_service.py
----------------------------
Account management. Balances are set once at creation; afterwards only
the AccountStore changes them.
"""

from decimal import Decimal, InvalidOperation
from typing import Callable

from clients.exchange_rates import get_rate
from models.account import ACCOUNT_GROUPS, Account
from models.user import Identity
from repositories.account_repo import AccountRepository
from services.errors import Forbidden, NotFound, RateUnavailable, ValidationFailed, ok, operation
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_NAME_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 500


def _validate_details(group: str, name: str, description: str | None) -> str:
    if group not in ACCOUNT_GROUPS:
        raise ValidationFailed(f"Account group must be one of: {', '.join(ACCOUNT_GROUPS)}")
    name = (name or "").strip()
    if not name:
        raise ValidationFailed("Account name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationFailed(f"Account name cannot exceed {MAX_NAME_LENGTH} characters")
    if description and len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationFailed(f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")
    return name


class AccountService:
    """CRUD over accounts plus best-effort display conversion."""

    def __init__(self, repo: AccountRepository | None = None,
                 rate_lookup: Callable[[str, str], Decimal] = get_rate):
        self.repo = repo or AccountRepository()
        self.rate_lookup = rate_lookup

    def load(self, identity: Identity, account_id: int) -> Account:
        """Fetch an account the caller may access, or raise."""
        account = self.repo.get_by_id(account_id)
        if account is None:
            raise NotFound(f"Account #{account_id} not found")
        if not identity.can_access(account.user_id):
            raise Forbidden("Not authorized to access this account")
        return account

    @operation
    def create(self, identity: Identity, group: str, name: str,
               amount: Decimal | str = Decimal("0"), description: str | None = None) -> dict:
        name = _validate_details(group, name, description)
        try:
            opening = Decimal(str(amount)).quantize(Decimal("0.01"))
        except InvalidOperation:
            raise ValidationFailed("Opening balance must be a number")

        account = self.repo.add(Account(
            user_id=identity.user_id,
            group=group,
            name=name,
            amount=opening,
            base_currency=identity.currency,
            description=description,
        ))
        return ok(account)

    @operation
    def list_accounts(self, identity: Identity) -> dict:
        """
        List the caller's accounts.

        Accounts held in a currency other than the caller's get
        `converted_amount` and `display_currency`. A failed rate lookup
        leaves that account unconverted instead of failing the listing.
        """
        rates: dict[str, Decimal | None] = {}
        data = []
        for account in self.repo.get_all(identity.user_id):
            item = account.to_dict()
            base = account.base_currency
            if base != identity.currency:
                if base not in rates:
                    try:
                        rates[base] = self.rate_lookup(base, identity.currency)
                    except RateUnavailable as e:
                        logger.warning(f"Display conversion {base}->{identity.currency} skipped: {e.message}")
                        rates[base] = None
                if rates[base] is not None:
                    item["converted_amount"] = (account.amount * rates[base]).quantize(Decimal("0.01"))
                    item["display_currency"] = identity.currency
            data.append(item)
        return ok(data)

    @operation
    def get(self, identity: Identity, account_id: int) -> dict:
        return ok(self.load(identity, account_id))

    @operation
    def update(self, identity: Identity, account_id: int, group: str | None = None,
               name: str | None = None, description: str | None = None) -> dict:
        """Change name, group or description. The balance cannot be edited."""
        account = self.load(identity, account_id)
        account.group = group or account.group
        account.name = name if name is not None else account.name
        account.description = description if description is not None else account.description
        account.name = _validate_details(account.group, account.name, account.description)

        if not self.repo.update_details(account):
            raise NotFound(f"Account #{account_id} not found")
        return ok(account)

    @operation
    def delete(self, identity: Identity, account_id: int) -> dict:
        """
        Delete an account together with its entries. Refused while any
        transfer uses it, since the other leg's balance depends on it.
        """
        account = self.load(identity, account_id)
        if self.repo.has_transfers(account.id):
            raise ValidationFailed(
                f"Account '{account.name}' still has transfers, delete them first"
            )
        deleted = self.repo.delete(account.id)
        if deleted is None:
            raise ValidationFailed(
                f"Account '{account.name}' still has transfers, delete them first"
            )
        if not deleted:
            raise NotFound(f"Account #{account_id} not found")
        return ok(message=f"Account '{account.name}' deleted")
