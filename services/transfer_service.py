"""
services/transfer_service.py
-----------------------------
Transfer engine: moves money between two accounts of the same user.

A transfer row is persisted first, then both legs are applied through
AccountStore.move(), which commits them together or not at all. If the
move fails, the row is removed again. Transfers cannot be edited.
"""

from datetime import date

from models.transfer import Transfer
from models.user import Identity
from repositories.account_repo import AccountRepository
from repositories.transfer_repo import TransferRepository
from services.account_store import AccountStore
from services.errors import (
    Forbidden,
    InsufficientFunds,
    InvalidTransfer,
    NotFound,
    ok,
    operation,
)
from services.validation import check_description, parse_amount, parse_day, require_id
from utils.logger import get_logger

logger = get_logger(__name__)


class TransferService:
    """Creates, lists and reverses transfers."""

    def __init__(
        self,
        repo: TransferRepository | None = None,
        account_repo: AccountRepository | None = None,
        store: AccountStore | None = None,
    ):
        self.repo = repo or TransferRepository()
        self.account_repo = account_repo or AccountRepository()
        self.store = store or AccountStore(self.account_repo)

    def _load(self, identity: Identity, transfer_id: int) -> Transfer:
        transfer = self.repo.get_by_id(transfer_id)
        if transfer is None:
            raise NotFound(f"Transfer #{transfer_id} not found")
        if not identity.can_access(transfer.user_id):
            raise Forbidden("Not authorized to access this transfer")
        return transfer

    @operation
    def create(self, identity: Identity, from_account_id, to_account_id, amount,
               transfer_date=None, description: str | None = None) -> dict:
        """
        Move `amount` from one of the caller's accounts to another.

        Checks, in order: both accounts exist, both belong to the caller,
        the source holds enough, the accounts differ.
        """
        amount = parse_amount(amount)
        from_id = require_id(from_account_id, "Source account")
        to_id = require_id(to_account_id, "Destination account")
        transfer_date = parse_day(transfer_date) or date.today()
        description = check_description(description)

        source = self.account_repo.get_by_id(from_id)
        target = self.account_repo.get_by_id(to_id)
        if source is None or target is None:
            raise NotFound("Source or destination account not found")
        if source.user_id != identity.user_id or target.user_id != identity.user_id:
            raise Forbidden("Not authorized to use these accounts")
        if source.amount < amount:
            raise InsufficientFunds(
                f"Insufficient funds: '{source.name}' holds {source.amount:.2f}"
            )
        if source.id == target.id:
            raise InvalidTransfer("Cannot transfer to the same account")

        transfer = self.repo.add(Transfer(
            user_id=identity.user_id,
            amount=amount,
            from_account_id=source.id,
            to_account_id=target.id,
            date=transfer_date,
            description=description,
        ))
        try:
            self.store.move(source.id, target.id, amount, require_funds=True)
        except Exception:
            logger.error(f"Moving funds for transfer #{transfer.id} failed, removing the transfer")
            self.repo.delete(transfer.id)
            raise
        return ok(transfer)

    @operation
    def get(self, identity: Identity, transfer_id: int) -> dict:
        return ok(self._load(identity, transfer_id))

    @operation
    def list_transfers(self, identity: Identity, start=None, end=None,
                       account_id: int | None = None) -> dict:
        return ok(self.repo.find(
            identity.user_id,
            start=parse_day(start, "Start date"),
            end=parse_day(end, "End date"),
            account_id=account_id,
        ))

    @operation
    def delete(self, identity: Identity, transfer_id: int) -> dict:
        """Reverse both legs as one unit, then remove the transfer."""
        transfer = self._load(identity, transfer_id)
        self.store.move(
            transfer.to_account_id, transfer.from_account_id, transfer.amount, require_funds=False
        )
        try:
            deleted = self.repo.delete(transfer.id)
        except Exception:
            self.store.move(
                transfer.from_account_id, transfer.to_account_id, transfer.amount, require_funds=False
            )
            raise
        if not deleted:
            self.store.move(
                transfer.from_account_id, transfer.to_account_id, transfer.amount, require_funds=False
            )
            raise NotFound(f"Transfer #{transfer_id} not found")
        return ok(message=f"Transfer #{transfer_id} reversed and deleted")
