"""
services/ledger_service.py
---------------------------
Transaction ledger: income and expense entries and the balance adjustment
each one carries.

Every write follows the same two steps, in this order:
    1. persist (or remove) the entry row
    2. apply the matching adjustment through the AccountStore
If step 2 fails, step 1 is undone and the original error is re-raised,
so an entry row and its balance effect always exist together.
"""

from dataclasses import replace
from datetime import date

from models.account import Account
from models.category import Category
from models.entry import ENTRY_TYPES, RECURRING_PATTERNS, LedgerEntry
from models.notification import Notification
from models.user import Identity
from repositories.account_repo import AccountRepository
from repositories.category_repo import CategoryRepository
from repositories.entry_repo import EntryRepository
from services.account_store import AccountStore
from services.budget_service import BudgetService
from services.errors import (
    CategoryMismatch,
    Forbidden,
    NotFound,
    ValidationFailed,
    ok,
    operation,
)
from services.validation import check_description, parse_amount, parse_day, require_id
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_LABEL_LENGTH = 100


class LedgerService:
    """Creates, edits and removes ledger entries while keeping balances in step."""

    def __init__(
        self,
        entry_repo: EntryRepository | None = None,
        category_repo: CategoryRepository | None = None,
        account_repo: AccountRepository | None = None,
        store: AccountStore | None = None,
        budgets: BudgetService | None = None,
    ):
        self.entry_repo = entry_repo or EntryRepository()
        self.category_repo = category_repo or CategoryRepository()
        self.account_repo = account_repo or AccountRepository()
        self.store = store or AccountStore(self.account_repo)
        self.budgets = budgets or BudgetService(
            category_repo=self.category_repo, entry_repo=self.entry_repo
        )

    # ── Validation ────────────────────────────────────────

    def _category(self, owner_id: int, category_id: int, entry_type: str) -> Category:
        category = self.category_repo.get_by_id(category_id)
        if category is None:
            raise NotFound(f"Category #{category_id} not found")
        if category.type != entry_type:
            raise CategoryMismatch(
                f"Category '{category.name}' is an {category.type} category, not {entry_type}"
            )
        if category.user_id != owner_id:
            raise Forbidden("Not authorized to use this category")
        return category

    def _account(self, owner_id: int, account_id: int) -> Account:
        account = self.account_repo.get_by_id(account_id)
        if account is None:
            raise NotFound(f"Account #{account_id} not found")
        if account.user_id != owner_id:
            raise Forbidden("Not authorized to use this account")
        return account

    def _load(self, identity: Identity, entry_id: int) -> LedgerEntry:
        entry = self.entry_repo.get_by_id(entry_id)
        if entry is None:
            raise NotFound(f"Entry #{entry_id} not found")
        if not identity.can_access(entry.user_id):
            raise Forbidden("Not authorized to access this entry")
        return entry

    @staticmethod
    def _check_recurrence(entry: LedgerEntry) -> None:
        if not entry.is_recurring:
            entry.recurring_pattern = None
            entry.end_date = None
            return
        if entry.recurring_pattern not in RECURRING_PATTERNS:
            raise ValidationFailed(
                f"Recurring pattern must be one of: {', '.join(RECURRING_PATTERNS)}"
            )
        if entry.end_date and entry.end_date < entry.date:
            raise ValidationFailed("End date cannot be before the entry date")

    @staticmethod
    def _check_label(label: str | None) -> str | None:
        if label and len(label) > MAX_LABEL_LENGTH:
            raise ValidationFailed(f"Label cannot exceed {MAX_LABEL_LENGTH} characters")
        return label

    # ── Balance steps ─────────────────────────────────────

    def _record(self, entry: LedgerEntry, category: Category,
                source: LedgerEntry | None = None) -> list[Notification]:
        """
        Persist a new entry, apply its adjustment, then run the budget check.

        With `source`, the entry is that recurring source's copy: it is
        inserted together with the source's stamp, and undoing it puts the
        previous stamp back so the next tick retries.
        """
        if source is None:
            entry = self.entry_repo.add(entry)
        else:
            entry = self.entry_repo.add_generated(entry)
        try:
            self.store.adjust(entry.account_id, entry.signed_amount)
        except Exception:
            logger.error(f"Adjustment for entry #{entry.id} failed, removing the entry")
            if source is None:
                self.entry_repo.delete(entry.id)
            else:
                self.entry_repo.discard_generated(entry.id, source.id, source.last_generated_on)
            raise
        return self.budgets.notifications_for(entry, category)

    def _reapply(self, old: LedgerEntry, new: LedgerEntry) -> None:
        """Revert `old` against its account, then apply `new` against its account."""
        self.store.adjust(old.account_id, -old.signed_amount)
        try:
            self.store.adjust(new.account_id, new.signed_amount)
        except Exception:
            self.store.adjust(old.account_id, old.signed_amount)
            raise

    # ── Operations ────────────────────────────────────────

    @operation
    def create_entry(
        self,
        identity: Identity,
        entry_type: str,
        amount,
        category_id,
        account_id,
        entry_date=None,
        label: str | None = None,
        description: str | None = None,
        is_recurring: bool = False,
        recurring_pattern: str | None = None,
        end_date=None,
    ) -> dict:
        """
        Record an income or expense.

        Returns:
            ok(entry), plus a `notifications` list when an expense pushed
            its category budget past a threshold.
        """
        if entry_type not in ENTRY_TYPES:
            raise ValidationFailed(f"Entry type must be one of: {', '.join(ENTRY_TYPES)}")
        entry = LedgerEntry(
            user_id=identity.user_id,
            type=entry_type,
            amount=parse_amount(amount),
            category_id=require_id(category_id, "Category"),
            account_id=require_id(account_id, "Account"),
            date=parse_day(entry_date) or date.today(),
            label=self._check_label(label),
            description=check_description(description),
            is_recurring=bool(is_recurring),
            recurring_pattern=recurring_pattern,
            end_date=parse_day(end_date, "End date"),
        )
        self._check_recurrence(entry)

        category = self._category(identity.user_id, entry.category_id, entry_type)
        self._account(identity.user_id, entry.account_id)

        # The source itself covers its own date
        if entry.is_recurring:
            entry.last_generated_on = entry.date

        notifications = self._record(entry, category)
        if notifications:
            return ok(entry, notifications=[n.to_dict() for n in notifications])
        return ok(entry)

    def materialize(self, source: LedgerEntry, on_date: date) -> tuple[LedgerEntry, list[Notification]]:
        """
        Create the copy of a recurring entry for `on_date` through the
        regular creation path, stamping the source in the same write.
        Raises on failure; the caller decides.
        """
        category = self.category_repo.get_by_id(source.category_id)
        if category is None:
            raise NotFound(f"Category #{source.category_id} not found")
        copy = replace(
            source,
            id=None,
            created_at=None,
            date=on_date,
            is_recurring=False,
            recurring_pattern=None,
            end_date=None,
            source_id=source.id,
            last_generated_on=None,
        )
        notifications = self._record(copy, category, source=source)
        return copy, notifications

    @operation
    def get(self, identity: Identity, entry_id: int) -> dict:
        return ok(self._load(identity, entry_id))

    @operation
    def list_entries(
        self,
        identity: Identity,
        entry_type: str | None = None,
        start=None,
        end=None,
        category_id: int | None = None,
        account_id: int | None = None,
    ) -> dict:
        if entry_type and entry_type not in ENTRY_TYPES:
            raise ValidationFailed(f"Entry type must be one of: {', '.join(ENTRY_TYPES)}")
        entries = self.entry_repo.find(
            identity.user_id,
            entry_type=entry_type,
            start=parse_day(start, "Start date"),
            end=parse_day(end, "End date"),
            category_id=category_id,
            account_id=account_id,
        )
        return ok(entries)

    @operation
    def update(
        self,
        identity: Identity,
        entry_id: int,
        amount=None,
        category_id=None,
        account_id=None,
        entry_date=None,
        label: str | None = None,
        description: str | None = None,
        is_recurring: bool | None = None,
        recurring_pattern: str | None = None,
        end_date=None,
    ) -> dict:
        """
        Partially update an entry. Only the given fields change and the
        entry type never does.

        When amount or account changes, the old effect is reverted against
        the old account and the new effect applied against the new one:
        two adjustments, never a single net difference.
        """
        old = self._load(identity, entry_id)
        entry = replace(old)

        if category_id is not None:
            entry.category_id = self._category(old.user_id, require_id(category_id, "Category"), old.type).id
        if account_id is not None:
            entry.account_id = self._account(old.user_id, require_id(account_id, "Account")).id
        if amount is not None:
            entry.amount = parse_amount(amount)
        if entry_date is not None:
            entry.date = parse_day(entry_date)
        if label is not None:
            entry.label = self._check_label(label)
        if description is not None:
            entry.description = check_description(description)
        if is_recurring is not None:
            entry.is_recurring = bool(is_recurring)
        if recurring_pattern is not None:
            entry.recurring_pattern = recurring_pattern
        if end_date is not None:
            entry.end_date = parse_day(end_date, "End date")
        self._check_recurrence(entry)
        if entry.is_recurring and not old.is_recurring:
            entry.last_generated_on = max(entry.date, date.today())

        if not self.entry_repo.update(entry):
            raise NotFound(f"Entry #{entry_id} not found")

        if entry.account_id != old.account_id or entry.signed_amount != old.signed_amount:
            try:
                self._reapply(old, entry)
            except Exception:
                logger.error(f"Re-adjustment for entry #{entry_id} failed, restoring the entry")
                self.entry_repo.update(old)
                raise

        return ok(entry)

    @operation
    def delete(self, identity: Identity, entry_id: int) -> dict:
        """Revert the entry's adjustment, then remove it."""
        entry = self._load(identity, entry_id)
        self.store.adjust(entry.account_id, -entry.signed_amount)
        try:
            deleted = self.entry_repo.delete(entry.id)
        except Exception:
            self.store.adjust(entry.account_id, entry.signed_amount)
            raise
        if not deleted:
            self.store.adjust(entry.account_id, entry.signed_amount)
            raise NotFound(f"Entry #{entry_id} not found")
        return ok(message=f"{entry.type.capitalize()} #{entry_id} deleted")
