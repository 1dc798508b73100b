"""
services/budget_service.py
---------------------------
Business logic for category budgets and the post-expense threshold check.
"""

from datetime import date
from decimal import Decimal

from models.budget import Budget
from models.category import Category
from models.entry import LedgerEntry
from models.notification import Notification
from models.user import Identity
from repositories.budget_repo import BudgetRepository
from repositories.category_repo import CategoryRepository
from repositories.entry_repo import EntryRepository
from services.errors import (
    Forbidden,
    NotFound,
    OverlappingBudget,
    ValidationFailed,
    ok,
    operation,
)
from services.notification_service import check_budget_thresholds
from services.validation import check_description, parse_amount, parse_day, require_id
from utils.logger import get_logger

logger = get_logger(__name__)


class BudgetService:
    """Manages budget windows and reports how much of each has been spent."""

    def __init__(
        self,
        budget_repo: BudgetRepository | None = None,
        category_repo: CategoryRepository | None = None,
        entry_repo: EntryRepository | None = None,
    ):
        self.budget_repo = budget_repo or BudgetRepository()
        self.category_repo = category_repo or CategoryRepository()
        self.entry_repo = entry_repo or EntryRepository()

    # ── Helpers ───────────────────────────────────────────

    def _expense_category(self, identity: Identity, category_id) -> Category:
        category_id = require_id(category_id, "Category")
        category = self.category_repo.get_by_id(category_id)
        if category is None:
            raise NotFound(f"Category #{category_id} not found")
        if category.user_id != identity.user_id:
            raise Forbidden("Not authorized to use this category")
        if category.type != "expense":
            raise ValidationFailed("Budgets can only be set on expense categories")
        return category

    def _load(self, identity: Identity, budget_id: int) -> Budget:
        budget = self.budget_repo.get_by_id(budget_id)
        if budget is None:
            raise NotFound(f"Budget #{budget_id} not found")
        if not identity.can_access(budget.user_id):
            raise Forbidden("Not authorized to access this budget")
        return budget

    def _check_window(self, budget: Budget, exclude_id: int | None = None) -> None:
        if budget.date_from > budget.date_to:
            raise ValidationFailed("Start date must be on or before end date")
        clashes = self.budget_repo.find_overlapping(
            budget.user_id, budget.category_id, budget.date_from, budget.date_to, exclude_id
        )
        if clashes:
            other = clashes[0]
            raise OverlappingBudget(
                f"Budget #{other.id} already covers {other.date_from} to {other.date_to} for this category"
            )

    def _stats(self, budget: Budget) -> dict:
        spent = self.entry_repo.sum_expenses(
            budget.user_id, budget.category_id, budget.date_from, budget.date_to
        )
        data = budget.to_dict()
        data["spent"] = spent
        data["remaining"] = budget.amount - spent
        data["percentage_spent"] = round(float(spent / budget.amount * 100), 2)
        return data

    # ── Operations ────────────────────────────────────────

    @operation
    def create(self, identity: Identity, category_id, amount, date_from, date_to,
               description: str | None = None) -> dict:
        category = self._expense_category(identity, category_id)
        start = parse_day(date_from, "Start date")
        end = parse_day(date_to, "End date")
        if start is None or end is None:
            raise ValidationFailed("Start and end dates are required")

        budget = Budget(
            user_id=identity.user_id,
            category_id=category.id,
            amount=parse_amount(amount),
            date_from=start,
            date_to=end,
            description=check_description(description),
        )
        self._check_window(budget)
        created = self.budget_repo.add(budget)
        if created is None:
            raise OverlappingBudget("Another budget already covers part of this window for this category")
        return ok(created)

    @operation
    def list_budgets(self, identity: Identity, active_only: bool = False,
                     category_id: int | None = None) -> dict:
        """The caller's budgets with spending stats, optionally only those active today."""
        active_on = date.today() if active_only else None
        budgets = self.budget_repo.find(identity.user_id, category_id=category_id, active_on=active_on)
        return ok([self._stats(b) for b in budgets])

    @operation
    def get(self, identity: Identity, budget_id: int) -> dict:
        return ok(self._stats(self._load(identity, budget_id)))

    @operation
    def update(self, identity: Identity, budget_id: int, category_id=None, amount=None,
               date_from=None, date_to=None, description: str | None = None) -> dict:
        budget = self._load(identity, budget_id)
        if category_id is not None:
            budget.category_id = self._expense_category(identity, category_id).id
        if amount is not None:
            budget.amount = parse_amount(amount)
        if date_from is not None:
            budget.date_from = parse_day(date_from, "Start date")
        if date_to is not None:
            budget.date_to = parse_day(date_to, "End date")
        if description is not None:
            budget.description = check_description(description)

        self._check_window(budget, exclude_id=budget.id)
        updated = self.budget_repo.update(budget)
        if updated is None:
            raise OverlappingBudget("Another budget already covers part of this window for this category")
        if not updated:
            raise NotFound(f"Budget #{budget_id} not found")
        return ok(budget)

    @operation
    def delete(self, identity: Identity, budget_id: int) -> dict:
        budget = self._load(identity, budget_id)
        if not self.budget_repo.delete(budget.id):
            raise NotFound(f"Budget #{budget_id} not found")
        return ok(message=f"Budget #{budget_id} deleted")

    # ── Threshold check ───────────────────────────────────

    def notifications_for(self, entry: LedgerEntry, category: Category) -> list[Notification]:
        """
        Run the threshold monitor for a freshly recorded expense.

        Uses the budget whose window contains the expense date and the
        total of all expenses of that category inside the window.
        """
        if not entry.is_expense():
            return []
        budget = self.budget_repo.find_covering(entry.user_id, entry.category_id, entry.date)
        if budget is None:
            return []
        spent: Decimal = self.entry_repo.sum_expenses(
            entry.user_id, entry.category_id, budget.date_from, budget.date_to
        )
        return check_budget_thresholds(category.name, spent, budget.amount, entry.user_id)
