"""
services/savings_service.py
----------------------------
Savings goals. Progress is entered by hand and never moves any account
balance.
"""

from datetime import date
from decimal import Decimal, InvalidOperation

from models.savings import SAVINGS_STATUSES, SavingsGoal
from models.user import Identity
from repositories.savings_repo import SavingsRepository
from services.errors import Forbidden, NotFound, ValidationFailed, ok, operation
from services.validation import check_description, parse_amount, parse_day
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_NAME_LENGTH = 50


def progress(goal: SavingsGoal, today: date | None = None) -> dict:
    """
    Goal fields plus how far along it is.

    Adds progress_percentage, days_left, amount_needed,
    daily_savings_required and is_achievable.
    """
    today = today or date.today()
    days_left = (goal.target_date - today).days
    amount_needed = goal.amount - goal.current_amount
    daily = amount_needed / days_left if days_left > 0 else Decimal("0")

    data = goal.to_dict()
    data["progress_percentage"] = round(float(goal.current_amount / goal.amount * 100), 2)
    data["days_left"] = max(days_left, 0)
    data["amount_needed"] = amount_needed.quantize(Decimal("0.01"))
    data["daily_savings_required"] = Decimal(daily).quantize(Decimal("0.01"))
    data["is_achievable"] = days_left > 0
    return data


def _status_after(goal: SavingsGoal) -> str:
    if goal.current_amount >= goal.amount:
        return "Completed"
    if goal.status == "Completed":
        return "In Progress"
    return goal.status


def _parse_current(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationFailed("Current amount must be a number")
    if not amount.is_finite() or amount < 0:
        raise ValidationFailed("Current amount cannot be negative")
    return amount.quantize(Decimal("0.01"))


class SavingsService:
    """CRUD over savings goals plus progress tracking."""

    def __init__(self, repo: SavingsRepository | None = None):
        self.repo = repo or SavingsRepository()

    def _load(self, identity: Identity, goal_id: int) -> SavingsGoal:
        goal = self.repo.get_by_id(goal_id)
        if goal is None:
            raise NotFound(f"Savings goal #{goal_id} not found")
        if not identity.can_access(goal.user_id):
            raise Forbidden("Not authorized to access this savings goal")
        return goal

    @staticmethod
    def _check_name(name: str | None) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationFailed("Name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationFailed(f"Name cannot exceed {MAX_NAME_LENGTH} characters")
        return name

    @operation
    def create(self, identity: Identity, name: str, amount, target_date,
               description: str | None = None) -> dict:
        target = parse_day(target_date, "Target date")
        if target is None:
            raise ValidationFailed("Target date is required")
        goal = self.repo.add(SavingsGoal(
            user_id=identity.user_id,
            name=self._check_name(name),
            amount=parse_amount(amount, "Target amount"),
            target_date=target,
            description=check_description(description),
        ))
        return ok(goal)

    @operation
    def list_goals(self, identity: Identity, status: str | None = None) -> dict:
        if status and status not in SAVINGS_STATUSES:
            raise ValidationFailed(f"Status must be one of: {', '.join(SAVINGS_STATUSES)}")
        return ok(self.repo.get_all(identity.user_id, status))

    @operation
    def get(self, identity: Identity, goal_id: int) -> dict:
        return ok(progress(self._load(identity, goal_id)))

    @operation
    def update(self, identity: Identity, goal_id: int, name: str | None = None, amount=None,
               target_date=None, description: str | None = None, status: str | None = None) -> dict:
        goal = self._load(identity, goal_id)
        if name is not None:
            goal.name = self._check_name(name)
        if amount is not None:
            goal.amount = parse_amount(amount, "Target amount")
        if target_date is not None:
            goal.target_date = parse_day(target_date, "Target date")
        if description is not None:
            goal.description = check_description(description)
        if status is not None:
            if status not in SAVINGS_STATUSES:
                raise ValidationFailed(f"Status must be one of: {', '.join(SAVINGS_STATUSES)}")
            goal.status = status

        if not self.repo.update(goal):
            raise NotFound(f"Savings goal #{goal_id} not found")
        return ok(goal)

    @operation
    def update_progress(self, identity: Identity, goal_id: int, current_amount) -> dict:
        """
        Record how much has been saved so far.

        The goal becomes Completed once the target is reached and goes
        back to In Progress if the amount later drops below it.
        """
        if current_amount is None or current_amount == "":
            raise ValidationFailed("Current amount is required")
        goal = self._load(identity, goal_id)
        goal.current_amount = _parse_current(current_amount)
        goal.status = _status_after(goal)

        if not self.repo.update(goal):
            raise NotFound(f"Savings goal #{goal_id} not found")
        return ok(progress(goal))

    @operation
    def delete(self, identity: Identity, goal_id: int) -> dict:
        goal = self._load(identity, goal_id)
        if not self.repo.delete(goal.id):
            raise NotFound(f"Savings goal #{goal_id} not found")
        return ok(message=f"Savings goal '{goal.name}' deleted")
