"""Savings goals and their progress."""

from datetime import date
from decimal import Decimal

import pytest

from models.savings import SavingsGoal
from services.savings_service import SavingsService, progress
from tests.fakes import FakeSavingsRepository


@pytest.fixture
def service():
    return SavingsService(FakeSavingsRepository())


def test_progress_figures():
    goal = SavingsGoal(
        user_id=1, name="Bike", amount=Decimal("1000"),
        target_date=date(2026, 12, 31), current_amount=Decimal("250"),
    )

    data = progress(goal, today=date(2026, 12, 1))

    assert data["progress_percentage"] == 25.0
    assert data["days_left"] == 30
    assert data["amount_needed"] == Decimal("750.00")
    assert data["daily_savings_required"] == Decimal("25.00")
    assert data["is_achievable"] is True


def test_progress_past_deadline():
    goal = SavingsGoal(user_id=1, name="Bike", amount=Decimal("100"), target_date=date(2026, 1, 1))

    data = progress(goal, today=date(2026, 2, 1))

    assert data["days_left"] == 0
    assert data["daily_savings_required"] == Decimal("0.00")
    assert data["is_achievable"] is False


def test_reaching_target_completes_goal(service, owner):
    goal = service.create(owner, "Laptop", "1200", "2027-01-01")["data"]

    result = service.update_progress(owner, goal.id, "1200")

    assert result["data"]["status"] == "Completed"
    assert result["data"]["progress_percentage"] == 100.0


def test_dropping_below_target_reopens_goal(service, owner):
    goal = service.create(owner, "Laptop", "1200", "2027-01-01")["data"]
    service.update_progress(owner, goal.id, "1300")

    result = service.update_progress(owner, goal.id, "900")

    assert result["data"]["status"] == "In Progress"


def test_negative_progress_rejected(service, owner):
    goal = service.create(owner, "Laptop", "1200", "2027-01-01")["data"]

    assert service.update_progress(owner, goal.id, "-5")["error"] == "ValidationFailed"


def test_target_date_required(service, owner):
    assert service.create(owner, "Laptop", "1200", None)["error"] == "ValidationFailed"


def test_unknown_status(service, owner):
    goal = service.create(owner, "Laptop", "1200", "2027-01-01")["data"]

    assert service.update(owner, goal.id, status="Paused")["error"] == "ValidationFailed"


def test_other_users_goal(service, owner, stranger):
    goal = service.create(owner, "Laptop", "1200", "2027-01-01")["data"]

    assert service.get(stranger, goal.id)["error"] == "Forbidden"
