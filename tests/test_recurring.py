"""Recurring entries and the daily scheduler tick."""

from datetime import date
from decimal import Decimal

import pytest

from services import recurring_service
from services.recurring_service import RecurringService, due_patterns


@pytest.fixture(autouse=True)
def schedule(monkeypatch):
    """Weekly on Sundays, monthly on the 1st."""
    monkeypatch.setattr(recurring_service, "RECURRING_WEEKDAY", 6)
    monkeypatch.setattr(recurring_service, "RECURRING_MONTH_DAY", 1)


@pytest.fixture
def scheduler(entries, ledger):
    return RecurringService(entry_repo=entries, ledger=ledger)


@pytest.fixture
def source(ledger, owner, make_account, make_category):
    """A monthly rent expense of 500 created on 2026-03-01."""
    def _make(pattern="monthly", entry_date="2026-03-01", end_date=None, amount="500"):
        account = make_account("2000")
        rent = make_category("expense", "Rent")
        entry = ledger.create_entry(
            owner, "expense", amount, rent.id, account.id, entry_date=entry_date,
            is_recurring=True, recurring_pattern=pattern, end_date=end_date,
        )["data"]
        return entry, account
    return _make


class TestDuePatterns:
    def test_sunday_first_of_month(self):
        assert due_patterns(date(2026, 3, 1)) == ["daily", "weekly", "monthly"]

    def test_plain_weekday(self):
        assert due_patterns(date(2026, 3, 4)) == ["daily"]

    def test_month_day_clamped_to_short_month(self, monkeypatch):
        monkeypatch.setattr(recurring_service, "RECURRING_MONTH_DAY", 31)

        assert "monthly" in due_patterns(date(2026, 2, 28))
        assert "monthly" not in due_patterns(date(2026, 3, 30))


class TestRunDue:
    def test_generates_copy_and_adjusts_balance(self, scheduler, source, accounts, entries):
        entry, account = source()

        result = scheduler.run_due(date(2026, 4, 1))

        [copy] = result.generated
        assert copy.source_id == entry.id
        assert copy.date == date(2026, 4, 1)
        assert copy.is_recurring is False
        assert accounts.balance(account.id) == Decimal("1000.00")
        assert entries.get_by_id(entry.id).last_generated_on == date(2026, 4, 1)

    def test_second_tick_same_day_is_noop(self, scheduler, source, accounts):
        _, account = source()

        scheduler.run_due(date(2026, 4, 1))
        again = scheduler.run_due(date(2026, 4, 1))

        assert again.generated == []
        assert accounts.balance(account.id) == Decimal("1000.00")

    def test_source_date_not_generated_twice(self, scheduler, source, accounts):
        """The day a source is created already counts as generated."""
        _, account = source()

        result = scheduler.run_due(date(2026, 3, 1))

        assert result.generated == []
        assert accounts.balance(account.id) == Decimal("1500.00")

    def test_not_due_on_other_days(self, scheduler, source):
        source()

        assert scheduler.run_due(date(2026, 4, 2)).generated == []

    def test_end_date_is_inclusive(self, scheduler, source):
        source(pattern="daily", end_date="2026-03-03", amount="5")

        assert len(scheduler.run_due(date(2026, 3, 3)).generated) == 1
        assert scheduler.run_due(date(2026, 3, 4)).generated == []

    def test_future_source_waits(self, scheduler, source):
        source(pattern="daily", entry_date="2026-05-01", amount="5")

        assert scheduler.run_due(date(2026, 4, 20)).generated == []

    def test_failure_is_retried_next_tick(self, scheduler, source, categories, entries):
        entry, _ = source()
        categories.delete(entry.category_id)

        result = scheduler.run_due(date(2026, 4, 1))

        assert result.failed == [entry.id]
        assert entries.get_by_id(entry.id).last_generated_on == date(2026, 3, 1)

    def test_deleted_source_stops_generation(self, scheduler, source, ledger, owner, accounts, entries):
        entry, account = source()

        assert ledger.delete(owner, entry.id)["success"] is True

        assert scheduler.run_due(date(2026, 4, 1)).generated == []
        assert accounts.balance(account.id) == Decimal("2000.00")
        assert entries.find(owner.user_id) == []

    def test_failed_write_generates_nothing(self, scheduler, source, accounts, entries, owner):
        entry, account = source()
        entries.fail_stamp_for.add(entry.id)

        result = scheduler.run_due(date(2026, 4, 1))

        assert result.failed == [entry.id]
        assert accounts.balance(account.id) == Decimal("1500.00")
        assert len(entries.find(owner.user_id)) == 1

    def test_failed_adjustment_is_retried_same_day(self, scheduler, source, accounts, entries, owner):
        entry, account = source()
        accounts.fail_adjust_for.add(account.id)

        failed = scheduler.run_due(date(2026, 4, 1))

        assert failed.failed == [entry.id]
        assert entries.get_by_id(entry.id).last_generated_on == date(2026, 3, 1)
        assert len(entries.find(owner.user_id)) == 1

        accounts.fail_adjust_for.clear()
        retried = scheduler.run_due(date(2026, 4, 1))

        assert len(retried.generated) == 1
        assert accounts.balance(account.id) == Decimal("1000.00")

    def test_copy_triggers_budget_notifications(self, scheduler, source, budget_service, owner):
        entry, _ = source()
        budget_service.create(owner, entry.category_id, "600", "2026-04-01", "2026-04-30")

        result = scheduler.run_due(date(2026, 4, 1))

        [note] = result.notifications
        assert note.type == "warning"
        assert note.percentage == 83.3
        assert note.user_id == owner.user_id


class TestStop:
    def test_stop_keeps_generated_entries(self, scheduler, source, owner, entries):
        entry, _ = source()
        scheduler.run_due(date(2026, 4, 1))

        result = scheduler.stop(owner, entry.id)

        assert result["success"] is True
        assert entries.get_by_id(entry.id).is_recurring is False
        assert len(entries.find(owner.user_id)) == 2
        assert scheduler.run_due(date(2026, 5, 1)).generated == []

    def test_stop_non_recurring(self, scheduler, ledger, owner, make_account, make_category):
        account = make_account("100")
        food = make_category()
        entry = ledger.create_entry(owner, "expense", "5", food.id, account.id)["data"]

        result = scheduler.stop(owner, entry.id)

        assert result["message"] == f"Entry #{entry.id} is not recurring"

    def test_stop_other_users_entry(self, scheduler, source, stranger):
        entry, _ = source()

        assert scheduler.stop(stranger, entry.id)["error"] == "Forbidden"
