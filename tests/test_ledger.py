"""Ledger entries and the balance effect each one carries."""

from datetime import date
from decimal import Decimal

import pytest

from models.user import Identity


class TestCreate:
    def test_expense_decrements_account(self, ledger, owner, accounts, make_account, make_category):
        """An expense of 50 on an account holding 100 leaves 50."""
        account = make_account("100")
        food = make_category("expense", "Food")

        result = ledger.create_entry(owner, "expense", "50", food.id, account.id)

        assert result["success"] is True
        assert result["data"].id is not None
        assert accounts.balance(account.id) == Decimal("50.00")

    def test_income_increments_account(self, ledger, owner, accounts, make_account, make_category):
        account = make_account("10")
        salary = make_category("income", "Salary")

        ledger.create_entry(owner, "income", "2500.50", salary.id, account.id)

        assert accounts.balance(account.id) == Decimal("2510.50")

    def test_amount_below_minimum_is_rejected(self, ledger, owner, entries, make_account, make_category):
        account = make_account("100")
        food = make_category()

        result = ledger.create_entry(owner, "expense", "0", food.id, account.id)

        assert result["success"] is False
        assert result["error"] == "ValidationFailed"
        assert entries.table.rows == {}

    def test_category_of_other_type(self, ledger, owner, accounts, make_account, make_category):
        account = make_account("100")
        salary = make_category("income", "Salary")

        result = ledger.create_entry(owner, "expense", "5", salary.id, account.id)

        assert result["error"] == "CategoryMismatch"
        assert accounts.balance(account.id) == Decimal("100")

    def test_foreign_account_is_forbidden(self, ledger, owner, stranger, make_account, make_category):
        theirs = make_account("100", user_id=stranger.user_id)
        food = make_category()

        result = ledger.create_entry(owner, "expense", "5", food.id, theirs.id)

        assert result["error"] == "Forbidden"
        assert result["status"] == 403

    def test_missing_category(self, ledger, owner, make_account):
        account = make_account("100")

        result = ledger.create_entry(owner, "expense", "5", 999, account.id)

        assert result["error"] == "NotFound"

    def test_failed_adjustment_removes_entry(self, ledger, owner, accounts, entries,
                                             make_account, make_category):
        """No entry row survives without its balance effect."""
        account = make_account("100")
        food = make_category()
        accounts.fail_adjust_for.add(account.id)

        with pytest.raises(RuntimeError):
            ledger.create_entry(owner, "expense", "5", food.id, account.id)

        assert entries.table.rows == {}
        assert accounts.balance(account.id) == Decimal("100")

    def test_recurring_requires_pattern(self, ledger, owner, make_account, make_category):
        account = make_account()
        food = make_category()

        result = ledger.create_entry(owner, "expense", "5", food.id, account.id, is_recurring=True)

        assert result["error"] == "ValidationFailed"

    def test_recurring_source_covers_its_own_date(self, ledger, owner, make_account, make_category):
        account = make_account()
        food = make_category()

        result = ledger.create_entry(
            owner, "expense", "5", food.id, account.id,
            entry_date="2026-03-01", is_recurring=True, recurring_pattern="monthly",
        )

        assert result["data"].last_generated_on == date(2026, 3, 1)


class TestUpdate:
    def test_amount_change_applies_difference(self, ledger, owner, accounts, make_account, make_category):
        """Income 30 edited to 80 adds 50 more to the account."""
        account = make_account("0")
        salary = make_category("income", "Salary")
        entry = ledger.create_entry(owner, "income", "30", salary.id, account.id)["data"]

        result = ledger.update(owner, entry.id, amount="80")

        assert result["success"] is True
        assert accounts.balance(account.id) == Decimal("80.00")

    def test_account_change_moves_effect(self, ledger, owner, accounts, make_account, make_category):
        first = make_account("100", name="Cash")
        second = make_account("100", name="Bank")
        food = make_category()
        entry = ledger.create_entry(owner, "expense", "25", food.id, first.id)["data"]

        ledger.update(owner, entry.id, account_id=second.id, amount="40")

        assert accounts.balance(first.id) == Decimal("100.00")
        assert accounts.balance(second.id) == Decimal("60.00")

    def test_description_only_leaves_balance(self, ledger, owner, accounts, entries,
                                             make_account, make_category):
        account = make_account("100")
        food = make_category()
        entry = ledger.create_entry(owner, "expense", "10", food.id, account.id)["data"]

        ledger.update(owner, entry.id, description="Groceries")

        assert accounts.balance(account.id) == Decimal("90.00")
        assert entries.get_by_id(entry.id).description == "Groceries"

    def test_failed_reapply_restores_everything(self, ledger, owner, accounts, entries,
                                                make_account, make_category):
        first = make_account("100", name="Cash")
        second = make_account("100", name="Bank")
        food = make_category()
        entry = ledger.create_entry(owner, "expense", "25", food.id, first.id)["data"]
        accounts.fail_adjust_for.add(second.id)

        with pytest.raises(RuntimeError):
            ledger.update(owner, entry.id, account_id=second.id)

        assert accounts.balance(first.id) == Decimal("75.00")
        assert accounts.balance(second.id) == Decimal("100")
        assert entries.get_by_id(entry.id).account_id == first.id

    def test_other_users_entry(self, ledger, owner, stranger, make_account, make_category):
        account = make_account("100")
        food = make_category()
        entry = ledger.create_entry(owner, "expense", "10", food.id, account.id)["data"]

        result = ledger.update(stranger, entry.id, amount="1")

        assert result["error"] == "Forbidden"


class TestDelete:
    def test_delete_restores_balance(self, ledger, owner, accounts, entries, make_account, make_category):
        """Deleting the expense of 50 brings the account back to 100."""
        account = make_account("100")
        food = make_category()
        entry = ledger.create_entry(owner, "expense", "50", food.id, account.id)["data"]

        result = ledger.delete(owner, entry.id)

        assert result == {"success": True, "data": None, "message": f"Expense #{entry.id} deleted"}
        assert accounts.balance(account.id) == Decimal("100.00")
        assert entries.get_by_id(entry.id) is None

    def test_delete_missing(self, ledger, owner):
        assert ledger.delete(owner, 42)["error"] == "NotFound"


def test_balance_tracks_signed_sum(ledger, owner, accounts, entries, make_account, make_category):
    """After any mix of creates, edits and deletes the balance equals opening + signed entries."""
    account = make_account("200")
    food = make_category("expense", "Food")
    salary = make_category("income", "Salary")

    ids = [
        ledger.create_entry(owner, "expense", "12.30", food.id, account.id)["data"].id,
        ledger.create_entry(owner, "income", "100", salary.id, account.id)["data"].id,
        ledger.create_entry(owner, "expense", "7.70", food.id, account.id)["data"].id,
        ledger.create_entry(owner, "expense", "300", food.id, account.id)["data"].id,
    ]
    ledger.update(owner, ids[1], amount="150")
    ledger.delete(owner, ids[3])

    expected = Decimal("200") + sum(e.signed_amount for e in entries.find(owner.user_id))
    assert accounts.balance(account.id) == expected == Decimal("330.00")


def test_admin_can_read_any_entry(ledger, owner, make_account, make_category):
    account = make_account("100")
    food = make_category()
    entry = ledger.create_entry(owner, "expense", "10", food.id, account.id)["data"]

    result = ledger.get(Identity(user_id=1, role="admin"), entry.id)

    assert result["data"].id == entry.id
