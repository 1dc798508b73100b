"""Budget windows and the threshold monitor run after each expense."""

from decimal import Decimal

from services.notification_service import check_budget_thresholds


class TestThresholdMonitor:
    def test_below_warning(self):
        assert check_budget_thresholds("Food", Decimal("50"), Decimal("100"), 1) == []

    def test_warning_band(self):
        [note] = check_budget_thresholds("Food", Decimal("80"), Decimal("100"), 1)

        assert note.type == "warning"
        assert note.title == "Budget Warning"
        assert note.percentage == 80.0
        assert note.message == "You've used 80.0% of your budget for Food"

    def test_alert_carries_overage(self):
        [note] = check_budget_thresholds("Food", Decimal("150"), Decimal("100"), 1)

        assert note.type == "alert"
        assert note.percentage == 50.0
        assert "by 50.0%" in note.message

    def test_exactly_at_cap_is_alert(self):
        [note] = check_budget_thresholds("Food", Decimal("100"), Decimal("100"), 1)

        assert note.type == "alert"
        assert note.percentage == 0.0

    def test_zero_cap(self):
        assert check_budget_thresholds("Food", Decimal("10"), Decimal("0"), 1) == []


class TestBudgetService:
    def test_overlapping_window_rejected(self, budget_service, owner, make_category):
        food = make_category()
        budget_service.create(owner, food.id, "100", "2026-01-01", "2026-01-31")

        result = budget_service.create(owner, food.id, "50", "2026-01-15", "2026-02-15")

        assert result["error"] == "OverlappingBudget"

    def test_adjacent_windows_allowed(self, budget_service, owner, make_category):
        food = make_category()
        budget_service.create(owner, food.id, "100", "2026-01-01", "2026-01-31")

        result = budget_service.create(owner, food.id, "100", "2026-02-01", "2026-02-28")

        assert result["success"] is True

    def test_overlap_caught_at_write(self, budget_service, budgets, owner, make_category, monkeypatch):
        """A window inserted after the overlap check still cannot be doubled."""
        food = make_category()
        budget_service.create(owner, food.id, "100", "2026-01-01", "2026-01-31")
        monkeypatch.setattr(budgets, "find_overlapping", lambda *args, **kwargs: [])

        created = budget_service.create(owner, food.id, "50", "2026-01-15", "2026-02-15")
        later = budget_service.create(owner, food.id, "50", "2026-02-01", "2026-02-28")["data"]
        moved = budget_service.update(owner, later.id, date_from="2026-01-20")

        assert created["error"] == "OverlappingBudget"
        assert moved["error"] == "OverlappingBudget"
        assert len(budgets.table.rows) == 2

    def test_income_category_rejected(self, budget_service, owner, make_category):
        salary = make_category("income", "Salary")

        result = budget_service.create(owner, salary.id, "100", "2026-01-01", "2026-01-31")

        assert result["error"] == "ValidationFailed"

    def test_reversed_window(self, budget_service, owner, make_category):
        food = make_category()

        result = budget_service.create(owner, food.id, "100", "2026-02-01", "2026-01-01")

        assert result["error"] == "ValidationFailed"

    def test_update_may_keep_own_window(self, budget_service, owner, make_category):
        food = make_category()
        budget = budget_service.create(owner, food.id, "100", "2026-01-01", "2026-01-31")["data"]

        result = budget_service.update(owner, budget.id, amount="120")

        assert result["success"] is True
        assert result["data"].amount == Decimal("120.00")

    def test_stats(self, budget_service, ledger, owner, make_account, make_category):
        account = make_account("500")
        food = make_category()
        budget = budget_service.create(owner, food.id, "200", "2026-01-01", "2026-01-31")["data"]
        ledger.create_entry(owner, "expense", "50", food.id, account.id, entry_date="2026-01-10")
        ledger.create_entry(owner, "expense", "70", food.id, account.id, entry_date="2026-02-10")

        data = budget_service.get(owner, budget.id)["data"]

        assert data["spent"] == Decimal("50.00")
        assert data["remaining"] == Decimal("150.00")
        assert data["percentage_spent"] == 25.0


class TestNotificationsOnExpense:
    def test_warning_then_alert(self, budget_service, ledger, owner, make_account, make_category):
        """85 + 10 on a cap of 100 warns at 95%; a further 10 alerts at 5% over."""
        account = make_account("1000")
        food = make_category()
        budget_service.create(owner, food.id, "100", "2026-01-01", "2026-01-31")

        first = ledger.create_entry(owner, "expense", "85", food.id, account.id, entry_date="2026-01-05")
        second = ledger.create_entry(owner, "expense", "10", food.id, account.id, entry_date="2026-01-06")
        third = ledger.create_entry(owner, "expense", "10", food.id, account.id, entry_date="2026-01-07")

        assert first["notifications"][0]["percentage"] == 85.0
        assert second["notifications"] == [{
            "type": "warning",
            "title": "Budget Warning",
            "message": "You've used 95.0% of your budget for Food",
            "user_id": owner.user_id,
            "percentage": 95.0,
        }]
        assert third["notifications"][0]["type"] == "alert"
        assert third["notifications"][0]["percentage"] == 5.0

    def test_no_budget_no_notifications(self, ledger, owner, make_account, make_category):
        account = make_account("1000")
        food = make_category()

        result = ledger.create_entry(owner, "expense", "999", food.id, account.id)

        assert "notifications" not in result

    def test_expense_outside_window(self, budget_service, ledger, owner, make_account, make_category):
        account = make_account("1000")
        food = make_category()
        budget_service.create(owner, food.id, "100", "2026-01-01", "2026-01-31")

        result = ledger.create_entry(owner, "expense", "500", food.id, account.id, entry_date="2026-03-01")

        assert "notifications" not in result
