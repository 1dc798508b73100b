"""
services/report_service.py
---------------------------
Read-only financial reports. Projections over the ledger and accounts;
nothing here writes.
"""

from datetime import date
from decimal import Decimal

from models.entry import ENTRY_TYPES
from models.user import Identity
from repositories.report_repo import ReportRepository
from repositories.user_repo import UserRepository
from services.errors import Forbidden, NotFound, ValidationFailed, ok, operation
from services.validation import parse_day
from utils.dates import current_month, trend_start
from utils.logger import get_logger

logger = get_logger(__name__)

TOP_CATEGORIES = 5


def _share(amount: Decimal, total: Decimal) -> float:
    return round(float(amount / total * 100), 2) if total > 0 else 0.0


def _with_shares(rows: list[dict], total: Decimal) -> list[dict]:
    return [{**r, "percentage": _share(r["amount"], total)} for r in rows]


class ReportService:
    """Builds user and admin reports."""

    def __init__(self, repo: ReportRepository | None = None,
                 user_repo: UserRepository | None = None):
        self.repo = repo or ReportRepository()
        self.user_repo = user_repo or UserRepository()

    @staticmethod
    def _window(start, end) -> tuple[date, date]:
        """Given dates, or the current month when either is missing."""
        start, end = parse_day(start, "Start date"), parse_day(end, "End date")
        if start is None or end is None:
            return current_month()
        if start > end:
            raise ValidationFailed("Start date must be on or before end date")
        return start, end

    @staticmethod
    def _require_admin(identity: Identity) -> None:
        if not identity.is_admin:
            raise Forbidden("Admin access required")

    @operation
    def summary(self, identity: Identity, start=None, end=None) -> dict:
        """The caller's income/expense summary for a window (default: this month)."""
        start, end = self._window(start, end)
        totals = self.repo.totals(start, end, identity.user_id)
        since = trend_start(end)
        return ok({
            "start": start,
            "end": end,
            "total_income": totals["income"],
            "total_expense": totals["expense"],
            "net": totals["income"] - totals["expense"],
            "expense_categories": _with_shares(
                self.repo.category_breakdown("expense", start, end, identity.user_id), totals["expense"]
            ),
            "income_categories": _with_shares(
                self.repo.category_breakdown("income", start, end, identity.user_id), totals["income"]
            ),
            "expense_accounts": self.repo.account_breakdown("expense", start, end, identity.user_id),
            "expense_trend": self.repo.monthly_trend("expense", since, identity.user_id),
            "income_trend": self.repo.monthly_trend("income", since, identity.user_id),
        })

    @operation
    def admin_summary(self, identity: Identity, entry_type: str, start=None, end=None) -> dict:
        """Cross-user totals of one entry type, by user, category and month."""
        self._require_admin(identity)
        if entry_type not in ENTRY_TYPES:
            raise ValidationFailed(f"Entry type must be one of: {', '.join(ENTRY_TYPES)}")
        start, end = self._window(start, end)
        total = self.repo.totals(start, end)[entry_type]
        return ok({
            "type": entry_type,
            "start": start,
            "end": end,
            "total": total,
            "user_breakdown": _with_shares(self.repo.user_breakdown(entry_type, start, end), total),
            "category_breakdown": _with_shares(
                self.repo.category_breakdown(entry_type, start, end), total
            ),
            "monthly_trend": self.repo.monthly_trend(entry_type, trend_start(end)),
        })

    @operation
    def user_financial_summary(self, identity: Identity, user_id: int, start=None, end=None) -> dict:
        """One user's totals, balance, savings rate and top categories."""
        self._require_admin(identity)
        user = self.user_repo.get_by_telegram_id(user_id)
        if user is None:
            raise NotFound("User not found")

        start, end = self._window(start, end)
        totals = self.repo.totals(start, end, user_id)
        income, expense = totals["income"], totals["expense"]
        net = income - expense
        since = trend_start(end)
        return ok({
            "user": {"user_id": user["telegram_id"], "first_name": user["first_name"]},
            "start": start,
            "end": end,
            "summary": {
                "total_income": income,
                "total_expense": expense,
                "net": net,
                "total_balance": self.repo.balance_total(user_id),
                "savings_rate": _share(net, income) if income > 0 else 0.0,
            },
            "income_trend": self.repo.monthly_trend("income", since, user_id),
            "expense_trend": self.repo.monthly_trend("expense", since, user_id),
            "top_expense_categories": _with_shares(
                self.repo.category_breakdown("expense", start, end, user_id, limit=TOP_CATEGORIES), expense
            ),
            "top_income_categories": _with_shares(
                self.repo.category_breakdown("income", start, end, user_id, limit=TOP_CATEGORIES), income
            ),
        })

    @operation
    def users_snapshot(self, identity: Identity) -> dict:
        """Every user with this month's income, expense, net and balance."""
        self._require_admin(identity)
        start, end = current_month()
        snapshots = []
        for user in self.user_repo.get_all():
            totals = self.repo.totals(start, end, user["telegram_id"])
            snapshots.append({
                "user_id": user["telegram_id"],
                "first_name": user["first_name"],
                "role": user["role"],
                "currency": user["currency"],
                "income": totals["income"],
                "expense": totals["expense"],
                "net": totals["income"] - totals["expense"],
                "balance": self.repo.balance_total(user["telegram_id"]),
            })
        return ok(snapshots)
