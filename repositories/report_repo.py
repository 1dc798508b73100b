"""
repositories/report_repo.py
----------------------------
Read-only aggregation queries over ledger entries and accounts.
Nothing in this module writes to the database.

Every method accepts `user_id=None` to aggregate across all users
(admin reports).
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)


def _user_filter(user_id: Optional[int], column: str = "e.user_id") -> tuple[str, list]:
    if user_id is None:
        return "", []
    return f" AND {column} = %s", [user_id]


class ReportRepository:
    """Aggregations backing reports, exports and charts."""

    def _fetch(self, sql: str, params: list) -> list[tuple]:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchall()
        finally:
            release_connection(conn)

    def totals(self, start: date, end: date, user_id: Optional[int] = None) -> dict:
        """
        Income and expense totals for an inclusive date range.

        Returns:
            {'income': Decimal, 'expense': Decimal}
        """
        where, params = _user_filter(user_id)
        sql = f"""
            SELECT e.type, COALESCE(SUM(e.amount), 0)
            FROM ledger_entries e
            WHERE e.date BETWEEN %s AND %s{where}
            GROUP BY e.type;
        """
        result = {"income": Decimal("0"), "expense": Decimal("0")}
        for entry_type, total in self._fetch(sql, [start, end] + params):
            result[entry_type] = Decimal(total)
        return result

    def category_breakdown(
        self,
        entry_type: str,
        start: date,
        end: date,
        user_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        """
        Totals grouped by category, largest first.

        Returns:
            [{'category_id', 'category', 'amount', 'count'}, ...]
        """
        where, params = _user_filter(user_id)
        sql = f"""
            SELECT c.id, c.name, SUM(e.amount) AS total, COUNT(*)
            FROM ledger_entries e
            JOIN categories c ON c.id = e.category_id
            WHERE e.type = %s AND e.date BETWEEN %s AND %s{where}
            GROUP BY c.id, c.name
            ORDER BY total DESC
        """
        params = [entry_type, start, end] + params
        if limit:
            sql += " LIMIT %s"
            params.append(limit)
        return [
            {"category_id": r[0], "category": r[1], "amount": Decimal(r[2]), "count": r[3]}
            for r in self._fetch(sql, params)
        ]

    def account_breakdown(
        self, entry_type: str, start: date, end: date, user_id: Optional[int] = None
    ) -> list[dict]:
        """Totals grouped by account, largest first."""
        where, params = _user_filter(user_id)
        sql = f"""
            SELECT a.id, a.name, SUM(e.amount) AS total, COUNT(*)
            FROM ledger_entries e
            JOIN accounts a ON a.id = e.account_id
            WHERE e.type = %s AND e.date BETWEEN %s AND %s{where}
            GROUP BY a.id, a.name
            ORDER BY total DESC;
        """
        return [
            {"account_id": r[0], "account": r[1], "amount": Decimal(r[2]), "count": r[3]}
            for r in self._fetch(sql, [entry_type, start, end] + params)
        ]

    def user_breakdown(self, entry_type: str, start: date, end: date) -> list[dict]:
        """Totals grouped by user across the whole system, largest first."""
        sql = """
            SELECT u.telegram_id, u.first_name, SUM(e.amount) AS total, COUNT(*)
            FROM ledger_entries e
            JOIN users u ON u.telegram_id = e.user_id
            WHERE e.type = %s AND e.date BETWEEN %s AND %s
            GROUP BY u.telegram_id, u.first_name
            ORDER BY total DESC;
        """
        return [
            {"user_id": r[0], "first_name": r[1], "amount": Decimal(r[2]), "count": r[3]}
            for r in self._fetch(sql, [entry_type, start, end])
        ]

    def monthly_trend(self, entry_type: str, since: date, user_id: Optional[int] = None) -> list[dict]:
        """
        Per-month totals from `since` onward, oldest month first.

        Returns:
            [{'period': 'YYYY-MM', 'amount': Decimal, 'count': int}, ...]
        """
        where, params = _user_filter(user_id)
        sql = f"""
            SELECT TO_CHAR(e.date, 'YYYY-MM') AS period, SUM(e.amount), COUNT(*)
            FROM ledger_entries e
            WHERE e.type = %s AND e.date >= %s{where}
            GROUP BY period
            ORDER BY period ASC;
        """
        return [
            {"period": r[0], "amount": Decimal(r[1]), "count": r[2]}
            for r in self._fetch(sql, [entry_type, since] + params)
        ]

    def balance_total(self, user_id: int) -> Decimal:
        """Sum of the cached balances of a user's accounts."""
        sql = "SELECT COALESCE(SUM(amount), 0) FROM accounts WHERE user_id = %s;"
        rows = self._fetch(sql, [user_id])
        return Decimal(rows[0][0])
