"""
repositories/budget_repo.py
-----------------------------
Data access layer for category budgets.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from psycopg2 import errors

from db.connection import get_connection, release_connection
from models.budget import Budget
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, user_id, category_id, amount, date_from, date_to, description, created_at"


class BudgetRepository:
    """Repository for CRUD operations on the budgets table."""

    def add(self, budget: Budget) -> Optional[Budget]:
        """Insert a budget. Returns None when its window overlaps another of the category."""
        sql = """
            INSERT INTO budgets (user_id, category_id, amount, date_from, date_to, description)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    budget.user_id, budget.category_id, budget.amount,
                    budget.date_from, budget.date_to, budget.description,
                ))
                budget.id, budget.created_at = cur.fetchone()
            conn.commit()
            logger.info(f"Added budget #{budget.id} for user {budget.user_id}")
            return budget
        except errors.ExclusionViolation:
            conn.rollback()
            return None
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add budget: {e}")
            raise
        finally:
            release_connection(conn)

    def get_by_id(self, budget_id: int) -> Optional[Budget]:
        sql = f"SELECT {_COLUMNS} FROM budgets WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (budget_id,))
                row = cur.fetchone()
                return self._row_to_budget(row) if row else None
        finally:
            release_connection(conn)

    def find(
        self,
        user_id: int,
        category_id: Optional[int] = None,
        active_on: Optional[date] = None,
    ) -> list[Budget]:
        """A user's budgets, optionally limited to one category or to those covering a day."""
        sql = f"SELECT {_COLUMNS} FROM budgets WHERE user_id = %s"
        params: list = [user_id]
        if category_id:
            sql += " AND category_id = %s"
            params.append(category_id)
        if active_on:
            sql += " AND date_from <= %s AND date_to >= %s"
            params.extend([active_on, active_on])
        sql += " ORDER BY date_from DESC, id DESC;"

        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return [self._row_to_budget(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def find_overlapping(
        self,
        user_id: int,
        category_id: int,
        date_from: date,
        date_to: date,
        exclude_id: Optional[int] = None,
    ) -> list[Budget]:
        """Budgets of the same category whose inclusive window intersects [date_from, date_to]."""
        sql = f"""
            SELECT {_COLUMNS} FROM budgets
            WHERE user_id = %s AND category_id = %s
              AND date_from <= %s AND date_to >= %s
        """
        params: list = [user_id, category_id, date_to, date_from]
        if exclude_id:
            sql += " AND id <> %s"
            params.append(exclude_id)

        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return [self._row_to_budget(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def find_covering(self, user_id: int, category_id: int, day: date) -> Optional[Budget]:
        """The budget of a category whose window contains `day`, if any."""
        budgets = self.find(user_id, category_id=category_id, active_on=day)
        return budgets[0] if budgets else None

    def update(self, budget: Budget) -> Optional[bool]:
        """Returns None when the new window overlaps another of the category."""
        sql = """
            UPDATE budgets
            SET category_id = %s, amount = %s, date_from = %s, date_to = %s, description = %s
            WHERE id = %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    budget.category_id, budget.amount, budget.date_from,
                    budget.date_to, budget.description, budget.id,
                ))
                updated = cur.rowcount > 0
            conn.commit()
            return updated
        except errors.ExclusionViolation:
            conn.rollback()
            return None
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update budget #{budget.id}: {e}")
            raise
        finally:
            release_connection(conn)

    def delete(self, budget_id: int) -> bool:
        sql = "DELETE FROM budgets WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (budget_id,))
                deleted = cur.rowcount > 0
            conn.commit()
            return deleted
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete budget #{budget_id}: {e}")
            raise
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_budget(row: tuple) -> Budget:
        return Budget(
            id=row[0],
            user_id=row[1],
            category_id=row[2],
            amount=Decimal(row[3]),
            date_from=row[4],
            date_to=row[5],
            description=row[6],
            created_at=row[7],
        )
