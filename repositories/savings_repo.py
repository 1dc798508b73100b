"""
repositories/savings_repo.py
-----------------------------
Data access layer for savings goals.
"""

from decimal import Decimal
from typing import Optional

from db.connection import get_connection, release_connection
from models.savings import SavingsGoal
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, user_id, name, amount, current_amount, target_date, description, status, created_at"


class SavingsRepository:
    """Repository for CRUD operations on the savings_goals table."""

    def add(self, goal: SavingsGoal) -> SavingsGoal:
        sql = """
            INSERT INTO savings_goals (user_id, name, amount, current_amount, target_date, description, status)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    goal.user_id, goal.name, goal.amount, goal.current_amount,
                    goal.target_date, goal.description, goal.status,
                ))
                goal.id, goal.created_at = cur.fetchone()
            conn.commit()
            logger.info(f"Added savings goal #{goal.id} for user {goal.user_id}")
            return goal
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add savings goal: {e}")
            raise
        finally:
            release_connection(conn)

    def get_by_id(self, goal_id: int) -> Optional[SavingsGoal]:
        sql = f"SELECT {_COLUMNS} FROM savings_goals WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (goal_id,))
                row = cur.fetchone()
                return self._row_to_goal(row) if row else None
        finally:
            release_connection(conn)

    def get_all(self, user_id: int, status: Optional[str] = None) -> list[SavingsGoal]:
        sql = f"SELECT {_COLUMNS} FROM savings_goals WHERE user_id = %s"
        params: list = [user_id]
        if status:
            sql += " AND status = %s"
            params.append(status)
        sql += " ORDER BY target_date ASC;"

        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return [self._row_to_goal(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def update(self, goal: SavingsGoal) -> bool:
        sql = """
            UPDATE savings_goals
            SET name = %s, amount = %s, current_amount = %s, target_date = %s,
                description = %s, status = %s
            WHERE id = %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    goal.name, goal.amount, goal.current_amount, goal.target_date,
                    goal.description, goal.status, goal.id,
                ))
                updated = cur.rowcount > 0
            conn.commit()
            return updated
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update savings goal #{goal.id}: {e}")
            raise
        finally:
            release_connection(conn)

    def delete(self, goal_id: int) -> bool:
        sql = "DELETE FROM savings_goals WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (goal_id,))
                deleted = cur.rowcount > 0
            conn.commit()
            return deleted
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete savings goal #{goal_id}: {e}")
            raise
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_goal(row: tuple) -> SavingsGoal:
        return SavingsGoal(
            id=row[0],
            user_id=row[1],
            name=row[2],
            amount=Decimal(row[3]),
            current_amount=Decimal(row[4]),
            target_date=row[5],
            description=row[6],
            status=row[7],
            created_at=row[8],
        )
