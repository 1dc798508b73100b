"""
repositories/user_repo.py
--------------------------
Data access layer for user records.
"""

from typing import Optional

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, telegram_id, first_name, role, currency, created_at"


class UserRepository:
    """Repository for CRUD operations on the users table."""

    def ensure_user(self, telegram_id: int, first_name: Optional[str] = None,
                    role: Optional[str] = None, currency: str = "EUR") -> dict:
        """
        Insert a user if they don't exist, or return the existing record.
        Uses PostgreSQL's ON CONFLICT (upsert) for atomicity.

        Args:
            telegram_id: The Telegram user ID.
            first_name: Optional first name from Telegram.
            role: Role to enforce ('admin' for configured admins); None keeps the stored one.
            currency: Currency for brand-new users.

        Returns:
            User dict: {'id', 'telegram_id', 'first_name', 'role', 'currency', 'created_at'}.
        """
        sql = f"""
            INSERT INTO users (telegram_id, first_name, role, currency)
            VALUES (%s, %s, COALESCE(%s, 'user'), %s)
            ON CONFLICT (telegram_id) DO UPDATE
                SET first_name = COALESCE(EXCLUDED.first_name, users.first_name),
                    role = COALESCE(%s, users.role)
            RETURNING {_COLUMNS};
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (telegram_id, first_name, role, currency, role))
                row = cur.fetchone()
            conn.commit()
            return self._row_to_user(row)
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to ensure user {telegram_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def get_by_telegram_id(self, telegram_id: int) -> Optional[dict]:
        """Fetch a user by their Telegram ID, or None."""
        sql = f"SELECT {_COLUMNS} FROM users WHERE telegram_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (telegram_id,))
                row = cur.fetchone()
                return self._row_to_user(row) if row else None
        finally:
            release_connection(conn)

    def get_all(self) -> list[dict]:
        """All registered users, oldest first."""
        sql = f"SELECT {_COLUMNS} FROM users ORDER BY created_at ASC;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql)
                return [self._row_to_user(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_user(row: tuple) -> dict:
        return {
            "id": row[0],
            "telegram_id": row[1],
            "first_name": row[2],
            "role": row[3],
            "currency": row[4],
            "created_at": row[5],
        }
