"""
repositories/category_repo.py
------------------------------
Data access layer for income/expense categories.
"""

from typing import Optional

from psycopg2 import errors

from db.connection import get_connection, release_connection
from models.category import Category
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, user_id, type, name, created_at"


class CategoryRepository:
    """Repository for CRUD operations on the categories table."""

    def add(self, category: Category) -> Optional[Category]:
        """
        Insert a new category.

        Returns:
            The category with `id` populated, or None when the user already
            has a category with the same type and name.
        """
        sql = "INSERT INTO categories (user_id, type, name) VALUES (%s, %s, %s) RETURNING id, created_at;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (category.user_id, category.type, category.name))
                category.id, category.created_at = cur.fetchone()
            conn.commit()
            logger.info(f"Added {category.type} category #{category.id} for user {category.user_id}")
            return category
        except errors.UniqueViolation:
            conn.rollback()
            return None
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add category: {e}")
            raise
        finally:
            release_connection(conn)

    def get_by_id(self, category_id: int) -> Optional[Category]:
        sql = f"SELECT {_COLUMNS} FROM categories WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (category_id,))
                row = cur.fetchone()
                return self._row_to_category(row) if row else None
        finally:
            release_connection(conn)

    def find(self, user_id: int, type: str, name: str) -> Optional[Category]:
        """Look up a category by its unique (user, type, name) key."""
        sql = f"SELECT {_COLUMNS} FROM categories WHERE user_id = %s AND type = %s AND name = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, type, name))
                row = cur.fetchone()
                return self._row_to_category(row) if row else None
        finally:
            release_connection(conn)

    def get_all(self, user_id: int, type: Optional[str] = None) -> list[Category]:
        sql = f"SELECT {_COLUMNS} FROM categories WHERE user_id = %s"
        params: list = [user_id]
        if type:
            sql += " AND type = %s"
            params.append(type)
        sql += " ORDER BY type, name;"

        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return [self._row_to_category(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def update(self, category: Category) -> Optional[bool]:
        """
        Rename or retype a category.

        Returns:
            True if updated, False if it no longer exists, None on a
            (user, type, name) collision.
        """
        sql = "UPDATE categories SET type = %s, name = %s WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (category.type, category.name, category.id))
                updated = cur.rowcount > 0
            conn.commit()
            return updated
        except errors.UniqueViolation:
            conn.rollback()
            return None
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update category #{category.id}: {e}")
            raise
        finally:
            release_connection(conn)

    def is_referenced(self, category_id: int) -> bool:
        """True while any ledger entry or budget points at the category."""
        sql = """
            SELECT EXISTS (SELECT 1 FROM ledger_entries WHERE category_id = %s)
                OR EXISTS (SELECT 1 FROM budgets WHERE category_id = %s);
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (category_id, category_id))
                return bool(cur.fetchone()[0])
        finally:
            release_connection(conn)

    def delete(self, category_id: int) -> bool:
        sql = "DELETE FROM categories WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (category_id,))
                deleted = cur.rowcount > 0
            conn.commit()
            if deleted:
                logger.info(f"Deleted category #{category_id}")
            return deleted
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete category #{category_id}: {e}")
            raise
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_category(row: tuple) -> Category:
        return Category(id=row[0], user_id=row[1], type=row[2], name=row[3], created_at=row[4])
