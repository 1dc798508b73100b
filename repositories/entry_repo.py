"""
repositories/entry_repo.py
---------------------------
Data access layer for ledger entries (income and expense records).
All SQL queries related to the `ledger_entries` table live here.

This repository only persists rows. Balance adjustments are issued
explicitly by the ledger service through the Account Store.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from db.connection import get_connection, release_connection, transaction
from models.entry import LedgerEntry
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "id, user_id, type, date, amount, category_id, account_id, label, description, "
    "is_recurring, recurring_pattern, end_date, source_id, last_generated_on, created_at"
)

_INSERT_SQL = """
    INSERT INTO ledger_entries
        (user_id, type, date, amount, category_id, account_id, label, description,
         is_recurring, recurring_pattern, end_date, source_id, last_generated_on)
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
    RETURNING id, created_at;
"""

_STAMP_SQL = "UPDATE ledger_entries SET last_generated_on = %s WHERE id = %s;"


class EntryRepository:
    """Repository for CRUD operations on the ledger_entries table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Insert a new income/expense record.

        Returns:
            The same LedgerEntry with its `id` and `created_at` populated.
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(_INSERT_SQL, self._insert_params(entry))
                entry.id, entry.created_at = cur.fetchone()
            conn.commit()
            logger.info(f"Added {entry.type} #{entry.id} for user {entry.user_id}")
            return entry
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add {entry.type}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, entry_id: int) -> Optional[LedgerEntry]:
        """Fetch one entry by primary key. Ownership is checked by the caller."""
        sql = f"SELECT {_COLUMNS} FROM ledger_entries WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (entry_id,))
                row = cur.fetchone()
                return self._row_to_entry(row) if row else None
        finally:
            release_connection(conn)

    def find(
        self,
        user_id: int,
        entry_type: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        category_id: Optional[int] = None,
        account_id: Optional[int] = None,
    ) -> list[LedgerEntry]:
        """
        Fetch a user's entries, newest first, with optional filters.

        Args:
            user_id: Owner.
            entry_type: 'income' or 'expense'.
            start: Start date (inclusive); applied together with `end`.
            end: End date (inclusive).
            category_id: Restrict to one category.
            account_id: Restrict to one account.
        """
        sql = f"SELECT {_COLUMNS} FROM ledger_entries WHERE user_id = %s"
        params: list = [user_id]
        if entry_type:
            sql += " AND type = %s"
            params.append(entry_type)
        if start and end:
            sql += " AND date BETWEEN %s AND %s"
            params.extend([start, end])
        if category_id:
            sql += " AND category_id = %s"
            params.append(category_id)
        if account_id:
            sql += " AND account_id = %s"
            params.append(account_id)
        sql += " ORDER BY date DESC, id DESC;"

        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return [self._row_to_entry(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def sum_expenses(self, user_id: int, category_id: int, start: date, end: date) -> Decimal:
        """Total expense amount of one category within an inclusive window."""
        sql = """
            SELECT COALESCE(SUM(amount), 0)
            FROM ledger_entries
            WHERE user_id = %s AND type = 'expense' AND category_id = %s
              AND date BETWEEN %s AND %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, category_id, start, end))
                return Decimal(cur.fetchone()[0])
        finally:
            release_connection(conn)

    def get_recurring(self, user_id: int) -> list[LedgerEntry]:
        """A user's entries that the scheduler still regenerates."""
        sql = f"""
            SELECT {_COLUMNS} FROM ledger_entries
            WHERE user_id = %s AND is_recurring = TRUE
            ORDER BY date DESC, id DESC;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return [self._row_to_entry(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def get_recurring_due(self, patterns: Sequence[str], on_date: date) -> list[LedgerEntry]:
        """
        Source entries the scheduler should materialize on `on_date`.

        An entry is due when its pattern is in `patterns`, its own date and
        end date bracket `on_date`, and it has not been handled for this day yet.
        """
        sql = f"""
            SELECT {_COLUMNS} FROM ledger_entries
            WHERE is_recurring = TRUE
              AND recurring_pattern = ANY(%s)
              AND date <= %s
              AND (end_date IS NULL OR end_date >= %s)
              AND (last_generated_on IS NULL OR last_generated_on < %s)
            ORDER BY id ASC;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (list(patterns), on_date, on_date, on_date))
                return [self._row_to_entry(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    # ── UPDATE ────────────────────────────────────────────

    def update(self, entry: LedgerEntry) -> bool:
        """
        Update an existing entry's editable fields (must have id set).

        Returns:
            True if a row was updated, False otherwise.
        """
        sql = """
            UPDATE ledger_entries
            SET date = %s, amount = %s, category_id = %s, account_id = %s, label = %s,
                description = %s, is_recurring = %s, recurring_pattern = %s, end_date = %s,
                last_generated_on = %s
            WHERE id = %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    entry.date, entry.amount, entry.category_id, entry.account_id,
                    entry.label, entry.description, entry.is_recurring,
                    entry.recurring_pattern, entry.end_date, entry.last_generated_on, entry.id,
                ))
                updated = cur.rowcount > 0
            conn.commit()
            return updated
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update entry #{entry.id}: {e}")
            raise
        finally:
            release_connection(conn)

    def add_generated(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Insert the scheduler's copy of a recurring entry and stamp its
        source (`entry.source_id`) with `last_generated_on = entry.date`
        in one transaction.
        """
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(_INSERT_SQL, self._insert_params(entry))
                entry.id, entry.created_at = cur.fetchone()
                cur.execute(_STAMP_SQL, (entry.date, entry.source_id))
        logger.info(f"Generated {entry.type} #{entry.id} from recurring #{entry.source_id}")
        return entry

    def discard_generated(self, entry_id: int, source_id: int, previous: Optional[date]) -> None:
        """Remove a generated copy and put its source's previous stamp back."""
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM ledger_entries WHERE id = %s;", (entry_id,))
                cur.execute(_STAMP_SQL, (previous, source_id))
        logger.info(f"Discarded generated entry #{entry_id} of recurring #{source_id}")

    # ── DELETE ────────────────────────────────────────────

    def delete(self, entry_id: int) -> bool:
        """
        Delete an entry by ID.

        Returns:
            True if a row was deleted, False otherwise.
        """
        sql = "DELETE FROM ledger_entries WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (entry_id,))
                deleted = cur.rowcount > 0
            conn.commit()
            if deleted:
                logger.info(f"Deleted entry #{entry_id}")
            return deleted
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete entry #{entry_id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _insert_params(entry: LedgerEntry) -> tuple:
        return (
            entry.user_id, entry.type, entry.date, entry.amount,
            entry.category_id, entry.account_id, entry.label, entry.description,
            entry.is_recurring, entry.recurring_pattern, entry.end_date,
            entry.source_id, entry.last_generated_on,
        )

    @staticmethod
    def _row_to_entry(row: tuple) -> LedgerEntry:
        """Convert a database row tuple to a LedgerEntry domain object."""
        return LedgerEntry(
            id=row[0],
            user_id=row[1],
            type=row[2],
            date=row[3],
            amount=Decimal(row[4]),
            category_id=row[5],
            account_id=row[6],
            label=row[7],
            description=row[8],
            is_recurring=row[9],
            recurring_pattern=row[10],
            end_date=row[11],
            source_id=row[12],
            last_generated_on=row[13],
            created_at=row[14],
        )
