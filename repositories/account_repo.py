"""
repositories/account_repo.py
-----------------------------
Data access layer for accounts.

Balances are never written with a read-modify-write cycle: `adjust` and
`move` push the arithmetic into the UPDATE statement itself, and
`convert_all` re-denominates every account of a user in one transaction.
"""

from decimal import Decimal
from typing import Optional

from psycopg2 import errors

from db.connection import get_connection, release_connection, transaction
from models.account import Account
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, user_id, grp, name, amount, base_currency, description, created_at"

# Outcomes of AccountRepository.move()
MOVE_OK = "ok"
MOVE_MISSING = "missing"
MOVE_INSUFFICIENT = "insufficient"


class AccountRepository:
    """Repository for the accounts table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, account: Account) -> Account:
        """Insert a new account and populate its `id` and `created_at`."""
        sql = """
            INSERT INTO accounts (user_id, grp, name, amount, base_currency, description)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    account.user_id, account.group, account.name,
                    account.amount, account.base_currency, account.description,
                ))
                account.id, account.created_at = cur.fetchone()
            conn.commit()
            logger.info(f"Added account #{account.id} for user {account.user_id}")
            return account
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add account: {e}")
            raise
        finally:
            release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, account_id: int) -> Optional[Account]:
        """Fetch one account by primary key. Ownership is checked by the caller."""
        sql = f"SELECT {_COLUMNS} FROM accounts WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (account_id,))
                row = cur.fetchone()
                return self._row_to_account(row) if row else None
        finally:
            release_connection(conn)

    def get_all(self, user_id: int) -> list[Account]:
        """All accounts of a user, ordered by group then name."""
        sql = f"SELECT {_COLUMNS} FROM accounts WHERE user_id = %s ORDER BY grp, name;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return [self._row_to_account(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    # ── UPDATE ────────────────────────────────────────────

    def update_details(self, account: Account) -> bool:
        """Update name, group and description. The balance is left alone."""
        sql = "UPDATE accounts SET grp = %s, name = %s, description = %s WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (account.group, account.name, account.description, account.id))
                updated = cur.rowcount > 0
            conn.commit()
            return updated
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update account #{account.id}: {e}")
            raise
        finally:
            release_connection(conn)

    def adjust(self, account_id: int, delta: Decimal) -> Optional[Decimal]:
        """
        Atomically add `delta` to an account balance.

        Returns:
            The new balance, or None if the account does not exist.
        """
        sql = "UPDATE accounts SET amount = amount + %s WHERE id = %s RETURNING amount;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (delta, account_id))
                row = cur.fetchone()
            conn.commit()
            if row:
                logger.info(f"Adjusted account #{account_id} by {delta}")
            return row[0] if row else None
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to adjust account #{account_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def move(self, from_id: int, to_id: int, amount: Decimal, require_funds: bool = True) -> str:
        """
        Move `amount` from one account to another in a single transaction.

        Both rows are locked in id order before the funds check, so the
        check and the two writes see the same committed balances and
        concurrent moves over the same pair cannot deadlock.

        Returns:
            MOVE_OK, MOVE_MISSING (either row absent) or
            MOVE_INSUFFICIENT (source balance below `amount`).
            Nothing is written unless the result is MOVE_OK.
        """
        lock_sql = "SELECT id, amount FROM accounts WHERE id IN (%s, %s) ORDER BY id FOR UPDATE;"
        update_sql = "UPDATE accounts SET amount = amount + %s WHERE id = %s;"
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(lock_sql, (from_id, to_id))
                balances = dict(cur.fetchall())
                if from_id not in balances or to_id not in balances:
                    return MOVE_MISSING
                if require_funds and balances[from_id] < amount:
                    return MOVE_INSUFFICIENT
                cur.execute(update_sql, (-amount, from_id))
                cur.execute(update_sql, (amount, to_id))
        logger.info(f"Moved {amount} from account #{from_id} to #{to_id}")
        return MOVE_OK

    def convert_all(self, user_id: int, to_currency: str, rate: Decimal) -> int:
        """
        Re-denominate every account of a user and record the user's new
        currency, all in one transaction.

        Returns:
            Number of accounts converted.
        """
        accounts_sql = """
            UPDATE accounts
            SET amount = ROUND(amount * CAST(%s AS NUMERIC), 2), base_currency = %s
            WHERE user_id = %s;
        """
        user_sql = "UPDATE users SET currency = %s WHERE telegram_id = %s;"
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(accounts_sql, (rate, to_currency, user_id))
                converted = cur.rowcount
                cur.execute(user_sql, (to_currency, user_id))
        logger.info(f"Converted {converted} accounts of user {user_id} to {to_currency} at {rate}")
        return converted

    # ── DELETE ────────────────────────────────────────────

    def has_transfers(self, account_id: int) -> bool:
        """True while any transfer uses the account on either leg."""
        sql = """
            SELECT EXISTS (
                SELECT 1 FROM transfers WHERE from_account_id = %s OR to_account_id = %s
            );
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (account_id, account_id))
                return bool(cur.fetchone()[0])
        finally:
            release_connection(conn)

    def delete(self, account_id: int) -> Optional[bool]:
        """
        Delete an account. Its entries cascade; transfers block the delete.

        Returns:
            True if deleted, False if absent, None if a transfer still
            references the account.
        """
        sql = "DELETE FROM accounts WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (account_id,))
                deleted = cur.rowcount > 0
            conn.commit()
            if deleted:
                logger.info(f"Deleted account #{account_id}")
            return deleted
        except errors.ForeignKeyViolation:
            conn.rollback()
            return None
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete account #{account_id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_account(row: tuple) -> Account:
        """Convert a database row tuple to an Account domain object."""
        return Account(
            id=row[0],
            user_id=row[1],
            group=row[2],
            name=row[3],
            amount=Decimal(row[4]),
            base_currency=row[5],
            description=row[6],
            created_at=row[7],
        )
