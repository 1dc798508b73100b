"""
repositories/transfer_repo.py
------------------------------
Data access layer for transfers between accounts.
Balance legs are applied separately through AccountRepository.move().
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from db.connection import get_connection, release_connection
from models.transfer import Transfer
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, user_id, date, amount, from_account_id, to_account_id, description, created_at"


class TransferRepository:
    """Repository for the transfers table. Transfers are never updated."""

    def add(self, transfer: Transfer) -> Transfer:
        sql = """
            INSERT INTO transfers (user_id, date, amount, from_account_id, to_account_id, description)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    transfer.user_id, transfer.date, transfer.amount,
                    transfer.from_account_id, transfer.to_account_id, transfer.description,
                ))
                transfer.id, transfer.created_at = cur.fetchone()
            conn.commit()
            logger.info(f"Added transfer #{transfer.id} for user {transfer.user_id}")
            return transfer
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add transfer: {e}")
            raise
        finally:
            release_connection(conn)

    def get_by_id(self, transfer_id: int) -> Optional[Transfer]:
        sql = f"SELECT {_COLUMNS} FROM transfers WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (transfer_id,))
                row = cur.fetchone()
                return self._row_to_transfer(row) if row else None
        finally:
            release_connection(conn)

    def find(
        self,
        user_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> list[Transfer]:
        """A user's transfers, newest first. `account_id` matches either leg."""
        sql = f"SELECT {_COLUMNS} FROM transfers WHERE user_id = %s"
        params: list = [user_id]
        if start and end:
            sql += " AND date BETWEEN %s AND %s"
            params.extend([start, end])
        if account_id:
            sql += " AND (from_account_id = %s OR to_account_id = %s)"
            params.extend([account_id, account_id])
        sql += " ORDER BY date DESC, id DESC;"

        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return [self._row_to_transfer(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def delete(self, transfer_id: int) -> bool:
        sql = "DELETE FROM transfers WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (transfer_id,))
                deleted = cur.rowcount > 0
            conn.commit()
            if deleted:
                logger.info(f"Deleted transfer #{transfer_id}")
            return deleted
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete transfer #{transfer_id}: {e}")
            raise
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_transfer(row: tuple) -> Transfer:
        return Transfer(
            id=row[0],
            user_id=row[1],
            date=row[2],
            amount=Decimal(row[3]),
            from_account_id=row[4],
            to_account_id=row[5],
            description=row[6],
            created_at=row[7],
        )
