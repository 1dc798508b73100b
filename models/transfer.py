"""
models/transfer.py
------------------
Domain model for transfers between two accounts of the same user.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Transfer:
    """A move of `amount` from one account to another. Immutable once created."""
    user_id: int
    amount: Decimal
    from_account_id: int
    to_account_id: int
    date: date = field(default_factory=date.today)
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "amount": self.amount,
            "from_account_id": self.from_account_id,
            "to_account_id": self.to_account_id,
            "date": self.date,
            "description": self.description,
            "created_at": self.created_at,
        }

    def __str__(self) -> str:
        return f"#{self.id} {self.amount:.2f}: #{self.from_account_id} → #{self.to_account_id} | {self.date}"
