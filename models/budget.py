"""
models/budget.py
----------------
Domain model for spending budgets.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Budget:
    """
    A spending cap for one expense category over an inclusive date window.

    No two budgets of the same user and category may have overlapping windows.
    """
    user_id: int
    category_id: int
    amount: Decimal
    date_from: date
    date_to: date
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def covers(self, day: date) -> bool:
        """True when `day` falls inside the budget window."""
        return self.date_from <= day <= self.date_to

    def overlaps(self, date_from: date, date_to: date) -> bool:
        return self.date_from <= date_to and self.date_to >= date_from

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "category_id": self.category_id,
            "amount": self.amount,
            "date_from": self.date_from,
            "date_to": self.date_to,
            "description": self.description,
            "created_at": self.created_at,
        }
