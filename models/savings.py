"""
models/savings.py
-----------------
Domain model for savings goals.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

SAVINGS_STATUSES = ("In Progress", "Completed", "Abandoned")


@dataclass
class SavingsGoal:
    """A savings target. Progress is tracked by hand and never moves account balances."""
    user_id: int
    name: str
    amount: Decimal
    target_date: date
    current_amount: Decimal = Decimal("0")
    description: Optional[str] = None
    status: str = "In Progress"
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "amount": self.amount,
            "current_amount": self.current_amount,
            "target_date": self.target_date,
            "description": self.description,
            "status": self.status,
            "created_at": self.created_at,
        }
