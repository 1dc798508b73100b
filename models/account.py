"""
models/account.py
-----------------
Domain model for monetary accounts.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

ACCOUNT_GROUPS = ("cash", "bank", "card", "savings")


@dataclass
class Account:
    """
    A place where money is held.

    Attributes:
        id: Database primary key (None for new records).
        user_id: Telegram user ID of the owner.
        group: One of ACCOUNT_GROUPS.
        name: Display name.
        amount: Signed running balance, denominated in `base_currency`.
        base_currency: ISO code the balance is stored in.
        description: Optional free text.
        created_at: Timestamp when the record was created.
    """
    user_id: int
    group: str
    name: str
    amount: Decimal = Decimal("0")
    base_currency: str = "EUR"
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "group": self.group,
            "name": self.name,
            "amount": self.amount,
            "base_currency": self.base_currency,
            "description": self.description,
            "created_at": self.created_at,
        }

    def __str__(self) -> str:
        return f"#{self.id} {self.name} ({self.group}): {self.amount:.2f} {self.base_currency}"
