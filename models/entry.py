"""
models/entry.py
---------------
Domain model for ledger entries (income and expense records).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

ENTRY_TYPES = ("income", "expense")
RECURRING_PATTERNS = ("daily", "weekly", "monthly")


@dataclass
class LedgerEntry:
    """
    Represents a single income or expense record.

    Each entry has exactly one signed effect on its account's balance:
    `+amount` for income, `-amount` for expense.

    Attributes:
        id: Database primary key (None for new records).
        user_id: Telegram user ID of the owner.
        type: Either 'income' or 'expense'.
        amount: Positive amount, at least 0.01.
        category_id: Category of the same type, owned by the user.
        account_id: Account whose balance this entry moves.
        date: Date of the transaction.
        label: Optional short tag.
        description: Optional human-readable note.
        is_recurring: Whether the scheduler should regenerate this entry.
        recurring_pattern: 'daily' | 'weekly' | 'monthly' when recurring.
        end_date: Last day on which the scheduler may regenerate it.
        source_id: Recurring entry this one was generated from.
        last_generated_on: Last scheduler tick that handled this source.
        created_at: Timestamp when the record was created.
    """
    user_id: int
    type: str  # 'income' | 'expense'
    amount: Decimal
    category_id: int
    account_id: int
    date: date = field(default_factory=date.today)
    label: Optional[str] = None
    description: Optional[str] = None
    is_recurring: bool = False
    recurring_pattern: Optional[str] = None
    end_date: Optional[date] = None
    source_id: Optional[int] = None
    last_generated_on: Optional[date] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def is_expense(self) -> bool:
        """Returns True if this is an expense record."""
        return self.type == "expense"

    def is_income(self) -> bool:
        """Returns True if this is an income record."""
        return self.type == "income"

    @property
    def signed_amount(self) -> Decimal:
        """The delta this entry applies to its account."""
        return -self.amount if self.is_expense() else self.amount

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "amount": self.amount,
            "category_id": self.category_id,
            "account_id": self.account_id,
            "date": self.date,
            "label": self.label,
            "description": self.description,
            "is_recurring": self.is_recurring,
            "recurring_pattern": self.recurring_pattern,
            "end_date": self.end_date,
            "source_id": self.source_id,
            "created_at": self.created_at,
        }

    def __str__(self) -> str:
        sign = "-" if self.is_expense() else "+"
        return f"#{self.id} {sign}{self.amount:.2f} | account #{self.account_id} | {self.date}"
