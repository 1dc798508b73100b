"""
models/category.py
------------------
Domain model for income/expense categories.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

CATEGORY_TYPES = ("income", "expense")


@dataclass
class Category:
    """A typed label owned by one user. `(user_id, type, name)` is unique."""
    user_id: int
    type: str  # 'income' | 'expense'
    name: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __str__(self) -> str:
        return f"#{self.id} {self.name} ({self.type})"
