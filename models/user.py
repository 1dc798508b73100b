"""
models/user.py
--------------
The verified caller of an operation.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """
    Who is asking. Built by the auth layer from a verified Telegram user and
    trusted by every service without re-verification.
    """
    user_id: int
    role: str = "user"  # 'user' | 'admin'
    currency: str = "EUR"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def can_access(self, owner_id: int) -> bool:
        """Owners and admins may read or change a record."""
        return self.user_id == owner_id or self.is_admin
