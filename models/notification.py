"""
models/notification.py
----------------------
Budget notifications. Produced after an expense is recorded, never stored.
"""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Notification:
    """
    Attributes:
        type: 'warning' or 'alert'.
        title: Short heading.
        message: Human-readable text carrying the percentage.
        user_id: Recipient.
        percentage: Share of the budget used (warning) or exceeded (alert).
    """
    type: str
    title: str
    message: str
    user_id: int
    percentage: float

    def to_dict(self) -> dict:
        return asdict(self)
