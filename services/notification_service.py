"""
services/notification_service.py
---------------------------------
Budget threshold monitor. A pure function: it reads numbers and returns
notifications, it never touches storage or balances.
"""

from decimal import Decimal

from config import BUDGET_WARNING_PERCENT
from models.notification import Notification


def _percent(spent: Decimal, budget_cap: Decimal) -> Decimal:
    return Decimal(spent) / Decimal(budget_cap) * 100


def check_budget_thresholds(
    category_name: str,
    spent: Decimal,
    budget_cap: Decimal,
    user_id: int,
) -> list[Notification]:
    """
    Compare what was spent in a budget window against its cap.

    Rules:
        - warning when BUDGET_WARNING_PERCENT <= used% < 100
        - alert when used% >= 100, carrying the overage percentage

    Args:
        category_name: Shown in the message.
        spent: Total expenses of the category inside the budget window.
        budget_cap: Budget amount. A non-positive cap yields nothing.
        user_id: Recipient of the notifications.

    Returns:
        Zero or one Notification.
    """
    if Decimal(budget_cap) <= 0:
        return []

    pct = _percent(spent, budget_cap)
    notifications = []

    if BUDGET_WARNING_PERCENT <= pct < 100:
        used = round(float(pct), 1)
        notifications.append(Notification(
            type="warning",
            title="Budget Warning",
            message=f"You've used {used:.1f}% of your budget for {category_name}",
            user_id=user_id,
            percentage=used,
        ))

    if pct >= 100:
        over = round(float(pct - 100), 1)
        notifications.append(Notification(
            type="alert",
            title="Budget Exceeded",
            message=f"You've exceeded your budget for {category_name} by {over:.1f}%",
            user_id=user_id,
            percentage=over,
        ))

    return notifications
