"""
services/validation.py
-----------------------
Field checks shared by the services. Every failure is a ValidationFailed.
"""

from datetime import date
from decimal import Decimal, InvalidOperation

from services.errors import ValidationFailed
from utils.dates import parse_date

MIN_AMOUNT = Decimal("0.01")
MAX_DESCRIPTION_LENGTH = 500


def parse_amount(value, field: str = "Amount") -> Decimal:
    """Coerce to a two-decimal amount of at least 0.01."""
    if value is None or value == "":
        raise ValidationFailed(f"{field} is required")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationFailed(f"{field} must be a number")
    if not amount.is_finite() or amount < MIN_AMOUNT:
        raise ValidationFailed(f"{field} must be at least {MIN_AMOUNT}")
    return amount.quantize(Decimal("0.01"))


def parse_day(value, field: str = "Date") -> date | None:
    try:
        return parse_date(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{field} must be in YYYY-MM-DD format")


def require_id(value, field: str) -> int:
    if value is None or value == "":
        raise ValidationFailed(f"{field} is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{field} must be a number")


def check_description(description: str | None) -> str | None:
    if description and len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationFailed(f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")
    return description
