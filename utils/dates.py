"""
utils/dates.py
--------------
Calendar helpers shared by services and handlers.
"""

import calendar
from datetime import date, datetime

from dateutil.relativedelta import relativedelta


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month."""
    start = date(year, month, 1)
    return start, start + relativedelta(months=1, days=-1)


def current_month() -> tuple[date, date]:
    today = date.today()
    return month_bounds(today.year, today.month)


def trend_start(today: date, months: int = 6) -> date:
    """First day of the month `months - 1` months before `today`'s month."""
    return date(today.year, today.month, 1) - relativedelta(months=months - 1)


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def parse_date(value: str | date | None) -> date | None:
    """Accept a date, an ISO 'YYYY-MM-DD' string or None."""
    if value is None or isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()
