"""
services/recurring_service.py
------------------------------
Recurrence scheduler: one periodic scan that materializes due recurring
entries, plus the user-facing list/stop operations.

A source entry is handled at most once per day: its copy and its
`last_generated_on` stamp are written in one transaction, and the scan
only picks sources whose stamp is older than the tick date. Restarts and
double ticks therefore never duplicate entries.
"""

from dataclasses import dataclass, field
from datetime import date

from config import RECURRING_MONTH_DAY, RECURRING_WEEKDAY
from models.entry import LedgerEntry
from models.notification import Notification
from models.user import Identity
from repositories.entry_repo import EntryRepository
from services.errors import Forbidden, NotFound, ok, operation
from services.ledger_service import LedgerService
from utils.dates import days_in_month
from utils.logger import get_logger

logger = get_logger(__name__)


def due_patterns(day: date) -> list[str]:
    """
    Patterns that fire on `day`.

    daily fires every day, weekly on RECURRING_WEEKDAY, monthly on
    RECURRING_MONTH_DAY (or the month's last day when it is shorter).
    """
    patterns = ["daily"]
    if day.weekday() == RECURRING_WEEKDAY:
        patterns.append("weekly")
    if day.day == min(RECURRING_MONTH_DAY, days_in_month(day)):
        patterns.append("monthly")
    return patterns


@dataclass
class TickResult:
    """What one scheduler tick did."""
    day: date
    generated: list[LedgerEntry] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)


class RecurringService:
    """Materializes recurring entries and lets users manage them."""

    def __init__(self, entry_repo: EntryRepository | None = None,
                 ledger: LedgerService | None = None):
        self.entry_repo = entry_repo or EntryRepository()
        self.ledger = ledger or LedgerService(entry_repo=self.entry_repo)

    def run_due(self, on_date: date | None = None) -> TickResult:
        """
        Materialize every recurring entry due on `on_date` (default today).

        Each copy goes through the ledger creation path, so it adjusts its
        account and runs the budget check. A source that fails is logged
        and left for the next tick.
        """
        day = on_date or date.today()
        result = TickResult(day=day)
        sources = self.entry_repo.get_recurring_due(due_patterns(day), day)

        for source in sources:
            try:
                copy, notifications = self.ledger.materialize(source, day)
            except Exception as e:
                logger.error(f"Recurring entry #{source.id} skipped on {day}: {e}")
                result.failed.append(source.id)
                continue
            result.generated.append(copy)
            result.notifications.extend(notifications)

        logger.info(
            f"Recurring tick {day}: {len(sources)} due, "
            f"{len(result.generated)} generated, {len(result.failed)} failed"
        )
        return result

    @operation
    def list_recurring(self, identity: Identity) -> dict:
        return ok(self.entry_repo.get_recurring(identity.user_id))

    @operation
    def stop(self, identity: Identity, entry_id: int) -> dict:
        """Stop future generation. Entries already generated stay."""
        entry = self.entry_repo.get_by_id(entry_id)
        if entry is None:
            raise NotFound(f"Entry #{entry_id} not found")
        if not identity.can_access(entry.user_id):
            raise Forbidden("Not authorized to access this entry")
        if not entry.is_recurring:
            return ok(entry, message=f"Entry #{entry_id} is not recurring")

        entry.is_recurring = False
        entry.recurring_pattern = None
        entry.end_date = None
        if not self.entry_repo.update(entry):
            raise NotFound(f"Entry #{entry_id} not found")
        logger.info(f"Recurrence stopped for entry #{entry_id}")
        return ok(entry, message=f"Entry #{entry_id} will no longer repeat")
