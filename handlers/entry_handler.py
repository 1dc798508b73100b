"""
handlers/entry_handler.py
--------------------------
Handles income/expense commands.
Delegates all logic to LedgerService and RecurringService.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import error_text, money, parse_fields, to_int, to_number
from security.auth import authorized_only, current_identity
from security.rate_limiter import rate_limited
from services.ledger_service import LedgerService
from services.recurring_service import RecurringService
from utils.logger import get_logger

logger = get_logger(__name__)
ledger_service = LedgerService()
recurring_service = RecurringService(ledger=ledger_service)

_ENTRY_USAGE = (
    "Usage: /{cmd} <amount> cat:<category id> acc:<account id>\n"
    "Optional: date:<YYYY-MM-DD> label:<label> desc:<text> "
    "repeat:<daily|weekly|monthly> until:<YYYY-MM-DD>\n"
    "Example: /{cmd} 12.50 cat:3 acc:1 desc:Lunch"
)


def notification_lines(notifications: list[dict]) -> list[str]:
    icons = {"warning": "🟡", "alert": "🔴"}
    return [f"{icons.get(n['type'], '🔔')} {n['title']}: {n['message']}" for n in notifications]


async def _create(update: Update, context: ContextTypes.DEFAULT_TYPE, entry_type: str) -> None:
    positional, fields = parse_fields(context.args)
    if not positional or "cat" not in fields or "acc" not in fields:
        await update.message.reply_text(_ENTRY_USAGE.format(cmd=entry_type))
        return

    identity = current_identity(update)
    result = ledger_service.create_entry(
        identity,
        entry_type,
        amount=to_number(positional[0]),
        category_id=to_int(fields["cat"]),
        account_id=to_int(fields["acc"]),
        entry_date=fields.get("date"),
        label=fields.get("label"),
        description=fields.get("desc"),
        is_recurring="repeat" in fields,
        recurring_pattern=fields.get("repeat", "").lower() or None,
        end_date=fields.get("until"),
    )
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return

    entry = result["data"]
    icon = "💸" if entry.is_expense() else "💰"
    lines = [f"{icon} Recorded {entry_type} {entry}"]
    if entry.is_recurring:
        lines.append(f"🔁 Repeats {entry.recurring_pattern}" + (f" until {entry.end_date}" if entry.end_date else ""))
    lines += notification_lines(result.get("notifications", []))
    await update.message.reply_text("\n".join(lines))


@authorized_only
@rate_limited
async def expense_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /expense <amount> cat:<id> acc:<id> ... - record an expense."""
    await _create(update, context, "expense")


@authorized_only
@rate_limited
async def income_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /income <amount> cat:<id> acc:<id> ... - record an income."""
    await _create(update, context, "income")


@authorized_only
@rate_limited
async def entries_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /entries - list entries, newest first.

    Usage:
        /entries
        /entries expense from:2026-01-01 to:2026-01-31
        /entries cat:3
    """
    positional, fields = parse_fields(context.args)
    identity = current_identity(update)
    result = ledger_service.list_entries(
        identity,
        entry_type=positional[0].lower() if positional else None,
        start=fields.get("from"),
        end=fields.get("to"),
        category_id=to_int(fields.get("cat")),
        account_id=to_int(fields.get("acc")),
    )
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return

    entries = result["data"]
    if not entries:
        await update.message.reply_text("📭 No entries found.")
        return

    income = sum((e.amount for e in entries if e.is_income()), start=0)
    expense = sum((e.amount for e in entries if e.is_expense()), start=0)
    lines = ["📒 Entries:\n"]
    for e in entries[:30]:
        note = f" {e.label or ''} {e.description or ''}".rstrip()
        lines.append(f"  {e}{note}")
    if len(entries) > 30:
        lines.append(f"  ... and {len(entries) - 30} more")
    lines.append(f"\n💰 Income: {money(income)}  💸 Expenses: {money(expense)}")
    await update.message.reply_text("\n".join(lines))


@authorized_only
@rate_limited
async def edit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /edit command - edit an existing entry.

    Format: /edit <id> amount:<n> cat:<id> acc:<id> date:<d> label:<l> desc:<d>
    At least one field is required.
    """
    positional, fields = parse_fields(context.args)
    entry_id = to_int(positional[0]) if positional else None
    if entry_id is None or not fields:
        await update.message.reply_text(
            "Usage: /edit <id> amount:<n> cat:<id> acc:<id> date:<YYYY-MM-DD> label:<l> desc:<text>"
        )
        return

    result = ledger_service.update(
        current_identity(update),
        entry_id,
        amount=to_number(fields.get("amount")),
        category_id=to_int(fields.get("cat")),
        account_id=to_int(fields.get("acc")),
        entry_date=fields.get("date"),
        label=fields.get("label"),
        description=fields.get("desc"),
    )
    if result["success"]:
        await update.message.reply_text(f"✏️ Updated {result['data']}")
    else:
        await update.message.reply_text(error_text(result))


@authorized_only
@rate_limited
async def delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /delete <id> command - delete an entry and revert its balance effect.
    Usage: /delete 5
    """
    entry_id = to_int(context.args[0]) if context.args else None
    if entry_id is None:
        await update.message.reply_text("Usage: /delete <entry id>\nExample: /delete 5")
        return

    result = ledger_service.delete(current_identity(update), entry_id)
    if result["success"]:
        await update.message.reply_text(f"🗑️ {result['message']}")
    else:
        await update.message.reply_text(error_text(result))


# ── Recurring ─────────────────────────────────────────────

@authorized_only
@rate_limited
async def recurring_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /recurring - list entries that repeat."""
    result = recurring_service.list_recurring(current_identity(update))
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return
    if not result["data"]:
        await update.message.reply_text("📭 No recurring entries. Add repeat:monthly to /expense or /income.")
        return

    lines = ["🔁 Recurring entries:\n"]
    for e in result["data"]:
        until = f" until {e.end_date}" if e.end_date else ""
        lines.append(f"  {e} ({e.recurring_pattern}{until})")
    await update.message.reply_text("\n".join(lines))


@authorized_only
@rate_limited
async def recurring_stop_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /recurring_stop <id> - stop an entry from repeating."""
    entry_id = to_int(context.args[0]) if context.args else None
    if entry_id is None:
        await update.message.reply_text("Usage: /recurring_stop <entry id>")
        return

    result = recurring_service.stop(current_identity(update), entry_id)
    if result["success"]:
        await update.message.reply_text(f"⏹️ {result['message']}")
    else:
        await update.message.reply_text(error_text(result))
