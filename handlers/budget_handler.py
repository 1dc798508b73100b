"""
handlers/budget_handler.py
---------------------------
Handles budget and savings goal commands.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import error_text, money, parse_fields, to_int, to_number
from security.auth import authorized_only, current_identity
from security.rate_limiter import rate_limited
from services.budget_service import BudgetService
from services.savings_service import SavingsService
from utils.logger import get_logger

logger = get_logger(__name__)
budget_service = BudgetService()
savings_service = SavingsService()


def _budget_line(b: dict) -> str:
    pct = b["percentage_spent"]
    if pct >= 100:
        icon = "🔴"
    elif pct >= 80:
        icon = "🟡"
    else:
        icon = "🟢"
    return (
        f"{icon} #{b['id']} category #{b['category_id']} "
        f"{b['date_from']} → {b['date_to']}: "
        f"{money(b['spent'])} / {money(b['amount'])} ({pct:.1f}%), "
        f"left {money(b['remaining'])}"
    )


# ── Budgets ───────────────────────────────────────────────

@authorized_only
@rate_limited
async def budgets_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /budgets - show budgets with spending.

    Usage:
        /budgets          → all budgets
        /budgets active   → only budgets covering today
        /budgets cat:3    → one category
    """
    positional, fields = parse_fields(context.args)
    result = budget_service.list_budgets(
        current_identity(update),
        active_only=bool(positional) and positional[0].lower() == "active",
        category_id=to_int(fields.get("cat")),
    )
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return
    if not result["data"]:
        await update.message.reply_text(
            "📭 No budgets. Use /budget_add cat:<id> amount:<n> from:<date> to:<date>"
        )
        return

    lines = ["💰 Budgets:\n"] + [_budget_line(b) for b in result["data"]]
    await update.message.reply_text("\n".join(lines))


@authorized_only
@rate_limited
async def budget_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /budget <id> - one budget with its spending."""
    budget_id = to_int(context.args[0]) if context.args else None
    if budget_id is None:
        await update.message.reply_text("Usage: /budget <id>")
        return

    result = budget_service.get(current_identity(update), budget_id)
    if result["success"]:
        await update.message.reply_text(_budget_line(result["data"]))
    else:
        await update.message.reply_text(error_text(result))


@authorized_only
@rate_limited
async def budget_add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /budget_add cat:<id> amount:<n> from:<date> to:<date> [desc:<text>].

    Example: /budget_add cat:3 amount:200 from:2026-01-01 to:2026-01-31
    """
    _, fields = parse_fields(context.args)
    if not {"cat", "amount", "from", "to"} <= fields.keys():
        await update.message.reply_text(
            "Usage: /budget_add cat:<category id> amount:<n> from:<YYYY-MM-DD> to:<YYYY-MM-DD> desc:<text>"
        )
        return

    result = budget_service.create(
        current_identity(update),
        category_id=to_int(fields["cat"]),
        amount=to_number(fields["amount"]),
        date_from=fields["from"],
        date_to=fields["to"],
        description=fields.get("desc"),
    )
    if result["success"]:
        b = result["data"]
        await update.message.reply_text(
            f"✅ Budget #{b.id}: {money(b.amount)} from {b.date_from} to {b.date_to}"
        )
    else:
        await update.message.reply_text(error_text(result))


@authorized_only
@rate_limited
async def budget_edit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /budget_edit <id> [cat:<id>] [amount:<n>] [from:<d>] [to:<d>] [desc:<text>]."""
    positional, fields = parse_fields(context.args)
    budget_id = to_int(positional[0]) if positional else None
    if budget_id is None or not fields:
        await update.message.reply_text(
            "Usage: /budget_edit <id> cat:<id> amount:<n> from:<YYYY-MM-DD> to:<YYYY-MM-DD> desc:<text>"
        )
        return

    result = budget_service.update(
        current_identity(update),
        budget_id,
        category_id=to_int(fields.get("cat")),
        amount=to_number(fields.get("amount")),
        date_from=fields.get("from"),
        date_to=fields.get("to"),
        description=fields.get("desc"),
    )
    if result["success"]:
        await update.message.reply_text(f"✏️ Budget #{budget_id} updated")
    else:
        await update.message.reply_text(error_text(result))


@authorized_only
@rate_limited
async def budget_delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /budget_delete <id>."""
    budget_id = to_int(context.args[0]) if context.args else None
    if budget_id is None:
        await update.message.reply_text("Usage: /budget_delete <id>")
        return

    result = budget_service.delete(current_identity(update), budget_id)
    if result["success"]:
        await update.message.reply_text(f"🗑️ {result['message']}")
    else:
        await update.message.reply_text(error_text(result))


# ── Savings goals ─────────────────────────────────────────

@authorized_only
@rate_limited
async def savings_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /savings [In Progress|Completed|Abandoned]."""
    status = " ".join(context.args) if context.args else None
    result = savings_service.list_goals(current_identity(update), status)
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return
    if not result["data"]:
        await update.message.reply_text("📭 No savings goals. Use /saving_add <name> amount:<n> target:<date>")
        return

    lines = ["🎯 Savings goals:\n"]
    for g in result["data"]:
        lines.append(
            f"  #{g.id} {g.name}: {money(g.current_amount)} / {money(g.amount)} "
            f"by {g.target_date} [{g.status}]"
        )
    await update.message.reply_text("\n".join(lines))


@authorized_only
@rate_limited
async def saving_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /saving <id> - a goal with its progress."""
    goal_id = to_int(context.args[0]) if context.args else None
    if goal_id is None:
        await update.message.reply_text("Usage: /saving <id>")
        return

    result = savings_service.get(current_identity(update), goal_id)
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return

    g = result["data"]
    await update.message.reply_text(
        f"🎯 #{g['id']} {g['name']} [{g['status']}]\n"
        f"  Saved: {money(g['current_amount'])} / {money(g['amount'])} ({g['progress_percentage']:.2f}%)\n"
        f"  Still needed: {money(g['amount_needed'])}\n"
        f"  Days left: {g['days_left']} · Per day: {money(g['daily_savings_required'])}\n"
        f"  {'✅ On track to be reachable' if g['is_achievable'] else '⌛ Target date has passed'}"
    )


@authorized_only
@rate_limited
async def saving_add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /saving_add <name> amount:<n> target:<YYYY-MM-DD> [desc:<text>]."""
    positional, fields = parse_fields(context.args)
    if not positional or "amount" not in fields or "target" not in fields:
        await update.message.reply_text("Usage: /saving_add <name> amount:<n> target:<YYYY-MM-DD> desc:<text>")
        return

    result = savings_service.create(
        current_identity(update),
        name=" ".join(positional),
        amount=to_number(fields["amount"]),
        target_date=fields["target"],
        description=fields.get("desc"),
    )
    if result["success"]:
        g = result["data"]
        await update.message.reply_text(f"✅ Savings goal #{g.id} '{g.name}': {money(g.amount)} by {g.target_date}")
    else:
        await update.message.reply_text(error_text(result))


@authorized_only
@rate_limited
async def saving_edit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /saving_edit <id> [name:<n>] [amount:<n>] [target:<d>] [status:<s>] [desc:<text>]."""
    positional, fields = parse_fields(context.args)
    goal_id = to_int(positional[0]) if positional else None
    if goal_id is None or not fields:
        await update.message.reply_text(
            "Usage: /saving_edit <id> name:<n> amount:<n> target:<YYYY-MM-DD> status:<status> desc:<text>"
        )
        return

    result = savings_service.update(
        current_identity(update),
        goal_id,
        name=fields.get("name"),
        amount=to_number(fields.get("amount")),
        target_date=fields.get("target"),
        description=fields.get("desc"),
        status=fields.get("status"),
    )
    if result["success"]:
        await update.message.reply_text(f"✏️ Savings goal #{goal_id} updated")
    else:
        await update.message.reply_text(error_text(result))


@authorized_only
@rate_limited
async def saving_progress_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /saving_progress <id> <current amount>."""
    goal_id = to_int(context.args[0]) if context.args else None
    if goal_id is None or len(context.args) < 2:
        await update.message.reply_text("Usage: /saving_progress <id> <amount saved so far>")
        return

    result = savings_service.update_progress(current_identity(update), goal_id, to_number(context.args[1]))
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return

    g = result["data"]
    done = "🎉 Goal reached!" if g["status"] == "Completed" else f"{g['progress_percentage']:.2f}% done"
    await update.message.reply_text(f"🎯 {g['name']}: {money(g['current_amount'])} / {money(g['amount'])} · {done}")


@authorized_only
@rate_limited
async def saving_delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /saving_delete <id>."""
    goal_id = to_int(context.args[0]) if context.args else None
    if goal_id is None:
        await update.message.reply_text("Usage: /saving_delete <id>")
        return

    result = savings_service.delete(current_identity(update), goal_id)
    if result["success"]:
        await update.message.reply_text(f"🗑️ {result['message']}")
    else:
        await update.message.reply_text(error_text(result))
