"""
handlers/report_handler.py
---------------------------
Handles /summary and the admin report commands.
Delegates to ReportService.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import error_text, money, parse_fields, to_int
from security.auth import admin_only, authorized_only, current_identity
from security.rate_limiter import rate_limited
from services.report_service import ReportService
from utils.logger import get_logger

logger = get_logger(__name__)
report_service = ReportService()


def _breakdown(title: str, rows: list[dict], key: str, limit: int = 5) -> list[str]:
    if not rows:
        return []
    lines = [f"\n{title}"]
    for r in rows[:limit]:
        lines.append(f"  • {r[key] or '-'}: {money(r['amount'])} ({r['percentage']:.1f}%)")
    return lines


def _trend(title: str, rows: list[dict]) -> list[str]:
    if not rows:
        return []
    return [f"\n{title}"] + [f"  {r['period']}: {money(r['amount'])}" for r in rows]


@authorized_only
@rate_limited
async def summary_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /summary [from:<date> to:<date>] - income/expense summary.
    Defaults to the current month.
    """
    _, fields = parse_fields(context.args)
    identity = current_identity(update)
    result = report_service.summary(identity, fields.get("from"), fields.get("to"))
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return

    d = result["data"]
    cur = identity.currency
    lines = [
        f"📊 Summary {d['start']} → {d['end']}\n",
        f"💰 Income: {money(d['total_income'], cur)}",
        f"💸 Expenses: {money(d['total_expense'], cur)}",
        f"{'📈' if d['net'] >= 0 else '📉'} Net: {money(d['net'], cur)}",
    ]
    lines += _breakdown("🏷️ Top expense categories:", d["expense_categories"], "category")
    lines += _breakdown("🏷️ Top income categories:", d["income_categories"], "category")
    lines += _trend("🗓️ Monthly expenses:", d["expense_trend"])
    await update.message.reply_text("\n".join(lines))


async def _admin_totals(update: Update, context: ContextTypes.DEFAULT_TYPE, entry_type: str) -> None:
    _, fields = parse_fields(context.args)
    result = report_service.admin_summary(
        current_identity(update), entry_type, fields.get("from"), fields.get("to")
    )
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return

    d = result["data"]
    lines = [f"🛡️ All users, {entry_type} {d['start']} → {d['end']}", f"Total: {money(d['total'])}"]
    lines += _breakdown("👥 By user:", d["user_breakdown"], "first_name", limit=10)
    lines += _breakdown("🏷️ By category:", d["category_breakdown"], "category", limit=10)
    lines += _trend("🗓️ By month:", d["monthly_trend"])
    await update.message.reply_text("\n".join(lines))


@authorized_only
@admin_only
async def admin_income_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /admin_income [from:<date> to:<date>]."""
    await _admin_totals(update, context, "income")


@authorized_only
@admin_only
async def admin_expense_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /admin_expense [from:<date> to:<date>]."""
    await _admin_totals(update, context, "expense")


@authorized_only
@admin_only
async def admin_user_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /admin_user <telegram id> [from:<date> to:<date>]."""
    positional, fields = parse_fields(context.args)
    user_id = to_int(positional[0]) if positional else None
    if user_id is None:
        await update.message.reply_text("Usage: /admin_user <telegram id> from:<date> to:<date>")
        return

    result = report_service.user_financial_summary(
        current_identity(update), user_id, fields.get("from"), fields.get("to")
    )
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return

    d = result["data"]
    s = d["summary"]
    lines = [
        f"👤 {d['user']['first_name'] or d['user']['user_id']} · {d['start']} → {d['end']}\n",
        f"💰 Income: {money(s['total_income'])}",
        f"💸 Expenses: {money(s['total_expense'])}",
        f"Net: {money(s['net'])} · Savings rate: {s['savings_rate']:.1f}%",
        f"🏦 Balance across accounts: {money(s['total_balance'])}",
    ]
    lines += _breakdown("🏷️ Top expense categories:", d["top_expense_categories"], "category")
    lines += _breakdown("🏷️ Top income categories:", d["top_income_categories"], "category")
    await update.message.reply_text("\n".join(lines))


@authorized_only
@admin_only
async def admin_users_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /admin_users - every user's snapshot for the current month."""
    result = report_service.users_snapshot(current_identity(update))
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return

    lines = ["👥 Users this month:\n"]
    for u in result["data"]:
        lines.append(
            f"  {u['user_id']} {u['first_name'] or ''} ({u['role']}, {u['currency']}): "
            f"+{money(u['income'])} / -{money(u['expense'])} · balance {money(u['balance'])}"
        )
    await update.message.reply_text("\n".join(lines))
