"""
handlers/export_handler.py
---------------------------
Handles data export and chart commands.
Delegates to ExportService and ChartService.
"""

from datetime import date

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import to_int
from security.auth import authorized_only, current_identity
from security.rate_limiter import rate_limited
from services.chart_service import ChartService
from services.export_service import ExportService
from utils.logger import get_logger

logger = get_logger(__name__)
export_service = ExportService()
chart_service = ChartService()


def _year_month(args: list[str] | None) -> tuple[int, int] | None:
    """`[year month]` arguments, defaulting to the current month."""
    today = date.today()
    if not args or len(args) < 2:
        return today.year, today.month
    year, month = to_int(args[0]), to_int(args[1])
    if year is None or month is None or not 1 <= month <= 12:
        return None
    return year, month


@authorized_only
@rate_limited
async def export_csv_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /export_csv command - send a month's entries as CSV.
    Optional: /export_csv 2026 1 (for January 2026).
    """
    period = _year_month(context.args)
    if period is None:
        await update.message.reply_text("Usage: /export_csv [year month]\nExample: /export_csv 2026 1")
        return
    year, month = period

    await update.message.reply_text("📄 Preparing CSV...")
    buffer = export_service.export_month_csv(update.effective_user.id, year, month)
    await update.message.reply_document(
        document=buffer,
        filename=f"ledger_{year}_{month:02d}.csv",
        caption=f"📊 Entries for {month:02d}/{year} - CSV",
    )


@authorized_only
@rate_limited
async def export_excel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /export_excel command - send a month's entries as Excel.
    Optional: /export_excel 2026 1 (for January 2026).
    """
    period = _year_month(context.args)
    if period is None:
        await update.message.reply_text("Usage: /export_excel [year month]\nExample: /export_excel 2026 1")
        return
    year, month = period

    await update.message.reply_text("📊 Preparing Excel file...")
    buffer = export_service.export_month_excel(update.effective_user.id, year, month)
    await update.message.reply_document(
        document=buffer,
        filename=f"ledger_{year}_{month:02d}.xlsx",
        caption=f"📊 Entries for {month:02d}/{year} - Excel",
    )


@authorized_only
@rate_limited
async def chart_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /chart command - send a pie chart of monthly expenses.

    Usage:
        /chart         → current month
        /chart 1       → January current year
        /chart 12 2025 → December 2025
    """
    args = context.args or []
    month = to_int(args[0]) if args else None
    year = to_int(args[1]) if len(args) >= 2 else None
    if (args and month is None) or (month is not None and not 1 <= month <= 12):
        await update.message.reply_text("Usage: /chart [month] [year]")
        return

    identity = current_identity(update)
    buf = chart_service.generate_monthly_pie(identity.user_id, identity.currency, year, month)
    if buf:
        await update.message.reply_photo(photo=buf, caption="📊 Expenses by category")
    else:
        await update.message.reply_text("📭 No expenses in that period.")


@authorized_only
@rate_limited
async def balances_chart_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /balances_chart - bar chart of account balances."""
    buf = chart_service.generate_balances_bar(update.effective_user.id)
    if buf:
        await update.message.reply_photo(photo=buf, caption="🏦 Account balances")
    else:
        await update.message.reply_text("📭 No accounts yet.")
