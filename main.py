"""
main.py
-------
Entry point for the finance ledger Telegram bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Configure and start the Telegram bot with all handlers.
    - Schedule the daily recurring-entry scan.
"""

from datetime import time as dt_time

from telegram import BotCommand
from telegram.ext import Application, CommandHandler, ContextTypes

from config import RECURRING_RUN_HOUR, TELEGRAM_BOT_TOKEN
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from handlers.account_handler import (
    account_add_command,
    account_delete_command,
    account_edit_command,
    accounts_command,
    categories_command,
    category_add_command,
    category_delete_command,
    category_edit_command,
)
from handlers.budget_handler import (
    budget_add_command,
    budget_command,
    budget_delete_command,
    budget_edit_command,
    budgets_command,
    saving_add_command,
    saving_command,
    saving_delete_command,
    saving_edit_command,
    saving_progress_command,
    savings_command,
)
from handlers.entry_handler import (
    delete_command,
    edit_command,
    entries_command,
    expense_command,
    income_command,
    recurring_command,
    recurring_stop_command,
)
from handlers.error_handler import error_handler
from handlers.export_handler import (
    balances_chart_command,
    chart_command,
    export_csv_command,
    export_excel_command,
)
from handlers.report_handler import (
    admin_expense_command,
    admin_income_command,
    admin_user_command,
    admin_users_command,
    summary_command,
)
from handlers.start_handler import (
    currency_command,
    help_command,
    myid_command,
    rates_command,
    start_command,
)
from handlers.transfer_handler import (
    transfer_command,
    transfer_delete_command,
    transfers_command,
)
from services.recurring_service import RecurringService
from utils.logger import get_logger

logger = get_logger(__name__)

COMMANDS = {
    "start": start_command,
    "help": help_command,
    "myid": myid_command,
    "currency": currency_command,
    "rates": rates_command,
    "accounts": accounts_command,
    "account_add": account_add_command,
    "account_edit": account_edit_command,
    "account_delete": account_delete_command,
    "categories": categories_command,
    "category_add": category_add_command,
    "category_edit": category_edit_command,
    "category_delete": category_delete_command,
    "expense": expense_command,
    "income": income_command,
    "entries": entries_command,
    "edit": edit_command,
    "delete": delete_command,
    "recurring": recurring_command,
    "recurring_stop": recurring_stop_command,
    "transfer": transfer_command,
    "transfers": transfers_command,
    "transfer_delete": transfer_delete_command,
    "budgets": budgets_command,
    "budget": budget_command,
    "budget_add": budget_add_command,
    "budget_edit": budget_edit_command,
    "budget_delete": budget_delete_command,
    "savings": savings_command,
    "saving": saving_command,
    "saving_add": saving_add_command,
    "saving_edit": saving_edit_command,
    "saving_progress": saving_progress_command,
    "saving_delete": saving_delete_command,
    "summary": summary_command,
    "chart": chart_command,
    "balances_chart": balances_chart_command,
    "export_csv": export_csv_command,
    "export_excel": export_excel_command,
    "admin_income": admin_income_command,
    "admin_expense": admin_expense_command,
    "admin_user": admin_user_command,
    "admin_users": admin_users_command,
}


async def run_recurring(context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Scheduled job: materialize due recurring entries and deliver any
    budget notifications they triggered to their owners.
    Runs daily at RECURRING_RUN_HOUR.
    """
    result = RecurringService().run_due()

    for notification in result.notifications:
        try:
            await context.bot.send_message(
                chat_id=notification.user_id,
                text=f"🔔 {notification.title}\n{notification.message}",
            )
        except Exception as e:
            logger.error(f"Failed to deliver budget notification to {notification.user_id}: {e}")


async def set_bot_commands(application: Application) -> None:
    """Register bot commands menu in Telegram on startup."""
    commands = [
        BotCommand("start", "Start the bot"),
        BotCommand("help", "Show all commands"),
        BotCommand("accounts", "List accounts"),
        BotCommand("categories", "List categories"),
        BotCommand("expense", "Record an expense"),
        BotCommand("income", "Record an income"),
        BotCommand("entries", "List entries"),
        BotCommand("transfer", "Move money between accounts"),
        BotCommand("budgets", "Budgets and spending"),
        BotCommand("savings", "Savings goals"),
        BotCommand("recurring", "Recurring entries"),
        BotCommand("summary", "Monthly summary"),
        BotCommand("chart", "Expenses chart"),
        BotCommand("export_excel", "Export month as Excel"),
        BotCommand("currency", "Change currency"),
        BotCommand("myid", "Your Telegram id"),
    ]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands menu registered successfully.")


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = Application.builder().token(TELEGRAM_BOT_TOKEN).post_init(set_bot_commands).build()

    # ── 3. Register command handlers ──────────────────────
    for name, callback in COMMANDS.items():
        app.add_handler(CommandHandler(name, callback))
    app.add_error_handler(error_handler)

    # ── 4. Schedule jobs ──────────────────────────────────
    job_queue = app.job_queue
    if job_queue:
        job_queue.run_daily(
            run_recurring,
            time=dt_time(hour=RECURRING_RUN_HOUR, minute=0),
            name="recurring_entries",
        )
        logger.info(f"Scheduled recurring entries scan ({RECURRING_RUN_HOUR:02d}:00)")

    # ── 5. Start polling ──────────────────────────────────
    logger.info("🚀 Finance ledger bot is running! Press Ctrl+C to stop.")
    app.run_polling(drop_pending_updates=True, allowed_updates=["message"])

    # ── 6. Cleanup on shutdown ────────────────────────────
    close_pool()
    logger.info("Finance ledger bot stopped.")


if __name__ == "__main__":
    main()
