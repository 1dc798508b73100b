"""
handlers/start_handler.py
--------------------------
Handles /start, /help, /myid and the currency commands.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import error_text
from security.auth import authorized_only, current_identity
from security.rate_limiter import rate_limited
from services.currency_service import CurrencyService
from utils.logger import get_logger

logger = get_logger(__name__)
currency_service = CurrencyService()

HELP_TEXT = """
🤖 *Finance Ledger*

*Accounts & categories*
/accounts - list accounts
/account\\_add <group> <name> amount:<n> desc:<text>
/account\\_edit <id> name:<n> group:<g> desc:<text>
/account\\_delete <id>
/categories [income|expense]
/category\\_add <income|expense> <name>
/category\\_edit <id> name:<n> type:<t>
/category\\_delete <id>

*Entries*
/expense <amount> cat:<id> acc:<id> date:<YYYY-MM-DD> label:<l> desc:<d> repeat:<daily|weekly|monthly> until:<date>
/income <amount> cat:<id> acc:<id> ...
/entries [income|expense] from:<date> to:<date> cat:<id> acc:<id>
/edit <id> amount:<n> cat:<id> acc:<id> date:<d> label:<l> desc:<d>
/delete <id>
/recurring - recurring entries
/recurring\\_stop <id>

*Transfers*
/transfer <amount> from:<id> to:<id> desc:<d>
/transfers
/transfer\\_delete <id>

*Budgets & savings*
/budgets [active]
/budget <id>
/budget\\_add cat:<id> amount:<n> from:<date> to:<date>
/budget\\_edit <id> amount:<n> from:<date> to:<date>
/budget\\_delete <id>
/savings [status]
/saving <id>
/saving\\_add <name> amount:<n> target:<date>
/saving\\_progress <id> <amount>
/saving\\_delete <id>

*Reports*
/summary from:<date> to:<date>
/chart [month] [year]
/balances\\_chart
/export\\_csv [year month]
/export\\_excel [year month]

*Settings*
/currency <CODE> - switch currency and convert all balances
/rates [CODE]
/myid
"""


@authorized_only
@rate_limited
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command - register user and show welcome message."""
    identity = current_identity(update)
    user = update.effective_user
    logger.info(f"User {user.id} ({user.first_name}) started the bot.")

    await update.message.reply_text(
        f"Hi {user.first_name}! 👋\n"
        f"I keep track of your accounts, income and expenses.\n"
        f"Your currency is {identity.currency}.\n\n"
        f"Send /help to see every command.",
    )


@authorized_only
@rate_limited
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command - show all available commands."""
    await update.message.reply_text(HELP_TEXT, parse_mode="Markdown")


@authorized_only
async def myid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /myid command - show user's Telegram ID for whitelisting."""
    user = update.effective_user
    await update.message.reply_text(
        f"🆔 Your id: `{user.id}`\n"
        f"Add it to `ALLOWED_USER_IDS` in `.env` to lock the bot down.",
        parse_mode="Markdown",
    )


@authorized_only
@rate_limited
async def currency_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /currency <CODE> - change currency and convert every balance.
    Without an argument, show the current currency.
    """
    identity = current_identity(update)
    if not context.args:
        await update.message.reply_text(
            f"💱 Your currency is {identity.currency}.\nUsage: /currency USD"
        )
        return

    result = currency_service.change_currency(identity, context.args[0])
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return

    data = result["data"]
    await update.message.reply_text(
        f"💱 {result['message']}\n"
        f"Rate: {data['exchange_rate']} · Accounts converted: {data['accounts_converted']}"
    )


@authorized_only
@rate_limited
async def rates_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /rates [CODE] - show exchange rates for a base currency."""
    identity = current_identity(update)
    base = context.args[0] if context.args else identity.currency

    result = currency_service.rates(base)
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return

    rates = result["data"]["rates"]
    shown = ["USD", "EUR", "GBP", "JPY", "CHF", "CAD", "AUD", "EGP", "INR", "CNY"]
    lines = [f"💱 Rates for 1 {result['data']['base']}:"]
    for code in shown:
        if code in rates and code != result["data"]["base"]:
            lines.append(f"  {code}: {rates[code]}")
    await update.message.reply_text("\n".join(lines))
