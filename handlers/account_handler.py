"""
handlers/account_handler.py
----------------------------
Handles account and category commands.
Delegates to AccountService and CategoryService.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import error_text, money, parse_fields, to_int, to_number
from security.auth import authorized_only, current_identity
from security.rate_limiter import rate_limited
from services.account_service import AccountService
from services.category_service import CategoryService
from utils.logger import get_logger

logger = get_logger(__name__)
account_service = AccountService()
category_service = CategoryService()


# ── Accounts ──────────────────────────────────────────────

@authorized_only
@rate_limited
async def accounts_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /accounts - list accounts with balances."""
    identity = current_identity(update)
    result = account_service.list_accounts(identity)
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return
    if not result["data"]:
        await update.message.reply_text("📭 No accounts yet. Add one with /account_add cash Wallet")
        return

    lines = ["🏦 Accounts:\n"]
    for a in result["data"]:
        line = f"  #{a['id']} {a['name']} ({a['group']}): {money(a['amount'], a['base_currency'])}"
        if "converted_amount" in a:
            line += f" ≈ {money(a['converted_amount'], a['display_currency'])}"
        lines.append(line)
    await update.message.reply_text("\n".join(lines))


@authorized_only
@rate_limited
async def account_add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /account_add <group> <name> [amount:<n>] [desc:<text>].

    Example: /account_add bank Main account amount:1500
    """
    positional, fields = parse_fields(context.args)
    if len(positional) < 2:
        await update.message.reply_text(
            "Usage: /account_add <cash|bank|card|savings> <name> amount:<opening balance> desc:<text>"
        )
        return

    identity = current_identity(update)
    result = account_service.create(
        identity,
        group=positional[0].lower(),
        name=" ".join(positional[1:]),
        amount=to_number(fields.get("amount")) or "0",
        description=fields.get("desc"),
    )
    if result["success"]:
        await update.message.reply_text(f"✅ Account created: {result['data']}")
    else:
        await update.message.reply_text(error_text(result))


@authorized_only
@rate_limited
async def account_edit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /account_edit <id> [name:<n>] [group:<g>] [desc:<text>]."""
    positional, fields = parse_fields(context.args)
    account_id = to_int(positional[0]) if positional else None
    if account_id is None or not fields:
        await update.message.reply_text("Usage: /account_edit <id> name:<name> group:<group> desc:<text>")
        return

    identity = current_identity(update)
    result = account_service.update(
        identity, account_id,
        group=fields.get("group", "").lower() or None,
        name=fields.get("name"),
        description=fields.get("desc"),
    )
    if result["success"]:
        await update.message.reply_text(f"✏️ Account updated: {result['data']}")
    else:
        await update.message.reply_text(error_text(result))


@authorized_only
@rate_limited
async def account_delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /account_delete <id> - removes the account and its entries and transfers."""
    account_id = to_int(context.args[0]) if context.args else None
    if account_id is None:
        await update.message.reply_text("Usage: /account_delete <id>")
        return

    result = account_service.delete(current_identity(update), account_id)
    if result["success"]:
        await update.message.reply_text(f"🗑️ {result['message']}")
    else:
        await update.message.reply_text(error_text(result))


# ── Categories ────────────────────────────────────────────

@authorized_only
@rate_limited
async def categories_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /categories [income|expense]."""
    type = context.args[0].lower() if context.args else None
    result = category_service.list_categories(current_identity(update), type)
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return
    if not result["data"]:
        await update.message.reply_text("📭 No categories yet. Add one with /category_add expense Food")
        return

    lines = ["🏷️ Categories:\n"] + [f"  {c}" for c in result["data"]]
    await update.message.reply_text("\n".join(lines))


@authorized_only
@rate_limited
async def category_add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /category_add <income|expense> <name>."""
    if not context.args or len(context.args) < 2:
        await update.message.reply_text("Usage: /category_add <income|expense> <name>")
        return

    result = category_service.create(
        current_identity(update), context.args[0].lower(), " ".join(context.args[1:])
    )
    if result["success"]:
        await update.message.reply_text(f"✅ Category created: {result['data']}")
    else:
        await update.message.reply_text(error_text(result))


@authorized_only
@rate_limited
async def category_edit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /category_edit <id> [name:<n>] [type:<t>]."""
    positional, fields = parse_fields(context.args)
    category_id = to_int(positional[0]) if positional else None
    if category_id is None or not fields:
        await update.message.reply_text("Usage: /category_edit <id> name:<name> type:<income|expense>")
        return

    result = category_service.update(
        current_identity(update), category_id,
        type=fields.get("type", "").lower() or None,
        name=fields.get("name"),
    )
    if result["success"]:
        await update.message.reply_text(f"✏️ Category updated: {result['data']}")
    else:
        await update.message.reply_text(error_text(result))


@authorized_only
@rate_limited
async def category_delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /category_delete <id>."""
    category_id = to_int(context.args[0]) if context.args else None
    if category_id is None:
        await update.message.reply_text("Usage: /category_delete <id>")
        return

    result = category_service.delete(current_identity(update), category_id)
    if result["success"]:
        await update.message.reply_text(f"🗑️ {result['message']}")
    else:
        await update.message.reply_text(error_text(result))
