"""
handlers/transfer_handler.py
-----------------------------
Handles transfer commands.
Delegates to TransferService.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import error_text, parse_fields, to_int, to_number
from security.auth import authorized_only, current_identity
from security.rate_limiter import rate_limited
from services.transfer_service import TransferService
from utils.logger import get_logger

logger = get_logger(__name__)
transfer_service = TransferService()


@authorized_only
@rate_limited
async def transfer_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /transfer <amount> from:<id> to:<id> [date:<d>] [desc:<text>].

    Example: /transfer 200 from:1 to:2 desc:Savings
    """
    positional, fields = parse_fields(context.args)
    if not positional or "from" not in fields or "to" not in fields:
        await update.message.reply_text(
            "Usage: /transfer <amount> from:<account id> to:<account id> date:<YYYY-MM-DD> desc:<text>"
        )
        return

    result = transfer_service.create(
        current_identity(update),
        from_account_id=to_int(fields["from"]),
        to_account_id=to_int(fields["to"]),
        amount=to_number(positional[0]),
        transfer_date=fields.get("date"),
        description=fields.get("desc"),
    )
    if result["success"]:
        await update.message.reply_text(f"🔄 Transfer recorded {result['data']}")
    else:
        await update.message.reply_text(error_text(result))


@authorized_only
@rate_limited
async def transfers_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /transfers [from:<date> to:<date>] [acc:<id>]."""
    _, fields = parse_fields(context.args)
    result = transfer_service.list_transfers(
        current_identity(update),
        start=fields.get("from"),
        end=fields.get("to"),
        account_id=to_int(fields.get("acc")),
    )
    if not result["success"]:
        await update.message.reply_text(error_text(result))
        return
    if not result["data"]:
        await update.message.reply_text("📭 No transfers found.")
        return

    lines = ["🔄 Transfers:\n"] + [f"  {t}" for t in result["data"]]
    await update.message.reply_text("\n".join(lines))


@authorized_only
@rate_limited
async def transfer_delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /transfer_delete <id> - reverse and remove a transfer."""
    transfer_id = to_int(context.args[0]) if context.args else None
    if transfer_id is None:
        await update.message.reply_text("Usage: /transfer_delete <id>")
        return

    result = transfer_service.delete(current_identity(update), transfer_id)
    if result["success"]:
        await update.message.reply_text(f"🗑️ {result['message']}")
    else:
        await update.message.reply_text(error_text(result))
