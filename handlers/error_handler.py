"""
handlers/error_handler.py
--------------------------
Application-wide error handler. Anything a service did not turn into a
failure result ends up here: it is logged with its traceback and the user
gets an opaque reply.
"""

from telegram import Update
from telegram.ext import ContextTypes

from utils.logger import get_logger

logger = get_logger(__name__)

GENERIC_REPLY = "❌ Something went wrong. Please try again later."


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Unhandled error while processing an update", exc_info=context.error)
    if isinstance(update, Update) and update.effective_message:
        await update.effective_message.reply_text(GENERIC_REPLY)
