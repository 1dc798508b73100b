"""
security/auth.py
-----------------
Authentication middleware for the Telegram bot.
Blocks any user not in the allowed whitelist, guards admin commands and
turns the Telegram sender into the Identity the services trust.
"""

from functools import wraps
from typing import Callable

from telegram import Update
from telegram.ext import ContextTypes

from config import ADMIN_USER_IDS, ALLOWED_USER_IDS, DEFAULT_CURRENCY
from models.user import Identity
from repositories.user_repo import UserRepository
from utils.logger import get_logger

logger = get_logger(__name__)


def authorized_only(func: Callable):
    """
    Decorator that restricts a handler to whitelisted users only.

    Usage:
        @authorized_only
        async def my_handler(update, context):
            ...

    Behavior:
        - If ALLOWED_USER_IDS is empty, ALL users are allowed (dev mode).
        - If the list is set, only those users (and admins) can use the bot.
        - Unauthorized attempts are logged.
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        # If no whitelist configured, allow all (dev mode)
        if not ALLOWED_USER_IDS or user.id in ALLOWED_USER_IDS or user.id in ADMIN_USER_IDS:
            return await func(update, context, *args, **kwargs)

        logger.warning(
            f"🚫 Unauthorized access attempt: user_id={user.id}, "
            f"username={user.username}, name={user.first_name}"
        )
        await update.message.reply_text("⛔ Sorry, this bot is private.")

    return wrapper


def admin_only(func: Callable):
    """Decorator that restricts a handler to ADMIN_USER_IDS."""
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return
        if user.id not in ADMIN_USER_IDS:
            logger.warning(f"🚫 Non-admin {user.id} tried an admin command")
            await update.message.reply_text("⛔ Admin access required.")
            return
        return await func(update, context, *args, **kwargs)

    return wrapper


def current_identity(update: Update, users: UserRepository | None = None) -> Identity:
    """
    Register the sender if needed and return their Identity.

    The admin role follows ADMIN_USER_IDS on every call; the currency is
    whatever the user last switched to.
    """
    user = update.effective_user
    role = "admin" if user.id in ADMIN_USER_IDS else "user"
    record = (users or UserRepository()).ensure_user(
        user.id, user.first_name, role=role, currency=DEFAULT_CURRENCY
    )
    return Identity(user_id=record["telegram_id"], role=record["role"], currency=record["currency"])
