"""
security/auth.py
-----------------
Access control for both operator surfaces:
    - the Telegram console (whitelist of user ids),
    - the HTTP cron trigger (shared bearer secret).
"""

import secrets
from functools import wraps
from typing import Callable, Iterable, Optional

from telegram import Update
from telegram.ext import ContextTypes

from config import ALLOWED_USER_IDS
from utils.logger import get_logger

logger = get_logger(__name__)


def is_authorized_user(user_id: int, allowed: Iterable[int] = ALLOWED_USER_IDS) -> bool:
    """An empty whitelist means dev mode: everyone is allowed."""
    allowed = list(allowed)
    return not allowed or user_id in allowed


def verify_cron_secret(authorization: Optional[str], secret: str) -> bool:
    """
    Check an ``Authorization: Bearer <secret>`` header.

    An unset secret rejects every call, so the trigger is never left open.
    """
    if not secret or not authorization:
        return False
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return False
    return secrets.compare_digest(token.strip().encode(), secret.encode())


def authorized_only(func: Callable):
    """
    Decorator that restricts a bot handler to whitelisted operators.

    Usage:
        @authorized_only
        async def my_handler(update, context):
            ...
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if not is_authorized_user(user.id):
            logger.warning(
                f"🚫 Unauthorized access attempt: user_id={user.id}, "
                f"username={user.username}, name={user.first_name}"
            )
            await update.message.reply_text("⛔ Este bot es privado.")
            return

        return await func(update, context, *args, **kwargs)

    return wrapper
