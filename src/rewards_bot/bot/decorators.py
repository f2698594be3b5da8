"""Bot handler decorators"""

import logging
from functools import wraps

from telegram import Update
from telegram.ext import ContextTypes

from rewards_bot.config.settings import get_settings

logger = logging.getLogger(__name__)


def require_admin(func):
    """
    Decorator: Validate admin permission before running handler

    Example:
        @require_admin
        async def admin_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
            # Admin permission is guaranteed here
            pass
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if user is None or user.id not in get_settings().admin_ids:
            logger.warning(f"User {user.id if user else None} attempted to access admin feature without permission")
            if update.effective_message:
                await update.effective_message.reply_text("❌ 没有权限")
            return None

        return await func(update, context, *args, **kwargs)
    return wrapper
