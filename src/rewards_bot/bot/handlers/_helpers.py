"""Bot handler helper functions"""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from rewards_bot.models.account import Account
from rewards_bot.services.account_manager import AccountManager
from rewards_bot.services.scheduler import get_scheduler_service

logger = logging.getLogger(__name__)


async def reply(update: Update, text: str, markdown: bool = False) -> None:
    """回复当前消息"""
    if not update.effective_message:
        return
    await update.effective_message.reply_text(
        text,
        parse_mode="Markdown" if markdown else None,
        disable_web_page_preview=True,
    )


async def resolve_account(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    manager: AccountManager,
    usage: str,
) -> Account | None:
    """
    从命令第一个参数解析账号（完整 ID、ID 前缀或名称）

    找不到时回复提示并返回 None
    """
    if not context.args:
        await reply(update, f"用法: {usage}")
        return None

    account = manager.find(context.args[0])
    if account is None:
        await reply(update, f"❌ 找不到账号: {context.args[0]}")
    return account


def get_account_manager() -> AccountManager:
    """账号管理服务（共享调度器的闲置定时器）"""
    return AccountManager(idle_timers=get_scheduler_service().runner.idle_timers)


async def persist() -> None:
    """修改后立即落盘"""
    state = get_scheduler_service().state
    if state is not None:
        await state.save()
