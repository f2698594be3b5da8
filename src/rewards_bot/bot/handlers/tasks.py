"""任务与定时器处理器"""

import logging

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from rewards_bot.bot.decorators import require_admin
from rewards_bot.bot.handlers._helpers import get_account_manager, persist, reply
from rewards_bot.config.constants import LogSource
from rewards_bot.services.scheduler import (
    BACKUP_TIMER_ID,
    CLOUD_TIMER_PREFIX,
    GLOBAL_TIMER_ID,
    get_scheduler_service,
)
from rewards_bot.utils.formatter import format_timers

logger = logging.getLogger(__name__)


def _resolve_timer_id(key: str) -> str:
    """内置定时器原样返回，其余按账号 ID/前缀/名称解析"""
    if key in (GLOBAL_TIMER_ID, BACKUP_TIMER_ID) or key.startswith(CLOUD_TIMER_PREFIX):
        return key
    account = get_account_manager().find(key)
    return account.id if account else key


@require_admin
async def run_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """执行任务: /run [账号]"""
    scheduler = get_scheduler_service()

    if not context.args:
        if scheduler.batch_running:
            await reply(update, "⏳ 批量任务正在运行中")
            return
        targets = scheduler.select_batch_targets()
        if not targets:
            await reply(update, "📭 没有待执行的账号（已禁用、风控或今日已完成）")
            return

        context.application.create_task(scheduler.run_batch(LogSource.USER))
        await reply(update, f"🚀 已开始批量执行 {len(targets)} 个账号，完成后推送汇总")
        return

    account = get_account_manager().find(context.args[0])
    if account is None:
        await reply(update, f"❌ 找不到账号: {context.args[0]}")
        return
    if account.is_running:
        await reply(update, f"⏳ {account.name} 正在运行中")
        return

    context.application.create_task(scheduler.run_single(account.id, LogSource.USER))
    await reply(update, f"🚀 已开始执行: {account.name}")


@require_admin
async def stop_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """中断批量任务"""
    if get_scheduler_service().stop():
        await reply(update, "🛑 已请求停止，当前账号完成后终止")
    else:
        await reply(update, "没有正在运行的批量任务")


@require_admin
async def timers_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """定时器概览，带 ID 参数时切换开关"""
    scheduler = get_scheduler_service()

    if context.args:
        timer_id = _resolve_timer_id(context.args[0])
        enabled = scheduler.toggle_entry(timer_id)
        if enabled is None:
            await reply(update, f"❌ 找不到定时器: {context.args[0]}")
            return
        await persist()
        await reply(update, f"⏰ 定时器 {timer_id} 已{'启用' if enabled else '停用'}")
        return

    await reply(update, format_timers(scheduler.list_timers()), markdown=True)


@require_admin
async def reset_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """清空定时器的上次运行时间"""
    if not context.args:
        await reply(update, "用法: /reset <ID>")
        return

    timer_id = _resolve_timer_id(context.args[0])
    if not get_scheduler_service().reset_entry(timer_id):
        await reply(update, f"❌ 找不到定时器: {context.args[0]}")
        return

    await persist()
    await reply(update, f"🔄 定时器 {timer_id} 已重置")


run_handler = CommandHandler("run", run_command)
stop_handler = CommandHandler("stop", stop_command)
timers_handler = CommandHandler("timers", timers_command)
reset_handler = CommandHandler("reset", reset_command)
