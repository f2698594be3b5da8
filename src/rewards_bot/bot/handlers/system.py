"""数据与日志处理器"""

import logging

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from rewards_bot.bot.decorators import require_admin
from rewards_bot.bot.handlers._helpers import persist, reply
from rewards_bot.core.timezone import format_datetime
from rewards_bot.exceptions import ConfigurationError, SyncError
from rewards_bot.repositories.system_log_repository import get_system_log_repository
from rewards_bot.services.scheduler import get_scheduler_service
from rewards_bot.utils.formatter import format_system_logs

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 20
MAX_LOG_LIMIT = 100
MAX_BACKUP_LIST = 15


@require_admin
async def logs_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """系统日志: /logs [数量]"""
    limit = DEFAULT_LOG_LIMIT
    if context.args:
        try:
            limit = max(1, min(int(context.args[0]), MAX_LOG_LIMIT))
        except ValueError:
            await reply(update, "用法: /logs [数量]")
            return

    logs = get_system_log_repository().recent(limit)
    await reply(update, format_system_logs(logs), markdown=True)


@require_admin
async def backup_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """本地备份: /backup | /backup list | /backup restore <文件名>"""
    backup = get_scheduler_service().backup
    action = context.args[0].lower() if context.args else ""

    if action == "list":
        files = await backup.list_backups()
        if not files:
            await reply(update, "📂 暂无本地备份")
            return
        lines = ["📂 本地备份（新 → 旧）", ""]
        lines.extend(
            f"• {f.name}  {format_datetime(f.modified_at, '%m-%d %H:%M')}  {f.size // 1024}KB"
            for f in files[:MAX_BACKUP_LIST]
        )
        await reply(update, "\n".join(lines))
        return

    if action == "restore":
        if len(context.args) < 2:
            await reply(update, "用法: /backup restore <文件名>")
            return
        try:
            count = await backup.import_backup(context.args[1])
        except SyncError as e:
            await reply(update, f"❌ 恢复失败: {e}")
            return
        await persist()
        await reply(update, f"♻️ 已恢复 {count} 个账号")
        return

    try:
        filename = await backup.export_local()
    except SyncError as e:
        await reply(update, f"❌ 备份失败: {e}")
        return

    await reply(update, f"💾 已备份: {filename}")


@require_admin
async def sync_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """立即上传到云端: /sync <名称>"""
    cloud_sync = get_scheduler_service().cloud_sync

    if not context.args:
        names = [cloud.name for cloud in cloud_sync.config_repo.get().cloud_sync]
        hint = "、".join(names) if names else "未配置"
        await reply(update, f"用法: /sync <名称>\n\n已配置的云端: {hint}")
        return

    name = " ".join(context.args)
    try:
        await cloud_sync.upload(name)
    except (ConfigurationError, SyncError) as e:
        await reply(update, f"❌ 云同步失败: {e}")
        return

    await reply(update, f"☁️ 已上传到 {name}")


logs_handler = CommandHandler("logs", logs_command)
backup_handler = CommandHandler("backup", backup_command)
sync_handler = CommandHandler("sync", sync_command)
