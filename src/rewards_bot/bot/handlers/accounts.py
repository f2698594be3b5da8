"""账号处理器"""

import logging

from telegram import Update
from telegram.error import BadRequest
from telegram.ext import CommandHandler, ContextTypes

from rewards_bot.bot.decorators import require_admin
from rewards_bot.bot.handlers._helpers import get_account_manager, persist, reply, resolve_account
from rewards_bot.exceptions import ConfigurationError, CredentialInputError, RemoteError, TokenError
from rewards_bot.services.history import aggregate_by_day
from rewards_bot.services.scheduler import get_scheduler_service
from rewards_bot.utils.formatter import format_account_block, format_account_line, format_history

logger = logging.getLogger(__name__)


@require_admin
async def accounts_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """账号列表"""
    accounts = get_account_manager().account_repo.list()
    if not accounts:
        await reply(update, "📝 还没有账号，发送 /add 添加")
        return

    total = sum(account.total_points for account in accounts)
    lines = [f"👥 账号 ({len(accounts)}) · 积分总池 {total:,}", ""]
    lines.extend(format_account_line(account) for account in accounts)
    await reply(update, "\n".join(lines), markdown=True)


@require_admin
async def add_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """添加账号: /add <Token 或回调 URL> [名称]"""
    manager = get_account_manager()

    if not context.args:
        await reply(update, f"用法: /add <Token 或回调 URL> [名称]\n\n登录链接:\n{manager.authorize_url()}")
        return

    # 凭证消息不保留在聊天记录中
    try:
        await update.effective_message.delete()
    except BadRequest as e:
        logger.debug(f"删除凭证消息失败: {e}")

    text = context.args[0]
    name = " ".join(context.args[1:]) or None

    try:
        account = await manager.add_account(text, name)
    except CredentialInputError as e:
        await update.effective_chat.send_message(f"❌ {e}")
        return
    except (TokenError, RemoteError) as e:
        await update.effective_chat.send_message(f"❌ 授权码兑换失败: {e}")
        return

    await persist()
    await update.effective_chat.send_message(f"✅ 已添加账号: {account.name}\nID: {account.id}")


@require_admin
async def remove_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """删除账号"""
    manager = get_account_manager()
    account = await resolve_account(update, context, manager, "/remove <账号>")
    if account is None:
        return
    if account.is_running:
        await reply(update, "⏳ 账号正在运行，请稍后再删除")
        return

    manager.remove_account(account.id)
    await persist()
    await reply(update, f"🗑 已删除账号: {account.name}")


@require_admin
async def toggle_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """启用/禁用账号"""
    manager = get_account_manager()
    account = await resolve_account(update, context, manager, "/toggle <账号>")
    if account is None:
        return

    updated = manager.toggle_enabled(account.id)
    await persist()
    await reply(update, f"{'🟢 已启用' if updated.enabled else '⚪ 已禁用'}: {updated.name}")


@require_admin
async def cron_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """设置账号独立定时: /cron <账号> <表达式|off>"""
    manager = get_account_manager()
    account = await resolve_account(update, context, manager, "/cron <账号> <表达式|off>")
    if account is None:
        return

    expression = " ".join(context.args[1:]).strip()
    if not expression:
        current = account.cron_expression or "未设置（跟随全局任务）"
        await reply(update, f"⏰ {account.name}: {current}")
        return

    try:
        updated = manager.set_cron(account.id, None if expression.lower() == "off" else expression)
    except ConfigurationError as e:
        await reply(update, f"❌ {e}")
        return

    await persist()
    if updated.cron_expression:
        await reply(update, f"⏰ {updated.name} 独立定时: {updated.cron_expression}")
    else:
        await reply(update, f"⏰ {updated.name} 已清除独立定时")


@require_admin
async def ignore_risk_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """切换忽略风控"""
    manager = get_account_manager()
    account = await resolve_account(update, context, manager, "/ignorerisk <账号>")
    if account is None:
        return

    updated = manager.set_ignore_risk(account.id, not account.ignore_risk)
    await persist()
    state = "开启（仅封禁信号会中止任务）" if updated.ignore_risk else "关闭"
    await reply(update, f"🛡 {updated.name} 忽略风控: {state}")


@require_admin
async def refresh_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """刷新账号状态"""
    manager = get_account_manager()
    account = await resolve_account(update, context, manager, "/refresh <账号>")
    if account is None:
        return

    updated = await get_scheduler_service().runner.refresh_account(account.id)
    if updated is None:
        await reply(update, "⏳ 账号正在运行中")
        return

    await persist()
    await reply(update, format_account_block(updated))


@require_admin
async def history_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """积分历史"""
    manager = get_account_manager()
    account = await resolve_account(update, context, manager, "/history <账号>")
    if account is None:
        return

    await reply(update, format_history(account, aggregate_by_day(account.point_history)), markdown=True)


accounts_handler = CommandHandler("accounts", accounts_command)
add_handler = CommandHandler("add", add_command)
remove_handler = CommandHandler("remove", remove_command)
toggle_handler = CommandHandler("toggle", toggle_command)
cron_handler = CommandHandler("cron", cron_command)
ignore_risk_handler = CommandHandler("ignorerisk", ignore_risk_command)
refresh_handler = CommandHandler("refresh", refresh_command)
history_handler = CommandHandler("history", history_command)
