"""Bot 应用实例"""

import logging

from telegram.ext import Application

from rewards_bot.bot.handlers import (
    start_handler,
    help_handler,
    accounts_handler,
    add_handler,
    remove_handler,
    toggle_handler,
    cron_handler,
    ignore_risk_handler,
    refresh_handler,
    history_handler,
    run_handler,
    stop_handler,
    timers_handler,
    reset_handler,
    logs_handler,
    backup_handler,
    sync_handler,
)
from rewards_bot.config.constants import LogSource, LogType
from rewards_bot.config.settings import get_settings
from rewards_bot.repositories.system_log_repository import get_system_log_repository
from rewards_bot.services.scheduler import get_scheduler_service
from rewards_bot.tasks.scheduler import register_jobs

logger = logging.getLogger(__name__)


def create_app() -> Application:
    """创建 Bot 应用实例"""
    settings = get_settings()

    # 创建 Application
    builder = Application.builder().token(settings.bot_token)
    if settings.telegram_proxy_url:
        builder = builder.proxy(settings.telegram_proxy_url).get_updates_proxy(settings.telegram_proxy_url)
    app = builder.build()

    # 注册命令处理器
    for handler in (
        start_handler,
        help_handler,
        accounts_handler,
        add_handler,
        remove_handler,
        toggle_handler,
        cron_handler,
        ignore_risk_handler,
        refresh_handler,
        history_handler,
        run_handler,
        stop_handler,
        timers_handler,
        reset_handler,
        logs_handler,
        backup_handler,
        sync_handler,
    ):
        app.add_handler(handler)

    # 注册错误处理器
    app.add_error_handler(error_handler)

    # post_init 回调：加载状态后注册定时任务
    async def post_init(application: Application) -> None:
        scheduler = get_scheduler_service()
        count = await scheduler.state.load()
        get_system_log_repository().add(f"状态已加载，共 {count} 个账号", LogType.INFO, LogSource.SYSTEM)
        await register_jobs(application)

    # post_shutdown 回调：停止调度并落盘
    async def post_shutdown(application: Application) -> None:
        scheduler = get_scheduler_service()
        await scheduler.shutdown()
        await scheduler.state.save()
        logger.info("调度已停止，状态已保存")

    app.post_init = post_init
    app.post_shutdown = post_shutdown

    logger.info("Bot 应用创建成功")

    return app


async def error_handler(update: object, context) -> None:
    """错误处理器"""
    logger.error(f"处理更新时发生异常: {context.error}", exc_info=context.error)
