"""调度心跳任务"""

import logging

from telegram.ext import Application

from rewards_bot.config.settings import get_settings
from rewards_bot.services.scheduler import get_scheduler_service

logger = logging.getLogger(__name__)


def register_heartbeat(app: Application):
    """
    注册调度心跳

    Args:
        app: Bot 应用实例
    """
    scheduler = get_scheduler_service()
    interval = get_settings().heartbeat_interval

    async def heartbeat_callback(context):
        """心跳回调"""
        try:
            tasks = scheduler.tick()
            if tasks:
                logger.info(f"心跳派发了 {len(tasks)} 个任务")

        except Exception as e:
            logger.error(f"调度心跳错误: {e}", exc_info=True)

    app.job_queue.run_repeating(
        heartbeat_callback,
        interval=interval,
        first=5,
    )

    logger.info(f"调度心跳已注册（每 {interval} 秒）")
