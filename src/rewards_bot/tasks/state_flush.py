"""状态落盘任务"""

import logging

from telegram.ext import Application

from rewards_bot.config.settings import get_settings
from rewards_bot.services.state import StateService

logger = logging.getLogger(__name__)


def register_state_flush(app: Application):
    """
    注册状态落盘任务

    Args:
        app: Bot 应用实例
    """
    state = StateService()
    interval = get_settings().state_flush_interval

    async def flush_callback(context):
        """落盘回调"""
        try:
            await state.save()
            logger.debug("状态已定期落盘")

        except Exception as e:
            logger.error(f"状态落盘错误: {e}")

    app.job_queue.run_repeating(
        flush_callback,
        interval=interval,
        first=interval,
    )

    logger.info("状态落盘任务已注册")
