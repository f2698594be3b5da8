"""任务调度器"""

import logging

from telegram.ext import Application

from rewards_bot.tasks.heartbeat import register_heartbeat
from rewards_bot.tasks.state_flush import register_state_flush

logger = logging.getLogger(__name__)


async def register_jobs(app: Application):
    """
    注册所有定时任务

    Args:
        app: Bot 应用实例
    """
    # 调度心跳（每分钟）
    register_heartbeat(app)

    # 状态落盘（每 5 分钟）
    register_state_flush(app)

    logger.info("所有定时任务已注册")
