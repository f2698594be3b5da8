"""Bot 启动入口（在导入 telegram 前完成日志配置）"""

import logging
import sys
import time
import warnings
from datetime import datetime

RESET = "\033[0m"

# 日志级别颜色映射
LOG_COLORS = {
    logging.DEBUG: "\033[38;5;245m",
    logging.INFO: "\033[38;5;79m",
    logging.WARNING: "\033[38;5;221m",
    logging.ERROR: "\033[38;5;203m",
    logging.CRITICAL: "\033[1;38;5;203m",
}

# 等宽级别名称
LOG_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO ",
    logging.WARNING: "WARN ",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRIT ",
}

warnings.filterwarnings("ignore", category=UserWarning, module="telegram")

from rewards_bot.config.settings import get_settings
from rewards_bot.core.timezone import get_timezone

settings = get_settings()
TZ = get_timezone()


class ColorFormatter(logging.Formatter):
    """按级别着色、时间使用配置时区的格式化器"""

    def formatTime(self, record, datefmt=None):
        ct = datetime.fromtimestamp(record.created, tz=TZ).replace(tzinfo=None).timetuple()
        return time.strftime(datefmt or "%Y-%m-%d %H:%M:%S", ct)

    def format(self, record):
        color = LOG_COLORS.get(record.levelno, "")
        record.levelname = LOG_LEVEL_NAMES.get(record.levelno, record.levelname)
        result = super().format(record)
        return f"{color}{result}{RESET}" if color else result


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

for handler in logging.root.handlers:
    handler.setFormatter(ColorFormatter(
        fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

# 第三方库日志保持简洁
logging.getLogger("apscheduler").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("telegram").setLevel(logging.INFO)
logging.getLogger("asyncio").setLevel(logging.INFO)

from rewards_bot.bot.app import create_app

logger = logging.getLogger(__name__)


def main():
    """启动 Bot"""
    if not settings.bot_token:
        logger.error("未配置 BOT_TOKEN，无法启动")
        sys.exit(1)
    if not settings.admin_ids:
        logger.warning("未配置 ADMIN_IDS，所有命令都会被拒绝")

    logger.info("正在启动 Bot...")
    app = create_app()
    logger.info("Bot 应用已创建，开始轮询...")
    app.run_polling()


if __name__ == "__main__":
    main()
