"""系统日志数据模型"""

from dataclasses import dataclass
from datetime import datetime

from rewards_bot.config.constants import LogType


@dataclass
class SystemLog:
    """全局系统日志"""

    id: str
    timestamp: datetime
    type: LogType
    source: str
    message: str
