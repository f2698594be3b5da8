"""全局系统日志（有界环形缓冲）"""

import logging
import uuid
from collections import deque

from rewards_bot.config.constants import MAX_SYSTEM_LOGS, LogSource, LogType
from rewards_bot.core.timezone import now
from rewards_bot.models.system_log import SystemLog

logger = logging.getLogger("rewards_bot.system")

_LEVELS = {
    LogType.INFO: logging.INFO,
    LogType.SUCCESS: logging.INFO,
    LogType.WARNING: logging.WARNING,
    LogType.ERROR: logging.ERROR,
    LogType.RISK: logging.WARNING,
}


class SystemLogRepository:
    """System Log Repository"""

    def __init__(self, max_logs: int = MAX_SYSTEM_LOGS):
        self._logs: deque[SystemLog] = deque(maxlen=max_logs)

    def add(
        self,
        message: str,
        log_type: LogType = LogType.INFO,
        source: LogSource | str = LogSource.SYSTEM,
    ) -> SystemLog:
        """记录系统日志并同步输出到进程日志"""
        source_name = source.value if isinstance(source, LogSource) else str(source)
        entry = SystemLog(
            id=uuid.uuid4().hex,
            timestamp=now(),
            type=log_type,
            source=source_name,
            message=message,
        )
        self._logs.append(entry)
        logger.log(_LEVELS[log_type], f"[{source_name}] {message}")
        return entry

    def recent(self, limit: int = 20, source: str | None = None) -> list[SystemLog]:
        """获取最近的日志（时间正序）"""
        logs = [log for log in self._logs if source is None or log.source == source]
        return logs[-limit:] if limit > 0 else logs

    def clear(self) -> None:
        self._logs.clear()

    def __len__(self) -> int:
        return len(self._logs)


_system_log_repo: SystemLogRepository | None = None


def get_system_log_repository() -> SystemLogRepository:
    """获取全局系统日志（单例模式）"""
    global _system_log_repo
    if _system_log_repo is None:
        _system_log_repo = SystemLogRepository()
    return _system_log_repo
