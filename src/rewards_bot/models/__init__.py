"""数据模型模块"""

from rewards_bot.models.account import (
    Account,
    AccountStats,
    LogEntry,
    PointHistoryItem,
    RedeemGoal,
)
from rewards_bot.models.base import BaseEntity
from rewards_bot.models.config import (
    AppConfig,
    CloudSyncConfig,
    LocalBackupConfig,
    NotificationTarget,
    PushConfig,
)
from rewards_bot.models.run_result import (
    DashboardSnapshot,
    ReadResult,
    RunResult,
    SignResult,
    SubCallResult,
)
from rewards_bot.models.schedule import ScheduleEntry, TimerKind, TimerView
from rewards_bot.models.system_log import SystemLog

__all__ = [
    "BaseEntity",
    "Account",
    "AccountStats",
    "LogEntry",
    "PointHistoryItem",
    "RedeemGoal",
    "AppConfig",
    "CloudSyncConfig",
    "LocalBackupConfig",
    "NotificationTarget",
    "PushConfig",
    "DashboardSnapshot",
    "ReadResult",
    "RunResult",
    "SignResult",
    "SubCallResult",
    "ScheduleEntry",
    "TimerKind",
    "TimerView",
    "SystemLog",
]
