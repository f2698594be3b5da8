"""定时任务数据模型"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass
class ScheduleEntry:
    """Cron 条目：表达式、开关、上次触发时间"""

    cron_expression: str
    enabled: bool = False
    last_run_time: datetime | None = None


class TimerKind(str, Enum):
    """定时器类型"""
    GLOBAL = "global"
    BACKUP = "backup"
    CLOUD = "cloud"
    ACCOUNT = "account"


@dataclass
class TimerView:
    """定时器概览（只读视图）"""

    id: str
    kind: TimerKind
    name: str
    cron_expression: str
    enabled: bool
    last_run_time: datetime | None
    next_run_time: datetime | None
