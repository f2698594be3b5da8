"""账号数据模型"""

from dataclasses import dataclass, field
from datetime import datetime

from rewards_bot.config.constants import (
    DEFAULT_READ_MAX,
    AccountStatus,
    LogType,
)
from rewards_bot.models.base import BaseEntity


@dataclass
class LogEntry:
    """账号日志条目"""

    id: str
    timestamp: datetime
    type: LogType
    message: str


@dataclass
class PointHistoryItem:
    """积分历史记录"""

    date: datetime
    points: int


@dataclass
class RedeemGoal:
    """兑换目标"""

    title: str
    price: int
    progress: int = 0


@dataclass
class AccountStats:
    """账号任务进度"""

    read_progress: int = 0
    read_max: int = DEFAULT_READ_MAX
    pc_search_progress: int = 0
    pc_search_max: int = 0
    mobile_search_progress: int = 0
    mobile_search_max: int = 0
    checkin_progress: int = 0
    checkin_max: int = 0
    daily_activities_progress: int = 0
    daily_activities_max: int = 0
    daily_set_progress: int = 0
    daily_set_max: int = 0
    redeem_goal: RedeemGoal | None = None


@dataclass
class Account(BaseEntity):
    """账号模型"""

    name: str
    refresh_token: str
    access_token: str | None = None
    token_expires_at: datetime | None = None
    status: AccountStatus = AccountStatus.IDLE
    logs: list[LogEntry] = field(default_factory=list)
    total_points: int = 0
    stats: AccountStats = field(default_factory=AccountStats)
    point_history: list[PointHistoryItem] = field(default_factory=list)
    enabled: bool = True
    cron_enabled: bool = True  # 独立定时器开关，不影响 enabled
    cron_expression: str | None = None
    ignore_risk: bool = False
    last_run_time: datetime | None = None
    last_daily_success: datetime | None = None
    run_id: int = 0  # 每次启动运行递增，用于判定过期的闲置复位

    @property
    def is_running(self) -> bool:
        return self.status == AccountStatus.RUNNING
