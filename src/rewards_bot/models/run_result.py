"""任务执行结果模型"""

from dataclasses import dataclass, field

from rewards_bot.config.constants import AccountStatus, SignOutcome
from rewards_bot.models.account import AccountStats


@dataclass
class DashboardSnapshot:
    """Dashboard 快照"""

    total_points: int
    stats: AccountStats
    degraded: bool = False  # 忽略风控后拿到的不可用响应，调用方应沿用已知数据


@dataclass
class SubCallResult:
    """签到序列中单个子调用的结果"""

    name: str
    outcome: SignOutcome
    points: int = 0
    message: str = ""

    @property
    def success(self) -> bool:
        return self.outcome in (
            SignOutcome.EARNED,
            SignOutcome.COMPLETED,
            SignOutcome.ALREADY_DONE,
        )


@dataclass
class SignResult:
    """签到序列汇总结果（保留每个子调用的分类）"""

    calls: list[SubCallResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return any(call.success for call in self.calls)

    @property
    def points(self) -> int:
        return sum(call.points for call in self.calls)

    @property
    def already_done(self) -> bool:
        """所有成功的子调用都只是“今日已领取”"""
        succeeded = [call for call in self.calls if call.success]
        return bool(succeeded) and all(
            call.outcome == SignOutcome.ALREADY_DONE for call in succeeded
        )

    @property
    def message(self) -> str:
        if self.points > 0:
            detail = ", ".join(f"{call.name}:+{call.points}" for call in self.calls)
            return f"签到序列: +{self.points} ({detail})"
        if self.already_done:
            return "今日签到已完成"
        return " | ".join(f"[{call.name}] {call.message}" for call in self.calls)


@dataclass
class ReadResult:
    """阅读调用结果"""

    success: bool
    message: str


@dataclass
class RunResult:
    """单账号运行结果"""

    account_id: str
    earned: int
    total_points: int
    status: AccountStatus
    message: str = ""
    sign: SignResult | None = None
    rejected: bool = False  # 账号正在运行时的并发启动请求
