"""单账号任务执行"""

import asyncio
import logging
import random
from dataclasses import replace

from rewards_bot.config.constants import (
    MAX_READ_ITERATIONS,
    AccountStatus,
    LogSource,
    LogType,
    RunMode,
    SignOutcome,
)
from rewards_bot.core.timers import IdleResetTimers
from rewards_bot.core.timezone import now
from rewards_bot.exceptions import RiskDetectedError
from rewards_bot.models.account import Account
from rewards_bot.models.run_result import DashboardSnapshot, RunResult
from rewards_bot.repositories.account_repository import AccountRepository, get_account_repository
from rewards_bot.repositories.config_repository import ConfigRepository, get_config_repository
from rewards_bot.repositories.system_log_repository import SystemLogRepository, get_system_log_repository
from rewards_bot.services.credential import CredentialManager
from rewards_bot.services.history import record_point
from rewards_bot.services.reward_tasks import RewardTasks
from rewards_bot.services.risk import classify_exception

logger = logging.getLogger(__name__)


class TaskRunner:
    """
    单账号任务执行器

    同一账号的运行由 running 状态互斥，运行中的重复请求直接拒绝。
    所有异常在这里转换为账号状态，不会向调度器抛出。
    """

    def __init__(
        self,
        account_repo: AccountRepository | None = None,
        config_repo: ConfigRepository | None = None,
        system_log: SystemLogRepository | None = None,
        credentials: CredentialManager | None = None,
        tasks: RewardTasks | None = None,
        idle_timers: IdleResetTimers | None = None,
    ):
        self.account_repo = account_repo if account_repo is not None else get_account_repository()
        self.config_repo = config_repo if config_repo is not None else get_config_repository()
        self.system_log = system_log if system_log is not None else get_system_log_repository()
        self.credentials = credentials or CredentialManager(account_repo=self.account_repo)
        self.tasks = tasks or RewardTasks()
        self.idle_timers = idle_timers or IdleResetTimers(self.account_repo)

    def _log(self, account_id: str, message: str, log_type: LogType = LogType.INFO) -> None:
        self.account_repo.add_log(account_id, message, log_type)

    async def _human_delay(self, account_id: str) -> None:
        """随机延迟（整秒，闭区间 [min_delay, max_delay]）"""
        config = self.config_repo.get()
        low = max(0, config.min_delay)
        high = max(low, config.max_delay)
        seconds = random.randint(low, high)
        self._log(account_id, f"等待随机延迟 {seconds}秒...")
        await asyncio.sleep(seconds)

    async def _fetch_snapshot(self, account_id: str, token: str, ignore_risk: bool) -> DashboardSnapshot:
        """获取 Dashboard，响应不可用（已忽略风控）时沿用账号现有数据"""
        snapshot = await self.tasks.fetch_dashboard(token, ignore_risk)
        if not snapshot.degraded:
            return snapshot

        account = self.account_repo.get(account_id)
        self._log(account_id, "Dashboard 响应不可用 (已忽略风控)，沿用上次数据", LogType.WARNING)
        return DashboardSnapshot(account.total_points, replace(account.stats), degraded=True)

    def _apply_snapshot(self, account_id: str, snapshot: DashboardSnapshot, **changes) -> Account | None:
        """写入 Dashboard 快照并记录积分历史"""
        account = self.account_repo.get(account_id)
        if account is None:
            return None
        if snapshot.degraded:
            return self.account_repo.update(account_id, **changes) if changes else account
        return self.account_repo.update(
            account_id,
            total_points=snapshot.total_points,
            stats=snapshot.stats,
            point_history=record_point(account.point_history, snapshot.total_points),
            **changes,
        )

    async def run(
        self,
        account_id: str,
        mode: RunMode | None = None,
        source: LogSource = LogSource.SCHEDULER,
    ) -> RunResult:
        """
        执行单账号任务序列

        Args:
            account_id: 账号 ID
            mode: 运行模式，为空时按全局配置的 run_sign / run_read
            source: 系统日志来源

        Returns:
            RunResult；账号运行中时 rejected=True 且不改变任何状态
        """
        config = self.config_repo.get()
        account = self.account_repo.try_start_run(account_id)

        if account is None:
            existing = self.account_repo.get(account_id)
            if existing is None:
                logger.warning(f"账号不存在: {account_id}")
                return RunResult(account_id, 0, 0, AccountStatus.ERROR, "账号不存在", rejected=True)
            self._log(account_id, "任务正在运行中...", LogType.WARNING)
            return RunResult(
                account_id, 0, existing.total_points, AccountStatus.RUNNING, "任务正在运行中", rejected=True
            )

        self.idle_timers.cancel(account_id)

        run_sign = mode.runs_sign if mode else config.run_sign
        run_read = mode.runs_read if mode else config.run_read
        name = account.name

        self._log(account_id, "🚀 任务序列已启动...")
        self.system_log.add(f"[{name}] 启动任务序列", LogType.INFO, source)

        try:
            result = await self._execute(account, run_sign, run_read, source)
        except Exception as e:
            result = self._fail(account_id, e, source)

        current = self.account_repo.get(account_id)
        if current is not None and result.status in (AccountStatus.SUCCESS, AccountStatus.ERROR):
            self.idle_timers.arm(account_id, current.run_id, config.auto_idle_delay * 60)

        return result

    async def _execute(self, account: Account, run_sign: bool, run_read: bool, source: LogSource) -> RunResult:
        account_id = account.id
        ignore_risk = account.ignore_risk

        token = await self.credentials.ensure_valid_token(account)

        baseline = await self._fetch_snapshot(account_id, token, ignore_risk)
        self._apply_snapshot(account_id, baseline)

        sign_result = None
        if run_sign:
            self._log(account_id, "正在执行每日签入...")
            sign_result = await self.tasks.sign(token, ignore_risk)
            risky = [call for call in sign_result.calls if call.outcome == SignOutcome.RISK]

            if sign_result.success:
                self._log(account_id, sign_result.message, LogType.SUCCESS)
                if sign_result.points > 0:
                    self.system_log.add(f"[{account.name}] 签入成功 +{sign_result.points}", LogType.SUCCESS, source)
                for call in risky:
                    self._log(account_id, f"[{call.name}] {call.message}", LogType.RISK)
            elif risky:
                raise RiskDetectedError(risky[0].message)
            else:
                self._log(account_id, sign_result.message, LogType.WARNING)

            await self._human_delay(account_id)

        if run_read:
            await self._read_loop(account_id, baseline, token, ignore_risk, source)

        final = await self._fetch_snapshot(account_id, token, ignore_risk)
        earned = final.total_points - baseline.total_points

        self._apply_snapshot(
            account_id,
            final,
            status=AccountStatus.SUCCESS,
            last_daily_success=now(),
        )
        self._log(account_id, f"✅ 序列完成。本次收益: +{earned} 分", LogType.SUCCESS)
        self.system_log.add(
            f"[{account.name}] 执行完成 | 收益: +{earned} | 总分: {final.total_points}",
            LogType.SUCCESS,
            source,
        )

        return RunResult(
            account_id=account_id,
            earned=earned,
            total_points=final.total_points,
            status=AccountStatus.SUCCESS,
            message=f"本次收益 +{earned}",
            sign=sign_result,
        )

    async def _read_loop(
        self,
        account_id: str,
        baseline: DashboardSnapshot,
        token: str,
        ignore_risk: bool,
        source: LogSource,
    ) -> None:
        progress = baseline.stats.read_progress
        maximum = baseline.stats.read_max

        if progress >= maximum:
            self._log(account_id, "阅读任务已达标，跳过。")
            return

        account = self.account_repo.get(account_id)
        self._log(account_id, f"启动阅读任务序列 ({progress}/{maximum})...")
        self.system_log.add(f"[{account.name}] 开始阅读 ({progress}/{maximum})", LogType.INFO, source)

        iterations = 0
        while progress < maximum and iterations < MAX_READ_ITERATIONS:
            result = await self.tasks.read(token, ignore_risk)
            if result.success:
                progress += 1
                current = self.account_repo.get(account_id)
                self.account_repo.update(account_id, stats=replace(current.stats, read_progress=progress))
                self._log(account_id, f"阅读 {progress}/{maximum} 完成 | 积分 +1 (预估) | 等待下轮...")
            else:
                self._log(account_id, f"阅读尝试失败: {result.message}", LogType.WARNING)
            iterations += 1
            await self._human_delay(account_id)

    def _fail(self, account_id: str, error: Exception, source: LogSource) -> RunResult:
        status = classify_exception(error)
        account = self.account_repo.update(account_id, status=status)
        name = account.name if account else account_id

        if status == AccountStatus.RISK:
            self._log(account_id, f"🚨 风险警报: {error}", LogType.RISK)
            self.system_log.add(f"[{name}] ⚠️ 风险警报: {error}", LogType.ERROR, source)
        else:
            self._log(account_id, f"❌ 执行中断: {error}", LogType.ERROR)
            self.system_log.add(f"[{name}] ❌ 执行中断: {error}", LogType.ERROR, source)

        logger.debug(f"账号 {name} 运行失败", exc_info=error)

        return RunResult(
            account_id=account_id,
            earned=0,
            total_points=account.total_points if account else 0,
            status=status,
            message=str(error),
        )

    async def refresh_account(self, account_id: str, source: LogSource = LogSource.USER) -> Account | None:
        """
        刷新账号状态（只读取 Dashboard，不执行任务）

        Returns:
            刷新后的账号；账号不存在或运行中时返回 None
        """
        account = self.account_repo.get(account_id)
        if account is None:
            return None
        if account.is_running:
            self._log(account_id, "任务正在运行中，跳过刷新", LogType.WARNING)
            return None

        self.idle_timers.cancel(account_id)
        account = self.account_repo.update(account_id, status=AccountStatus.RUNNING)

        try:
            token = await self.credentials.ensure_valid_token(account)
            snapshot = await self._fetch_snapshot(account_id, token, account.ignore_risk)
        except Exception as e:
            self.account_repo.update(account_id, status=AccountStatus.ERROR)
            self._log(account_id, f"刷新失败: {e}", LogType.ERROR)
            self.system_log.add(f"[{account.name}] 刷新失败: {e}", LogType.ERROR, source)
            return self.account_repo.get(account_id)

        updated = self._apply_snapshot(account_id, snapshot, status=AccountStatus.IDLE)
        self._log(account_id, "状态刷新成功", LogType.SUCCESS)
        return updated
