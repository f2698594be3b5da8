"""调度服务

心跳每分钟调用一次 tick()，对全局任务、账号独立定时、本地备份和云同步四类条目求值，
到期的条目先写入 last_run_time 再派发，保证同一分钟内只触发一次。
"""

import asyncio
import logging
from datetime import datetime
from typing import Coroutine

from rewards_bot.config.constants import AccountStatus, LogSource, LogType, RunMode
from rewards_bot.core.timezone import is_same_day, now
from rewards_bot.exceptions import RewardsBotError
from rewards_bot.models.account import Account
from rewards_bot.models.run_result import RunResult
from rewards_bot.models.schedule import ScheduleEntry, TimerKind, TimerView
from rewards_bot.repositories.account_repository import AccountRepository, get_account_repository
from rewards_bot.repositories.config_repository import ConfigRepository, get_config_repository
from rewards_bot.repositories.system_log_repository import SystemLogRepository, get_system_log_repository
from rewards_bot.services.backup import BackupService
from rewards_bot.services.cloud_sync import CloudSyncService
from rewards_bot.services.notification import NotificationRouter
from rewards_bot.services.state import StateService
from rewards_bot.services.task_runner import TaskRunner
from rewards_bot.utils.cron import is_due, next_run

logger = logging.getLogger(__name__)

GLOBAL_TIMER_ID = "global"
BACKUP_TIMER_ID = "backup"
CLOUD_TIMER_PREFIX = "cloud:"


def _same_minute(a: datetime, b: datetime) -> bool:
    return a.replace(second=0, microsecond=0) == b.replace(second=0, microsecond=0)


def is_entry_due(expression: str | None, last_run_time: datetime | None, moment: datetime) -> bool:
    """表达式在当前分钟到期，且本分钟内尚未触发"""
    if not is_due(expression, moment):
        return False
    return last_run_time is None or not _same_minute(last_run_time, moment)


class SchedulerService:
    """调度服务"""

    def __init__(
        self,
        account_repo: AccountRepository | None = None,
        config_repo: ConfigRepository | None = None,
        system_log: SystemLogRepository | None = None,
        runner: TaskRunner | None = None,
        notifier: NotificationRouter | None = None,
        backup: BackupService | None = None,
        cloud_sync: CloudSyncService | None = None,
        state: StateService | None = None,
    ):
        self.account_repo = account_repo if account_repo is not None else get_account_repository()
        self.config_repo = config_repo if config_repo is not None else get_config_repository()
        self.system_log = system_log if system_log is not None else get_system_log_repository()
        self.runner = runner or TaskRunner(
            account_repo=self.account_repo,
            config_repo=self.config_repo,
            system_log=self.system_log,
        )
        self.notifier = notifier or NotificationRouter(
            account_repo=self.account_repo,
            config_repo=self.config_repo,
            system_log=self.system_log,
        )
        self.backup = backup or BackupService(
            account_repo=self.account_repo,
            config_repo=self.config_repo,
            system_log=self.system_log,
        )
        self.cloud_sync = cloud_sync or CloudSyncService(
            backup=self.backup,
            config_repo=self.config_repo,
            system_log=self.system_log,
        )

        self.state = state

        for backup_service in (self.backup, self.cloud_sync.backup):
            if backup_service.busy_check is None:
                backup_service.busy_check = lambda: self._batch_running

        self._batch_running = False
        self._stop_requested = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def batch_running(self) -> bool:
        return self._batch_running

    def _spawn(self, coro: Coroutine, name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ==================== 心跳 ====================

    def tick(self, moment: datetime | None = None) -> list[asyncio.Task]:
        """
        心跳求值

        Args:
            moment: 当前时间（本地 naive）

        Returns:
            本次派发的任务列表
        """
        moment = moment or now()
        config = self.config_repo.get()
        dispatched: list[asyncio.Task] = []

        if config.cron.enabled and is_entry_due(config.cron.cron_expression, config.cron.last_run_time, moment):
            config.cron.last_run_time = moment
            if self._batch_running:
                self.system_log.add("全局任务到期，但批量任务仍在运行，本次跳过", LogType.WARNING, LogSource.SCHEDULER)
            else:
                dispatched.append(self._spawn(self.run_batch(LogSource.SCHEDULER), "batch"))

        for account in self.account_repo.list():
            if not (account.enabled and account.cron_enabled and account.cron_expression):
                continue
            if not is_entry_due(account.cron_expression, account.last_run_time, moment):
                continue
            if account.is_running:
                logger.debug(f"账号 {account.name} 正在运行，跳过独立定时")
                continue

            self.account_repo.update(account.id, last_run_time=moment)
            dispatched.append(self._spawn(self.run_single(account.id, LogSource.SCHEDULER), f"account:{account.id}"))

        backup_schedule = config.local_backup.schedule
        if backup_schedule.enabled and is_entry_due(
            backup_schedule.cron_expression, backup_schedule.last_run_time, moment
        ):
            backup_schedule.last_run_time = moment
            dispatched.append(self._spawn(self._run_backup(), "backup"))

        for cloud in config.cloud_sync:
            if cloud.schedule.enabled and is_entry_due(
                cloud.schedule.cron_expression, cloud.schedule.last_run_time, moment
            ):
                cloud.schedule.last_run_time = moment
                dispatched.append(self._spawn(self._run_cloud(cloud.name), f"{CLOUD_TIMER_PREFIX}{cloud.name}"))

        if dispatched:
            logger.debug(f"心跳派发 {len(dispatched)} 个任务")
        return dispatched

    async def _run_backup(self) -> None:
        try:
            await self.backup.export_local()
        except RewardsBotError as e:
            self.system_log.add(f"自动备份失败: {e}", LogType.ERROR, LogSource.BACKUP)

    async def _run_cloud(self, name: str) -> None:
        try:
            await self.cloud_sync.upload(name)
        except RewardsBotError as e:
            logger.error(f"云同步失败 ({name}): {e}")

    # ==================== 任务执行 ====================

    def select_batch_targets(self, moment: datetime | None = None) -> list[Account]:
        """批量任务的账号: 启用、非风控、非运行中，开启跳过时排除今日已完成的账号"""
        moment = moment or now()
        skip_completed = self.config_repo.get().skip_daily_completed

        targets = []
        for account in self.account_repo.list():
            if not account.enabled or account.status == AccountStatus.RISK or account.is_running:
                continue
            if skip_completed and is_same_day(account.last_daily_success, moment):
                continue
            targets.append(account)
        return targets

    async def run_batch(self, source: LogSource = LogSource.USER, mode: RunMode | None = None) -> list[RunResult]:
        """
        批量执行（严格串行，账号之间按配置间隔等待）

        停止请求只在账号之间检查，不会中断正在执行的账号。
        被停止时已完成的结果仍然推送。
        """
        if self._batch_running:
            self.system_log.add("批量任务正在运行中", LogType.WARNING, source)
            return []

        self._batch_running = True
        self._stop_requested = False

        try:
            targets = self.select_batch_targets()
            if not targets:
                skip_completed = self.config_repo.get().skip_daily_completed
                message = "所有启用账号今日均已签到 (或无待执行账号)" if skip_completed else "没有待执行的有效账号"
                self.system_log.add(message, LogType.WARNING, source)
                return []

            self.system_log.add(f"开始批量执行 ({len(targets)} 个账号)", LogType.INFO, source)
            results: list[RunResult] = []

            for index, account in enumerate(targets):
                if index > 0 and not self._stop_requested:
                    await asyncio.sleep(self.config_repo.get().delay_between_accounts)
                if self._stop_requested:
                    self.system_log.add("🛑 批量任务已由用户手动终止", LogType.WARNING, source)
                    break

                result = await self.runner.run(account.id, mode, source)
                if result.rejected:
                    continue
                results.append(result)

            if self._stop_requested:
                self.system_log.add("任务队列未完全执行", LogType.WARNING, source)
            else:
                self.system_log.add("批量任务执行完毕", LogType.SUCCESS, source)

            await self._persist()
            await self._notify(self.notifier.notify_batch(results))
            return results

        finally:
            self._batch_running = False
            self._stop_requested = False

    async def run_single(
        self,
        account_id: str,
        source: LogSource = LogSource.USER,
        mode: RunMode | None = None,
    ) -> RunResult:
        """执行单个账号并按配置推送单号报告"""
        account = self.account_repo.get(account_id)
        if account is not None and source == LogSource.USER:
            self.system_log.add(f"[Manual] 启动账号: {account.name}", LogType.INFO, source)

        result = await self.runner.run(account_id, mode, source)
        if not result.rejected:
            await self._persist()
            await self._notify(self.notifier.notify_single(result))
        return result

    async def _persist(self) -> None:
        if self.state is not None:
            await self.state.save()

    async def _notify(self, coro: Coroutine) -> None:
        try:
            await coro
        except Exception as e:
            logger.error(f"推送报告异常: {e}", exc_info=True)

    def stop(self) -> bool:
        """
        请求停止批量任务

        Returns:
            当前是否有批量任务在运行
        """
        if not self._batch_running:
            return False
        self._stop_requested = True
        self.system_log.add("⚠️ 正在尝试中断任务...", LogType.WARNING, LogSource.USER)
        return True

    async def shutdown(self) -> None:
        """停止调度：请求中断批量任务并取消闲置定时器"""
        self._stop_requested = True
        self.runner.idle_timers.cancel_all()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    # ==================== 定时器管理 ====================

    def _resolve_entry(self, timer_id: str) -> ScheduleEntry | None:
        config = self.config_repo.get()
        if timer_id == GLOBAL_TIMER_ID:
            return config.cron
        if timer_id == BACKUP_TIMER_ID:
            return config.local_backup.schedule
        if timer_id.startswith(CLOUD_TIMER_PREFIX):
            cloud = config.get_cloud(timer_id[len(CLOUD_TIMER_PREFIX):])
            return cloud.schedule if cloud else None
        return None

    def list_timers(self, moment: datetime | None = None) -> list[TimerView]:
        """所有定时器（含下一次运行时间）"""
        moment = moment or now()
        config = self.config_repo.get()

        views = [
            TimerView(
                id=GLOBAL_TIMER_ID,
                kind=TimerKind.GLOBAL,
                name="全局任务",
                cron_expression=config.cron.cron_expression,
                enabled=config.cron.enabled,
                last_run_time=config.cron.last_run_time,
                next_run_time=next_run(config.cron.cron_expression, moment),
            ),
            TimerView(
                id=BACKUP_TIMER_ID,
                kind=TimerKind.BACKUP,
                name="本地备份",
                cron_expression=config.local_backup.schedule.cron_expression,
                enabled=config.local_backup.schedule.enabled,
                last_run_time=config.local_backup.schedule.last_run_time,
                next_run_time=next_run(config.local_backup.schedule.cron_expression, moment),
            ),
        ]

        for cloud in config.cloud_sync:
            views.append(TimerView(
                id=f"{CLOUD_TIMER_PREFIX}{cloud.name}",
                kind=TimerKind.CLOUD,
                name=f"云同步 {cloud.name}",
                cron_expression=cloud.schedule.cron_expression,
                enabled=cloud.schedule.enabled,
                last_run_time=cloud.schedule.last_run_time,
                next_run_time=next_run(cloud.schedule.cron_expression, moment),
            ))

        for account in self.account_repo.list():
            if not account.cron_expression:
                continue
            views.append(TimerView(
                id=account.id,
                kind=TimerKind.ACCOUNT,
                name=account.name,
                cron_expression=account.cron_expression,
                enabled=account.enabled and account.cron_enabled,
                last_run_time=account.last_run_time,
                next_run_time=next_run(account.cron_expression, moment),
            ))

        return views

    def reset_entry(self, timer_id: str) -> bool:
        """
        清空定时器的 last_run_time

        当前分钟仍匹配表达式时，下一次心跳会立即触发。
        """
        entry = self._resolve_entry(timer_id)
        if entry is not None:
            entry.last_run_time = None
        elif self.account_repo.update(timer_id, last_run_time=None) is None:
            return False

        self.system_log.add(f"定时器已重置: {timer_id}", LogType.INFO, LogSource.USER)
        return True

    def toggle_entry(self, timer_id: str) -> bool | None:
        """
        切换定时器开关

        Returns:
            切换后的状态，定时器不存在时返回 None
        """
        entry = self._resolve_entry(timer_id)
        if entry is not None:
            entry.enabled = not entry.enabled
            enabled = entry.enabled
        else:
            account = self.account_repo.get(timer_id)
            if account is None:
                return None
            enabled = not account.cron_enabled
            self.account_repo.update(timer_id, cron_enabled=enabled)

        self.system_log.add(
            f"定时器 {timer_id} 已{'启用' if enabled else '停用'}", LogType.INFO, LogSource.USER
        )
        return enabled


_scheduler: SchedulerService | None = None


def get_scheduler_service() -> SchedulerService:
    """获取全局调度服务（单例模式）"""
    global _scheduler
    if _scheduler is None:
        _scheduler = SchedulerService(state=StateService())
    return _scheduler
