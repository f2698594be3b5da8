"""通知服务（运行报告分发）"""

import logging

from rewards_bot.clients.wxpusher import WxPusherClient
from rewards_bot.config.constants import LogSource, LogType
from rewards_bot.exceptions import RemoteError
from rewards_bot.models.account import Account
from rewards_bot.models.config import NotificationTarget
from rewards_bot.models.run_result import RunResult
from rewards_bot.repositories.account_repository import AccountRepository, get_account_repository
from rewards_bot.repositories.config_repository import ConfigRepository, get_config_repository
from rewards_bot.repositories.system_log_repository import SystemLogRepository, get_system_log_repository
from rewards_bot.utils.formatter import format_batch_report, format_single_report

logger = logging.getLogger(__name__)


class NotificationRouter:
    """通知路由"""

    def __init__(
        self,
        account_repo: AccountRepository | None = None,
        config_repo: ConfigRepository | None = None,
        system_log: SystemLogRepository | None = None,
        pusher: WxPusherClient | None = None,
    ):
        self.account_repo = account_repo if account_repo is not None else get_account_repository()
        self.config_repo = config_repo if config_repo is not None else get_config_repository()
        self.system_log = system_log if system_log is not None else get_system_log_repository()
        self.pusher = pusher or WxPusherClient()

    def _push_ready(self) -> bool:
        push = self.config_repo.get().push
        return push.enabled and bool(push.app_token)

    def resolve_targets(self, account_id: str) -> list[NotificationTarget]:
        """订阅了指定账号的启用目标"""
        return [
            target for target in self.config_repo.get().push.targets
            if target.enabled and target.subscribes(account_id)
        ]

    async def _send(self, target: NotificationTarget, content: str, label: str) -> bool:
        app_token = self.config_repo.get().push.app_token
        try:
            await self.pusher.send(app_token, target.uids, content)
        except RemoteError as e:
            self.system_log.add(f"[{label}] 推送失败 ({target.name}): {e}", LogType.ERROR, LogSource.PUSH)
            return False

        self.system_log.add(f"[{label}] 消息已推送至: {target.name}", LogType.SUCCESS, LogSource.PUSH)
        return True

    async def notify_single(self, result: RunResult) -> int:
        """
        推送单账号报告（受 allow_single_push 控制）

        Returns:
            成功推送的目标数
        """
        config = self.config_repo.get()
        if not self._push_ready() or not config.allow_single_push:
            return 0

        account = self.account_repo.get(result.account_id)
        if account is None:
            return 0

        targets = self.resolve_targets(account.id)
        if not targets:
            logger.debug(f"账号 {account.name} 没有订阅目标，跳过推送")
            return 0

        content = format_single_report(account, result)
        sent = 0
        for target in targets:
            if await self._send(target, content, account.name):
                sent += 1
        return sent

    async def notify_batch(self, results: list[RunResult]) -> int:
        """
        推送批量汇总报告（每个目标只包含其订阅的账号，不受 allow_single_push 控制）

        Returns:
            成功推送的目标数
        """
        if not self._push_ready() or not results:
            return 0

        accounts = self.account_repo.list()
        entries: list[tuple[Account, RunResult]] = []
        for result in results:
            account = self.account_repo.get(result.account_id)
            if account is not None:
                entries.append((account, result))

        sent = 0
        for target in self.config_repo.get().push.targets:
            if not target.enabled:
                continue

            target_entries = [(acc, res) for acc, res in entries if target.subscribes(acc.id)]
            if not target_entries:
                continue

            pool = sum(acc.total_points for acc in accounts if target.subscribes(acc.id))
            content = format_batch_report(target.name, target_entries, pool)
            if await self._send(target, content, "汇总报告"):
                sent += 1

        return sent
