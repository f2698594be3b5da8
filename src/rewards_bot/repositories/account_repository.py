"""账号存储（内存，单写者）

每次修改都生成新的 Account 快照替换旧值，调用方拿到的对象不会被后续更新改写。
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Iterable

from rewards_bot.config.constants import MAX_ACCOUNT_LOGS, AccountStatus, LogType
from rewards_bot.core.timezone import now
from rewards_bot.models.account import Account, LogEntry

logger = logging.getLogger(__name__)


class AccountRepository:
    """Account Repository"""

    def __init__(self, accounts: Iterable[Account] | None = None):
        self._accounts: dict[str, Account] = {}
        for account in accounts or []:
            self._accounts[account.id] = account

    def list(self) -> list[Account]:
        """按插入顺序返回所有账号"""
        return list(self._accounts.values())

    def get(self, account_id: str) -> Account | None:
        """根据 ID 获取账号"""
        return self._accounts.get(account_id)

    def add(self, account: Account) -> Account:
        """添加账号"""
        if account.id in self._accounts:
            raise ValueError(f"账号已存在: {account.id}")
        self._accounts[account.id] = account
        return account

    def remove(self, account_id: str) -> Account | None:
        """删除账号，返回被删除的账号"""
        return self._accounts.pop(account_id, None)

    def replace_all(self, accounts: Iterable[Account]) -> None:
        """整体替换（导入/恢复）"""
        self._accounts = {account.id: account for account in accounts}

    def update(self, account_id: str, **changes) -> Account | None:
        """
        应用增量并返回新快照

        Args:
            account_id: 账号 ID
            **changes: 需要修改的字段

        Returns:
            更新后的账号，账号不存在时返回 None
        """
        account = self._accounts.get(account_id)
        if account is None:
            return None
        updated = replace(account, **changes)
        self._accounts[account_id] = updated
        return updated

    def add_log(
        self,
        account_id: str,
        message: str,
        log_type: LogType = LogType.INFO,
        timestamp: datetime | None = None,
    ) -> None:
        """追加账号日志（只保留最近 50 条）"""
        account = self._accounts.get(account_id)
        if account is None:
            return
        entry = LogEntry(
            id=uuid.uuid4().hex,
            timestamp=timestamp or now(),
            type=log_type,
            message=message,
        )
        logs = [*account.logs, entry][-MAX_ACCOUNT_LOGS:]
        self._accounts[account_id] = replace(account, logs=logs)

    def try_start_run(self, account_id: str, started_at: datetime | None = None) -> Account | None:
        """
        尝试将账号切换为 running

        检查与写入之间没有挂起点，在单事件循环下等价于互斥锁。

        Returns:
            切换后的账号；账号不存在或已在运行时返回 None
        """
        account = self._accounts.get(account_id)
        if account is None or account.status == AccountStatus.RUNNING:
            return None
        return self.update(
            account_id,
            status=AccountStatus.RUNNING,
            last_run_time=started_at or now(),
            run_id=account.run_id + 1,
        )


_account_repo: AccountRepository | None = None


def get_account_repository() -> AccountRepository:
    """获取全局账号存储（单例模式）"""
    global _account_repo
    if _account_repo is None:
        _account_repo = AccountRepository()
    return _account_repo
