"""完成后自动闲置定时器"""

import asyncio
import logging

from rewards_bot.config.constants import AccountStatus
from rewards_bot.repositories.account_repository import AccountRepository, get_account_repository

logger = logging.getLogger(__name__)

_RESETTABLE = (AccountStatus.SUCCESS, AccountStatus.ERROR)


class IdleResetTimers:
    """
    按账号管理的一次性闲置复位

    定时器绑定启动时的 run_id，触发时账号已开始新一轮运行则不做任何修改。
    """

    def __init__(self, account_repo: AccountRepository | None = None):
        self.account_repo = account_repo if account_repo is not None else get_account_repository()
        self._handles: dict[str, asyncio.TimerHandle] = {}

    def arm(self, account_id: str, run_id: int, delay_seconds: float) -> bool:
        """
        安排闲置复位（同一账号只保留最新的一个）

        Returns:
            是否已安排
        """
        self.cancel(account_id)
        if delay_seconds <= 0:
            return False

        loop = asyncio.get_running_loop()
        self._handles[account_id] = loop.call_later(delay_seconds, self._fire, account_id, run_id)
        return True

    def cancel(self, account_id: str) -> None:
        handle = self._handles.pop(account_id, None)
        if handle is not None:
            handle.cancel()

    def cancel_all(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()

    def pending(self, account_id: str) -> bool:
        return account_id in self._handles

    def _fire(self, account_id: str, run_id: int) -> None:
        self._handles.pop(account_id, None)

        account = self.account_repo.get(account_id)
        if account is None or account.run_id != run_id or account.status not in _RESETTABLE:
            return

        self.account_repo.update(account_id, status=AccountStatus.IDLE)
        self.account_repo.add_log(account_id, "⏳ 自动闲置: 已重置状态")
        logger.debug(f"账号 {account.name} 已自动闲置")
