"""账号管理服务"""

import logging
import uuid
from datetime import timedelta

from rewards_bot.clients.auth import build_authorize_url
from rewards_bot.config.constants import LogSource, LogType
from rewards_bot.core.timers import IdleResetTimers
from rewards_bot.core.timezone import now
from rewards_bot.exceptions import ConfigurationError
from rewards_bot.models.account import Account
from rewards_bot.repositories.account_repository import AccountRepository, get_account_repository
from rewards_bot.repositories.system_log_repository import SystemLogRepository, get_system_log_repository
from rewards_bot.services.credential import CredentialManager
from rewards_bot.utils.cron import validate_cron
from rewards_bot.utils.token_input import parse_token_input

logger = logging.getLogger(__name__)


class AccountManager:
    """账号管理服务"""

    def __init__(
        self,
        account_repo: AccountRepository | None = None,
        system_log: SystemLogRepository | None = None,
        credentials: CredentialManager | None = None,
        idle_timers: IdleResetTimers | None = None,
    ):
        self.account_repo = account_repo if account_repo is not None else get_account_repository()
        self.system_log = system_log if system_log is not None else get_system_log_repository()
        self.credentials = credentials or CredentialManager(account_repo=self.account_repo)
        self.idle_timers = idle_timers

    @staticmethod
    def authorize_url() -> str:
        """登录授权链接"""
        return build_authorize_url()

    async def add_account(self, text: str, name: str | None = None) -> Account:
        """
        添加账号

        Args:
            text: Refresh Token 或登录回调 URL
            name: 显示名称，留空时自动编号

        Returns:
            新账号

        Raises:
            CredentialInputError: 输入无法识别
            TokenError: 授权码兑换失败
        """
        kind, value = parse_token_input(text)

        access_token = None
        token_expires_at = None
        refresh_token = value

        if kind == "code":
            logger.debug("使用授权码兑换 Token")
            bundle = await self.credentials.exchange_code(value)
            refresh_token = bundle.refresh_token
            access_token = bundle.access_token
            token_expires_at = now() + timedelta(seconds=bundle.expires_in)

        display_name = (name or "").strip() or f"账号 {len(self.account_repo.list()) + 1}"
        account = self.account_repo.add(Account(
            id=str(uuid.uuid4()),
            created_at=now(),
            name=display_name,
            refresh_token=refresh_token,
            access_token=access_token,
            token_expires_at=token_expires_at,
        ))

        self.system_log.add(f"添加新账号: {display_name}", LogType.SUCCESS, LogSource.SYSTEM)
        logger.info(f"添加账号: {display_name} ({account.id})")
        return account

    def remove_account(self, account_id: str) -> Account | None:
        """删除账号"""
        if self.idle_timers is not None:
            self.idle_timers.cancel(account_id)
        account = self.account_repo.remove(account_id)
        if account is not None:
            self.system_log.add(f"删除账号: {account.name}", LogType.WARNING, LogSource.SYSTEM)
        return account

    def find(self, key: str) -> Account | None:
        """按完整 ID、ID 前缀或名称查找账号"""
        account = self.account_repo.get(key)
        if account is not None:
            return account

        matches = [a for a in self.account_repo.list() if a.id.startswith(key) or a.name == key]
        return matches[0] if len(matches) == 1 else None

    def toggle_enabled(self, account_id: str) -> Account | None:
        """启用/禁用账号"""
        account = self.account_repo.get(account_id)
        if account is None:
            return None
        return self.account_repo.update(account_id, enabled=not account.enabled)

    def set_cron(self, account_id: str, expression: str | None) -> Account | None:
        """
        设置账号独立 Cron，传入 None 清除

        Raises:
            ConfigurationError: 表达式无效
        """
        if expression is not None:
            expression = expression.strip()
            if not validate_cron(expression):
                raise ConfigurationError(f"无效的 Cron 表达式: {expression}")
        return self.account_repo.update(account_id, cron_expression=expression or None)

    def set_ignore_risk(self, account_id: str, ignore_risk: bool) -> Account | None:
        return self.account_repo.update(account_id, ignore_risk=ignore_risk)
