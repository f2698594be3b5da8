"""Token 生命周期管理"""

import logging
from datetime import datetime, timedelta

from rewards_bot.clients.auth import AuthClient, TokenBundle
from rewards_bot.config.constants import LogType
from rewards_bot.config.settings import get_settings
from rewards_bot.core.timezone import now, to_naive_local
from rewards_bot.exceptions import RemoteError, TokenError
from rewards_bot.models.account import Account
from rewards_bot.repositories.account_repository import AccountRepository, get_account_repository

logger = logging.getLogger(__name__)


class CredentialManager:
    """Token 管理器"""

    def __init__(
        self,
        auth_client: AuthClient | None = None,
        account_repo: AccountRepository | None = None,
        refresh_threshold_minutes: int | None = None,
    ):
        self.auth_client = auth_client or AuthClient()
        self.account_repo = account_repo if account_repo is not None else get_account_repository()
        if refresh_threshold_minutes is None:
            refresh_threshold_minutes = get_settings().token_refresh_minutes
        self.refresh_threshold = timedelta(minutes=refresh_threshold_minutes)

    def needs_refresh(self, account: Account, reference: datetime | None = None) -> bool:
        """无 Token、已过期或距离过期不足阈值时需要刷新"""
        if not account.access_token or account.token_expires_at is None:
            return True
        reference = reference or now()
        return to_naive_local(account.token_expires_at) - reference <= self.refresh_threshold

    async def ensure_valid_token(self, account: Account) -> str:
        """
        获取可用的 Access Token，必要时刷新

        刷新成功后同时轮换 refresh_token；刷新失败但仍有旧 Token 时继续使用旧 Token。

        Args:
            account: 账号

        Returns:
            Access Token

        Raises:
            TokenError: 刷新失败且没有可用的旧 Token
        """
        if not self.needs_refresh(account):
            return account.access_token

        self.account_repo.add_log(account.id, "正在刷新 Access Token...")

        try:
            if not account.refresh_token:
                raise TokenError("缺少 Refresh Token")
            bundle = await self.auth_client.renew(account.refresh_token)
        except (TokenError, RemoteError) as e:
            self.account_repo.add_log(account.id, f"Token 错误: {e}", LogType.WARNING)
            if not account.access_token:
                raise TokenError(f"Token 无效: {e}") from e
            logger.warning(f"账号 {account.name} Token 刷新失败，继续使用旧 Token: {e}")
            return account.access_token

        self.apply_bundle(account.id, bundle)
        logger.info(f"账号 {account.name} Token 已刷新，有效期 {bundle.expires_in} 秒")
        return bundle.access_token

    def apply_bundle(self, account_id: str, bundle: TokenBundle) -> Account | None:
        """写入新的 Token 组合"""
        return self.account_repo.update(
            account_id,
            access_token=bundle.access_token,
            refresh_token=bundle.refresh_token,
            token_expires_at=now() + timedelta(seconds=bundle.expires_in),
        )

    async def exchange_code(self, code: str) -> TokenBundle:
        """授权码兑换 Token（仅用于添加账号）"""
        return await self.auth_client.exchange_code(code)
