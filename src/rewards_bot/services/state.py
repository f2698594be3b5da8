"""状态持久化服务"""

import logging

from pydantic import ValidationError

from rewards_bot.config.settings import get_settings
from rewards_bot.repositories.account_repository import AccountRepository, get_account_repository
from rewards_bot.repositories.config_repository import ConfigRepository, get_config_repository
from rewards_bot.repositories.snapshot_repository import StateRepository

logger = logging.getLogger(__name__)


class StateService:
    """账号与配置的落盘与恢复"""

    def __init__(
        self,
        account_repo: AccountRepository | None = None,
        config_repo: ConfigRepository | None = None,
        state_repo: StateRepository | None = None,
    ):
        self.account_repo = account_repo if account_repo is not None else get_account_repository()
        self.config_repo = config_repo if config_repo is not None else get_config_repository()
        self.state_repo = state_repo or StateRepository(get_settings().state_file)

    async def load(self) -> int:
        """
        从状态文件恢复

        Returns:
            恢复的账号数，文件不存在或无效时返回 0
        """
        try:
            loaded = await self.state_repo.load()
        except (ValueError, ValidationError) as e:
            logger.error(f"状态文件无效，使用空状态启动: {e}")
            return 0

        if loaded is None:
            return 0

        accounts, config = loaded
        self.account_repo.replace_all(accounts)
        if config is not None:
            self.config_repo.set(config)
        return len(accounts)

    async def save(self) -> None:
        """写入状态文件"""
        try:
            await self.state_repo.save(self.account_repo.list(), self.config_repo.get())
        except OSError as e:
            logger.error(f"状态落盘失败: {e}")
