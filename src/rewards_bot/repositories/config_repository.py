"""运行时配置存储"""

from rewards_bot.config.settings import get_settings
from rewards_bot.models.config import AppConfig


class ConfigRepository:
    """Config Repository"""

    def __init__(self, config: AppConfig | None = None):
        self._config = config or AppConfig.from_settings(get_settings())

    def get(self) -> AppConfig:
        return self._config

    def set(self, config: AppConfig) -> None:
        self._config = config


_config_repo: ConfigRepository | None = None


def get_config_repository() -> ConfigRepository:
    """获取全局配置存储（单例模式）"""
    global _config_repo
    if _config_repo is None:
        _config_repo = ConfigRepository()
    return _config_repo
