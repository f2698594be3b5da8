"""数据访问层模块"""

from rewards_bot.repositories.account_repository import AccountRepository, get_account_repository
from rewards_bot.repositories.config_repository import ConfigRepository, get_config_repository
from rewards_bot.repositories.snapshot_repository import BackupFile, LocalFileStore, StateRepository
from rewards_bot.repositories.system_log_repository import SystemLogRepository, get_system_log_repository

__all__ = [
    "AccountRepository",
    "ConfigRepository",
    "SystemLogRepository",
    "LocalFileStore",
    "StateRepository",
    "BackupFile",
    "get_account_repository",
    "get_config_repository",
    "get_system_log_repository",
]
