"""运行时配置数据模型"""

from dataclasses import dataclass, field
from datetime import datetime

from rewards_bot.config.constants import DEFAULT_CLOUD_FOLDER
from rewards_bot.config.settings import Settings
from rewards_bot.models.schedule import ScheduleEntry


@dataclass
class NotificationTarget:
    """推送目标（多路分发）"""

    id: str
    name: str
    uids: list[str]
    filter_accounts: list[str] = field(default_factory=list)  # 为空表示订阅全部账号
    enabled: bool = True

    def subscribes(self, account_id: str) -> bool:
        """是否订阅了指定账号"""
        return not self.filter_accounts or account_id in self.filter_accounts


@dataclass
class PushConfig:
    """推送配置"""

    enabled: bool = False
    app_token: str = ""
    targets: list[NotificationTarget] = field(default_factory=list)


@dataclass
class LocalBackupConfig:
    """本地自动备份配置"""

    schedule: ScheduleEntry
    path: str = "backups"
    max_files: int = 30


@dataclass
class CloudSyncConfig:
    """WebDAV 云同步目标"""

    name: str
    url: str
    schedule: ScheduleEntry
    username: str = ""
    password: str = ""
    backup_path: str = DEFAULT_CLOUD_FOLDER
    last_sync_time: datetime | None = None


@dataclass
class AppConfig:
    """运行时配置"""

    cron: ScheduleEntry
    local_backup: LocalBackupConfig
    push: PushConfig = field(default_factory=PushConfig)
    cloud_sync: list[CloudSyncConfig] = field(default_factory=list)
    delay_between_accounts: int = 5
    run_sign: bool = True
    run_read: bool = True
    min_delay: int = 3
    max_delay: int = 8
    auto_idle_delay: int = 5  # 分钟，0 为关闭
    allow_single_push: bool = True
    skip_daily_completed: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppConfig":
        """根据环境配置生成默认运行时配置"""
        return cls(
            cron=ScheduleEntry(cron_expression=settings.default_cron_expression),
            local_backup=LocalBackupConfig(
                schedule=ScheduleEntry(cron_expression=settings.default_backup_cron),
                path=str(settings.backup_dir),
                max_files=settings.default_backup_max_files,
            ),
            push=PushConfig(
                enabled=bool(settings.wxpusher_app_token),
                app_token=settings.wxpusher_app_token,
            ),
            delay_between_accounts=settings.default_delay_between_accounts,
            min_delay=settings.default_min_delay,
            max_delay=settings.default_max_delay,
            auto_idle_delay=settings.default_auto_idle_delay,
        )

    def get_cloud(self, name: str) -> CloudSyncConfig | None:
        """按名称查找云同步目标"""
        for cloud in self.cloud_sync:
            if cloud.name == name:
                return cloud
        return None
