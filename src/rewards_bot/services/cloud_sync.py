"""WebDAV 云同步"""

import json
import logging
from typing import Callable

from rewards_bot.clients.webdav import WebDAVClient
from rewards_bot.config.constants import CLOUD_BACKUP_FILENAME, LogSource, LogType
from rewards_bot.core.timezone import now
from rewards_bot.exceptions import ConfigurationError, RemoteError, SyncError
from rewards_bot.models.config import CloudSyncConfig
from rewards_bot.repositories.config_repository import ConfigRepository, get_config_repository
from rewards_bot.repositories.system_log_repository import SystemLogRepository, get_system_log_repository
from rewards_bot.services.backup import BackupService

logger = logging.getLogger(__name__)

ClientFactory = Callable[[CloudSyncConfig], WebDAVClient]


def _default_client(cloud: CloudSyncConfig) -> WebDAVClient:
    return WebDAVClient(cloud.url, cloud.username, cloud.password)


class CloudSyncService:
    """云同步服务"""

    def __init__(
        self,
        backup: BackupService | None = None,
        config_repo: ConfigRepository | None = None,
        system_log: SystemLogRepository | None = None,
        client_factory: ClientFactory = _default_client,
    ):
        self.config_repo = config_repo if config_repo is not None else get_config_repository()
        self.system_log = system_log if system_log is not None else get_system_log_repository()
        self.backup = backup or BackupService(config_repo=self.config_repo, system_log=self.system_log)
        self.client_factory = client_factory

    def _get_cloud(self, name: str) -> CloudSyncConfig:
        cloud = self.config_repo.get().get_cloud(name)
        if cloud is None:
            raise ConfigurationError(f"未找到云同步配置: {name}")
        if not cloud.url:
            raise ConfigurationError(f"云同步 {name} 未配置地址")
        return cloud

    @staticmethod
    def _remote_path(cloud: CloudSyncConfig) -> str:
        folder = cloud.backup_path.strip("/")
        return f"{folder}/{CLOUD_BACKUP_FILENAME}" if folder else CLOUD_BACKUP_FILENAME

    async def upload(self, name: str) -> None:
        """
        上传当前快照

        Raises:
            ConfigurationError: 目标不存在
            SyncError: 上传失败
        """
        cloud = self._get_cloud(name)
        client = self.client_factory(cloud)

        try:
            await client.ensure_path(cloud.backup_path)
            await client.put(self._remote_path(cloud), self.backup.export_json())
        except (RemoteError, SyncError) as e:
            self.system_log.add(f"[{name}] 上传失败: {e}", LogType.ERROR, LogSource.WEBDAV)
            raise SyncError(f"上传失败: {e}") from e

        cloud.last_sync_time = now()
        self.system_log.add(f"[{name}] 云端备份已上传", LogType.SUCCESS, LogSource.WEBDAV)

    async def download(self, name: str) -> dict:
        """下载云端快照（不应用）"""
        cloud = self._get_cloud(name)
        client = self.client_factory(cloud)

        try:
            content = await client.get(self._remote_path(cloud))
        except RemoteError as e:
            raise SyncError(f"下载失败: {e}") from e

        try:
            data = json.loads(content)
        except ValueError as e:
            raise SyncError("云端文件不是有效的 JSON") from e

        if not isinstance(data, dict) or "accounts" not in data:
            raise SyncError("云端文件缺少 accounts")
        return data

    async def restore(self, name: str) -> int:
        """
        从云端恢复

        恢复后所有云同步目标的 last_sync_time 重置为当前时间。

        Returns:
            恢复的账号数
        """
        data = await self.download(name)
        count = self.backup.apply_document(data)

        restored_at = now()
        for cloud in self.config_repo.get().cloud_sync:
            cloud.last_sync_time = restored_at

        self.system_log.add(f"[{name}] 已从云端恢复 {count} 个账号", LogType.SUCCESS, LogSource.WEBDAV)
        return count
