"""本地备份（快照导出、滚动清理、导入）"""

import json
import logging
from typing import Any, Callable

from pydantic import ValidationError

from rewards_bot.config.constants import BACKUP_FILE_PREFIX, LogSource, LogType
from rewards_bot.core.timezone import now
from rewards_bot.exceptions import SyncError
from rewards_bot.models.snapshot import dump_snapshot, load_snapshot
from rewards_bot.repositories.account_repository import AccountRepository, get_account_repository
from rewards_bot.repositories.config_repository import ConfigRepository, get_config_repository
from rewards_bot.repositories.snapshot_repository import BackupFile, LocalFileStore
from rewards_bot.repositories.system_log_repository import SystemLogRepository, get_system_log_repository

logger = logging.getLogger(__name__)


class BackupService:
    """备份服务"""

    def __init__(
        self,
        account_repo: AccountRepository | None = None,
        config_repo: ConfigRepository | None = None,
        system_log: SystemLogRepository | None = None,
        store: LocalFileStore | None = None,
        busy_check: Callable[[], bool] | None = None,
    ):
        self.account_repo = account_repo if account_repo is not None else get_account_repository()
        self.config_repo = config_repo if config_repo is not None else get_config_repository()
        self.system_log = system_log if system_log is not None else get_system_log_repository()
        self._store = store
        # 批量任务进行中（含账号间隔）时拒绝导入
        self.busy_check = busy_check

    @property
    def store(self) -> LocalFileStore:
        """备份目录随配置变化，未注入时按当前配置构造"""
        if self._store is not None:
            return self._store
        return LocalFileStore(self.config_repo.get().local_backup.path)

    def export_document(self) -> dict[str, Any]:
        """导出当前账号与配置为快照字典"""
        return dump_snapshot(self.account_repo.list(), self.config_repo.get(), now())

    def export_json(self) -> str:
        return json.dumps(self.export_document(), ensure_ascii=False, indent=2)

    async def export_local(self) -> str:
        """
        导出快照到本地备份目录并清理旧文件

        Returns:
            备份文件名

        Raises:
            SyncError: 写入失败
        """
        filename = f"{BACKUP_FILE_PREFIX}{now():%Y-%m-%d-%H-%M}.json"
        await self.store.write(filename, self.export_json())
        deleted = await self.prune()

        message = f"本地备份完成: {filename}"
        if deleted:
            message += f"，清理旧备份 {len(deleted)} 个"
        self.system_log.add(message, LogType.SUCCESS, LogSource.BACKUP)
        return filename

    async def prune(self) -> list[str]:
        """删除超出保留数量的旧备份（只处理本程序生成的文件）"""
        max_files = max(1, self.config_repo.get().local_backup.max_files)
        files = [f for f in await self.store.list_files() if f.name.startswith(BACKUP_FILE_PREFIX)]

        deleted = []
        for stale in files[max_files:]:
            await self.store.delete(stale.name)
            deleted.append(stale.name)
            logger.debug(f"删除旧备份: {stale.name}")
        return deleted

    async def list_backups(self) -> list[BackupFile]:
        return await self.store.list_files()

    def apply_document(self, data: Any) -> int:
        """
        用快照替换当前账号（及配置）

        运行中/等待中的账号复位为 idle。

        Returns:
            导入的账号数

        Raises:
            SyncError: 快照格式无效或有任务正在运行
        """
        if any(account.is_running for account in self.account_repo.list()):
            raise SyncError("有任务正在运行，无法导入")
        if self.busy_check is not None and self.busy_check():
            raise SyncError("批量任务进行中，无法导入")

        if not isinstance(data, dict) or not isinstance(data.get("accounts"), list):
            raise SyncError("无效的备份文件: 缺少 accounts")

        try:
            accounts, config = load_snapshot(data)
        except ValidationError as e:
            raise SyncError(f"无效的备份文件: {e.error_count()} 处字段错误") from e

        self.account_repo.replace_all(accounts)
        if config is not None:
            self.config_repo.set(config)
        return len(accounts)

    async def import_backup(self, name: str) -> int:
        """从本地备份恢复"""
        content = await self.store.read(name)
        try:
            data = json.loads(content)
        except ValueError as e:
            raise SyncError(f"备份文件不是有效的 JSON: {name}") from e

        count = self.apply_document(data)
        self.system_log.add(f"已从本地备份恢复 {count} 个账号: {name}", LogType.SUCCESS, LogSource.BACKUP)
        return count
