"""快照文件存储（本地备份目录 + 状态文件）"""

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from rewards_bot.core.timezone import now
from rewards_bot.exceptions import SyncError
from rewards_bot.models.account import Account
from rewards_bot.models.config import AppConfig
from rewards_bot.models.snapshot import dump_snapshot, load_snapshot

logger = logging.getLogger(__name__)


@dataclass
class BackupFile:
    """备份文件信息"""

    name: str
    modified_at: datetime
    size: int


class LocalFileStore:
    """本地备份目录（只处理 .json 文件）"""

    def __init__(self, folder: Path | str):
        self.folder = Path(folder)

    def _resolve(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise SyncError(f"非法文件名: {name}")
        return self.folder / name

    def _list_sync(self) -> list[BackupFile]:
        if not self.folder.is_dir():
            return []
        files = []
        for path in self.folder.glob("*.json"):
            stat = path.stat()
            files.append(BackupFile(
                name=path.name,
                modified_at=datetime.fromtimestamp(stat.st_mtime),
                size=stat.st_size,
            ))
        files.sort(key=lambda f: f.modified_at, reverse=True)
        return files

    async def list_files(self) -> list[BackupFile]:
        """列出备份文件（按修改时间倒序）"""
        return await asyncio.to_thread(self._list_sync)

    async def read(self, name: str) -> str:
        """读取备份文件内容"""
        path = self._resolve(name)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            raise SyncError(f"读取备份失败: {name} - {e}") from e

    async def write(self, name: str, content: str) -> Path:
        """写入备份文件"""
        path = self._resolve(name)

        def _write() -> None:
            self.folder.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise SyncError(f"写入备份失败: {name} - {e}") from e
        return path

    async def delete(self, name: str) -> None:
        """删除备份文件"""
        path = self._resolve(name)
        await asyncio.to_thread(path.unlink, True)


class StateRepository:
    """状态文件（账号 + 配置），进程重启后恢复"""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read_sync(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        return json.loads(self.path.read_text(encoding="utf-8"))

    def _write_sync(self, payload: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    async def load(self) -> tuple[list[Account], AppConfig | None] | None:
        """
        读取状态文件

        Returns:
            (账号列表, 配置)，文件不存在时返回 None
        """
        data = await asyncio.to_thread(self._read_sync)
        if data is None:
            logger.info(f"状态文件不存在，使用默认配置: {self.path}")
            return None
        accounts, config = load_snapshot(data)
        logger.info(f"已加载状态文件: {len(accounts)} 个账号")
        return accounts, config

    async def save(self, accounts: list[Account], config: AppConfig) -> None:
        """写入状态文件（先写临时文件再替换）"""
        payload = dump_snapshot(accounts, config, now())
        await asyncio.to_thread(self._write_sync, payload)
        logger.debug(f"状态已落盘: {self.path}")
