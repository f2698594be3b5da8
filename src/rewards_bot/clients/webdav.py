"""WebDAV 客户端（云同步）"""

import logging

from rewards_bot.clients.base import BaseClient
from rewards_bot.exceptions import RemoteError, SyncError

logger = logging.getLogger(__name__)


class WebDAVClient(BaseClient):
    """WebDAV 客户端"""

    def __init__(self, base_url: str, username: str = "", password: str = "", settings=None):
        super().__init__(settings)
        self.base_url = base_url.rstrip("/")
        self.auth = (username, password) if username else None

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.strip('/')}"

    async def ensure_path(self, path: str) -> None:
        """
        逐级创建远程目录

        已存在的目录返回 405，视为成功。
        """
        current = ""
        for segment in [s for s in path.strip("/").split("/") if s]:
            current = f"{current}/{segment}"
            response = await self._request("MKCOL", self._url(current), auth=self.auth)
            if response.status_code not in (200, 201, 301, 405):
                raise SyncError(f"创建远程目录失败: {current} (Status: {response.status_code})")

    async def put(self, path: str, content: str) -> None:
        """上传文件"""
        response = await self._request(
            "PUT",
            self._url(path),
            auth=self.auth,
            headers={"Content-Type": "application/json; charset=utf-8"},
            data=content.encode("utf-8"),
        )
        if not response.ok:
            raise SyncError(f"上传失败: {path} (Status: {response.status_code})")
        logger.debug(f"WebDAV 上传完成: {path}")

    async def get(self, path: str) -> str:
        """下载文件"""
        response = await self._request("GET", self._url(path), auth=self.auth)
        if response.status_code == 404:
            raise SyncError(f"云端文件不存在: {path}")
        if not response.ok:
            raise RemoteError(f"下载失败: {path}", response.status_code)
        return response.text
