"""远程调用基础设施"""

import logging
from dataclasses import dataclass
from typing import Any

from curl_cffi.requests import AsyncSession, errors

from rewards_bot.config.settings import Settings, get_settings
from rewards_bot.exceptions import RemoteError

logger = logging.getLogger(__name__)


@dataclass
class RemoteResponse:
    """远程响应（已解析 JSON，非 JSON 时 data 为 None）"""

    status_code: int
    data: Any
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class BaseClient:
    """远程客户端基类，统一代理、模拟浏览器与超时设置"""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings if settings is not None else get_settings()

    def _new_session(self) -> AsyncSession:
        return AsyncSession(**self.settings.session_kwargs)

    async def _request(self, method: str, url: str, **kwargs) -> RemoteResponse:
        """
        发送请求

        Args:
            method: HTTP 方法（支持 MKCOL 等扩展方法）
            url: 请求地址
            **kwargs: 透传给 AsyncSession.request 的参数

        Returns:
            RemoteResponse

        Raises:
            RemoteError: 超时或网络错误
        """
        kwargs.setdefault("timeout", self.settings.request_timeout)
        session = self._new_session()

        try:
            response = await session.request(method, url, **kwargs)
        except errors.RequestsError as e:
            logger.warning(f"远程请求失败: {method} {url} - {e}")
            raise RemoteError(f"网络请求失败: {e}") from e
        finally:
            await session.close()

        logger.debug(f"远程响应: {method} {url} status={response.status_code}")

        try:
            data = response.json()
        except ValueError:
            data = None

        return RemoteResponse(status_code=response.status_code, data=data, text=response.text)
