"""OAuth Token 兑换与刷新"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from rewards_bot.clients.base import BaseClient
from rewards_bot.config.constants import (
    AUTH_AUTHORIZE_URL,
    AUTH_CLIENT_ID,
    AUTH_REDIRECT_URI,
    AUTH_SCOPE,
    AUTH_TOKEN_URL,
)
from rewards_bot.exceptions import TokenError

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 3600


@dataclass
class TokenBundle:
    """Token 兑换结果"""

    access_token: str
    refresh_token: str
    expires_in: int = DEFAULT_EXPIRES_IN


def build_authorize_url() -> str:
    """生成登录授权链接，登录完成后浏览器地址栏中的回调 URL 带有 code"""
    query = urlencode({
        "client_id": AUTH_CLIENT_ID,
        "scope": AUTH_SCOPE,
        "response_type": "code",
        "redirect_uri": AUTH_REDIRECT_URI,
    })
    return f"{AUTH_AUTHORIZE_URL}?{query}"


class AuthClient(BaseClient):
    """登录服务客户端"""

    async def _post_token(self, form: dict[str, str]) -> dict:
        form = {
            "client_id": AUTH_CLIENT_ID,
            "redirect_uri": AUTH_REDIRECT_URI,
            "scope": AUTH_SCOPE,
            **form,
        }
        response = await self._request(
            "POST",
            AUTH_TOKEN_URL,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            data=form,
        )
        if not isinstance(response.data, dict):
            raise TokenError(f"Token 接口返回非 JSON 格式 (Status: {response.status_code})")
        return response.data

    async def exchange_code(self, code: str) -> TokenBundle:
        """
        授权码兑换 Token（仅用于添加账号）

        Raises:
            TokenError: 兑换被拒绝或响应缺失字段
        """
        data = await self._post_token({"code": code, "grant_type": "authorization_code"})

        if data.get("access_token") and data.get("refresh_token"):
            logger.info(f"授权码兑换成功: expires_in={data.get('expires_in')}")
            return TokenBundle(
                access_token=data["access_token"],
                refresh_token=data["refresh_token"],
                expires_in=int(data.get("expires_in") or DEFAULT_EXPIRES_IN),
            )

        raise TokenError(data.get("error_description") or f"未知错误: {data}")

    async def renew(self, refresh_token: str) -> TokenBundle:
        """
        刷新 Token，服务端会轮换 refresh_token

        Raises:
            TokenError: 刷新被拒绝或响应缺失字段
        """
        data = await self._post_token({"refresh_token": refresh_token, "grant_type": "refresh_token"})

        if data.get("error"):
            if data["error"] == "invalid_grant":
                raise TokenError("Token 已失效/被拒绝，请重新添加账号")
            raise TokenError(f"刷新 Token 拒绝: {data.get('error_description') or data['error']}")

        if data.get("access_token") and data.get("refresh_token"):
            logger.debug(f"Token 刷新成功: expires_in={data.get('expires_in')}")
            return TokenBundle(
                access_token=data["access_token"],
                refresh_token=data["refresh_token"],
                expires_in=int(data.get("expires_in") or DEFAULT_EXPIRES_IN),
            )

        raise TokenError(f"刷新响应缺失关键字段: {data}")
