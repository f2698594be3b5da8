"""Rewards 平台接口客户端"""

import logging
from typing import Any

from rewards_bot.clients.base import BaseClient, RemoteResponse
from rewards_bot.config.constants import ACTIVITY_URL, DASHBOARD_URL, get_cn_headers

logger = logging.getLogger(__name__)


class RewardsClient(BaseClient):
    """Rewards 平台客户端（只负责收发，不解释业务结果）"""

    async def get_dashboard(self, access_token: str) -> RemoteResponse:
        """读取 Dashboard（余额 + 任务列表）"""
        headers = get_cn_headers(
            access_token,
            content_type="application/x-www-form-urlencoded; charset=UTF-8",
        )
        return await self._request("GET", DASHBOARD_URL, headers=headers)

    async def submit_activity(self, payload: dict[str, Any], headers: dict[str, str]) -> RemoteResponse:
        """
        提交活动（签到、阅读等共用同一个接口）

        Args:
            payload: {amount, type, attributes, id, country, channel} 信封
            headers: 请求头（不同活动使用不同客户端标识）
        """
        logger.debug(f"提交活动: type={payload.get('type')} offer={payload.get('attributes', {}).get('offerid')}")
        return await self._request("POST", ACTIVITY_URL, headers=headers, json=payload)
