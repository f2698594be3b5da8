"""WxPusher 推送客户端"""

import logging

from rewards_bot.clients.base import BaseClient
from rewards_bot.config.constants import WXPUSHER_SEND_URL
from rewards_bot.exceptions import RemoteError

logger = logging.getLogger(__name__)

CONTENT_TYPE_MARKDOWN = 3


class WxPusherClient(BaseClient):
    """WxPusher 推送客户端"""

    async def send(
        self,
        app_token: str,
        uids: list[str],
        content: str,
        content_type: int = CONTENT_TYPE_MARKDOWN,
        summary: str = "MS Rewards 任务报告",
    ) -> None:
        """
        发送消息

        Args:
            app_token: 应用 Token
            uids: 接收者 UID 列表
            content: 消息内容
            content_type: 1 文本 / 2 HTML / 3 Markdown
            summary: 列表页摘要

        Raises:
            RemoteError: 网络错误或接口返回失败
        """
        body = {
            "appToken": app_token,
            "content": content,
            "contentType": content_type,
            "uids": [uid.strip() for uid in uids if uid and uid.strip()],
            "summary": summary,
        }
        response = await self._request("POST", WXPUSHER_SEND_URL, json=body)
        data = response.data if isinstance(response.data, dict) else {}

        if data.get("code") != 1000:
            raise RemoteError(f"推送接口错误: {data.get('msg') or response.text[:200]}", response.status_code)

        logger.debug(f"推送成功: {len(body['uids'])} 个接收者")
