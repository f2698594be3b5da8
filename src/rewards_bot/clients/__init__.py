"""远程服务客户端"""

from rewards_bot.clients.auth import AuthClient, TokenBundle, build_authorize_url
from rewards_bot.clients.base import BaseClient, RemoteResponse
from rewards_bot.clients.dashboard import PromotionKind, decode_dashboard
from rewards_bot.clients.rewards import RewardsClient
from rewards_bot.clients.webdav import WebDAVClient
from rewards_bot.clients.wxpusher import WxPusherClient

__all__ = [
    "BaseClient",
    "RemoteResponse",
    "AuthClient",
    "TokenBundle",
    "build_authorize_url",
    "RewardsClient",
    "PromotionKind",
    "decode_dashboard",
    "WebDAVClient",
    "WxPusherClient",
]
