"""常量定义模块"""

from enum import Enum
from typing import Final


# ==================== 远程服务地址 ====================
AUTH_TOKEN_URL: Final[str] = "https://login.live.com/oauth20_token.srf"
AUTH_AUTHORIZE_URL: Final[str] = "https://login.live.com/oauth20_authorize.srf"
AUTH_REDIRECT_URI: Final[str] = "https://login.live.com/oauth20_desktop.srf"
AUTH_CLIENT_ID: Final[str] = "0000000040170455"
AUTH_SCOPE: Final[str] = "service::prod.rewardsplatform.microsoft.com::MBI_SSL offline_access openid profile"

DASHBOARD_URL: Final[str] = (
    "https://prod.rewardsplatform.microsoft.com/dapi/me"
    "?channel=SAAndroid&options=613&country=cn&market=zh-CN"
)
ACTIVITY_URL: Final[str] = "https://prod.rewardsplatform.microsoft.com/dapi/me/activities"
WXPUSHER_SEND_URL: Final[str] = "https://wxpusher.zjiecode.com/api/send/message"


# ==================== HTTP 请求配置 ====================
DEFAULT_UA_MOBILE: Final[str] = (
    "Mozilla/5.0 (Linux; Android 13; SM-G998B) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/112.0.0.0 Mobile Safari/537.36 EdgA/112.0.1722.59"
)

CN_HEADERS: Final[dict[str, str]] = {
    "x-rewards-country": "cn",
    "x-rewards-language": "zh",
    "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
    "x-rewards-appid": "SAAndroid/31.4.2110003555",
    "x-rewards-ismobile": "true",
    "x-rewards-partnerid": "startapp",
    "x-rewards-flights": "rwgobig",
}


def get_activity_headers(access_token: str) -> dict[str, str]:
    """
    获取活动提交接口的请求头（模拟 Android 原生客户端）

    Args:
        access_token: 访问令牌

    Returns:
        HTTP 头字典
    """
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "channel": "SAAndroid",
        "User-Agent": "okhttp/4.9.1",
        "Authorization": f"Bearer {access_token}",
    }


def get_cn_headers(access_token: str, content_type: str = "application/json; charset=UTF-8") -> dict[str, str]:
    """获取带国区标识的请求头"""
    headers = {
        "content-type": content_type,
        "authorization": f"Bearer {access_token}",
        "User-Agent": DEFAULT_UA_MOBILE,
    }
    headers.update(CN_HEADERS)
    return headers


def get_read_headers(access_token: str) -> dict[str, str]:
    """获取阅读接口的请求头（新版 AppID）"""
    headers = get_cn_headers(access_token, content_type="application/json")
    headers.update({
        "Accept-Encoding": "gzip",
        "x-rewards-appid": "SAAndroid/32.2.430730002",
        "x-rewards-language": "zh-hans",
    })
    return headers


# ==================== 运行阈值 ====================
HISTORY_COALESCE_SECONDS: Final[int] = 60
MAX_ACCOUNT_LOGS: Final[int] = 50
MAX_SYSTEM_LOGS: Final[int] = 500
MAX_POINT_HISTORY: Final[int] = 200
MAX_READ_ITERATIONS: Final[int] = 35
MAX_GAP_DAYS: Final[int] = 2000
DEFAULT_READ_MAX: Final[int] = 30
DEFAULT_CHECKIN_MAX: Final[int] = 7
SIGN_STEP_PAUSE: Final[float] = 2.0  # 签到子调用之间的固定停顿（秒）
SIGN_STEP_JITTER: Final[float] = 2.0

SNAPSHOT_VERSION: Final[str] = "3.9.1"
BACKUP_FILE_PREFIX: Final[str] = "MS_Rewards_Backup_"
CLOUD_BACKUP_FILENAME: Final[str] = "ms_rewards_backup.json"
DEFAULT_CLOUD_FOLDER: Final[str] = "MS_Rewards_Backups"

READ_OFFER_ID: Final[str] = "ENUS_readarticle3_30points"
SAPPHIRE_OFFER_ID: Final[str] = "Gamification_Sapphire_DailyCheckIn"


# ==================== 账号状态 ====================
class AccountStatus(str, Enum):
    """账号状态枚举"""
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"
    RISK = "risk"
    WAITING = "waiting"


# 导入/重启时需要复位为 idle 的中间态
TRANSIENT_STATUSES: Final[frozenset[AccountStatus]] = frozenset({
    AccountStatus.RUNNING,
    AccountStatus.WAITING,
})


# ==================== 日志类型 ====================
class LogType(str, Enum):
    """日志类型枚举"""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    RISK = "risk"


# ==================== 日志来源 ====================
class LogSource(str, Enum):
    """系统日志来源"""
    SYSTEM = "System"
    SCHEDULER = "Scheduler"
    BACKUP = "Backup"
    WEBDAV = "WebDAV"
    PUSH = "Push"
    USER = "User"


# ==================== 运行模式 ====================
class RunMode(str, Enum):
    """任务运行模式"""
    ALL = "all"
    SIGN_ONLY = "sign_only"
    READ_ONLY = "read_only"

    @property
    def runs_sign(self) -> bool:
        return self in (RunMode.ALL, RunMode.SIGN_ONLY)

    @property
    def runs_read(self) -> bool:
        return self in (RunMode.ALL, RunMode.READ_ONLY)


# ==================== 签到子调用结果 ====================
class SignOutcome(str, Enum):
    """签到子调用的结果分类"""
    EARNED = "earned"  # 获得积分
    COMPLETED = "completed"  # 调用成功但无积分
    ALREADY_DONE = "already_done"  # 今日已领取
    FAILED = "failed"
    RISK = "risk"


# ==================== 状态展示 ====================
STATUS_LABELS: Final[dict[AccountStatus, str]] = {
    AccountStatus.SUCCESS: "✅ 成功",
    AccountStatus.RISK: "🚨 风险",
    AccountStatus.ERROR: "❌ 失败",
    AccountStatus.IDLE: "💤 闲置",
    AccountStatus.RUNNING: "⏳ 运行中",
    AccountStatus.WAITING: "🕒 等待",
}

RESULT_LABELS: Final[dict[AccountStatus, str]] = {
    AccountStatus.SUCCESS: "✅ 执行成功",
    AccountStatus.RISK: "🚨 风险警报",
    AccountStatus.ERROR: "❌ 执行失败",
}
