"""时区处理模块

项目内部统一使用配置时区下的 naive datetime（墙上时间）。
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from rewards_bot.config.settings import get_settings

# 活动接口按东八区计算签到日期，与本地配置时区无关
BEIJING_TZ = timezone(timedelta(hours=8))


def get_timezone() -> ZoneInfo:
    """获取配置的时区"""
    return ZoneInfo(get_settings().timezone)


def now() -> datetime:
    """获取当前时区的当前时间（返回 naive datetime）"""
    return datetime.now(get_timezone()).replace(tzinfo=None)


def to_local(dt: datetime) -> datetime:
    """将 datetime 转换为本地时区（naive 视为已是本地时间）"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=get_timezone())
    return dt.astimezone(get_timezone())


def to_naive_local(dt: datetime) -> datetime:
    """将任意 datetime 规整为本地 naive 时间"""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(get_timezone()).replace(tzinfo=None)


def format_datetime(dt: datetime | None, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """格式化 datetime 为本地时区字符串"""
    if dt is None:
        return "---"
    return to_local(dt).strftime(fmt)


def is_same_day(dt: datetime | None, reference: datetime | None = None) -> bool:
    """判断 dt 是否与参考时间（默认当前时间）处于同一自然日"""
    if dt is None:
        return False
    reference = reference or now()
    return to_naive_local(dt).date() == to_naive_local(reference).date()


def beijing_date_num(moment: datetime | None = None) -> int:
    """
    获取东八区日期数值 YYYYMMDD

    Args:
        moment: 参考时间，naive 视为本地时间

    Returns:
        形如 20250101 的整数
    """
    moment = moment or now()
    aware = to_local(moment).astimezone(BEIJING_TZ)
    return int(aware.strftime("%Y%m%d"))
