"""Cron 表达式工具（五段式）"""

import logging
from datetime import datetime, timedelta

from croniter import croniter

from rewards_bot.core.timezone import now

logger = logging.getLogger(__name__)

# 已经报告过的无效表达式，避免每次心跳刷屏
_reported_invalid: set[str] = set()


def validate_cron(expression: str | None) -> bool:
    """校验五段式 Cron 表达式"""
    if not expression or not expression.strip():
        return False
    if len(expression.split()) != 5:
        return False
    return bool(croniter.is_valid(expression))


def _check(expression: str | None) -> bool:
    if validate_cron(expression):
        return True
    if expression and expression not in _reported_invalid:
        _reported_invalid.add(expression)
        logger.warning(f"无效的 Cron 表达式，已忽略: {expression!r}")
    return False


def next_run(expression: str | None, base: datetime | None = None) -> datetime | None:
    """
    计算下一次运行时间

    Args:
        expression: Cron 表达式
        base: 基准时间（默认当前时间）

    Returns:
        下一次运行时间，表达式无效时返回 None
    """
    if not _check(expression):
        return None
    return croniter(expression, base or now()).get_next(datetime)


def is_due(expression: str | None, moment: datetime | None = None) -> bool:
    """
    判断表达式是否在当前这一分钟内到期

    从 moment 前推 60 秒计算下一次运行时间，落在 moment 同一分钟内即为到期。
    """
    moment = moment or now()
    upcoming = next_run(expression, moment - timedelta(seconds=60))
    if upcoming is None:
        return False
    return upcoming.replace(second=0, microsecond=0) == moment.replace(second=0, microsecond=0)
