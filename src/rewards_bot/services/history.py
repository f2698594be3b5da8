"""积分历史记录与按日聚合"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta

from rewards_bot.config.constants import (
    HISTORY_COALESCE_SECONDS,
    MAX_GAP_DAYS,
    MAX_POINT_HISTORY,
)
from rewards_bot.core.timezone import is_same_day, now, to_naive_local
from rewards_bot.models.account import Account, PointHistoryItem

logger = logging.getLogger(__name__)


@dataclass
class DayGroup:
    """单日聚合结果"""

    date: date
    points: int
    diff: int
    items: list[PointHistoryItem] = field(default_factory=list)
    is_gap: bool = False


def record_point(
    history: list[PointHistoryItem],
    points: int,
    at: datetime | None = None,
) -> list[PointHistoryItem]:
    """
    记录一次积分读数，返回新的历史列表

    - 积分为 0 时不记录
    - 与最后一条同日且积分相同时不记录
    - 距离最后一条不足 60 秒时覆盖最后一条
    - 最多保留 200 条，超出丢弃最旧的
    """
    if not points:
        return history

    at = to_naive_local(at) if at else now()
    last = history[-1] if history else None

    if last is not None:
        if last.points == points and is_same_day(last.date, at):
            return history
        if (at - to_naive_local(last.date)).total_seconds() < HISTORY_COALESCE_SECONDS:
            return [*history[:-1], replace(last, date=at, points=points)]

    updated = [*history, PointHistoryItem(date=at, points=points)]
    return updated[-MAX_POINT_HISTORY:]


def aggregate_by_day(history: list[PointHistoryItem]) -> list[DayGroup]:
    """
    按自然日聚合积分历史（最近的日期在前）

    每天取当天最后一条读数，diff 为相对前一个有记录日的变化。
    首尾之间缺失的日期补齐为 is_gap=True 的空组，沿用上一个已知积分。
    """
    if not history:
        return []

    ordered = sorted(history, key=lambda item: to_naive_local(item.date))
    by_day: dict[date, list[PointHistoryItem]] = {}
    for item in ordered:
        by_day.setdefault(to_naive_local(item.date).date(), []).append(item)

    days = sorted(by_day)
    groups: list[DayGroup] = []
    previous_points: int | None = None
    gap_days = 0

    for index, day in enumerate(days):
        if index > 0:
            cursor = days[index - 1] + timedelta(days=1)
            while cursor < day and gap_days < MAX_GAP_DAYS:
                groups.append(DayGroup(date=cursor, points=previous_points, diff=0, is_gap=True))
                cursor += timedelta(days=1)
                gap_days += 1
            if cursor < day:
                logger.warning(f"积分历史空缺超过 {MAX_GAP_DAYS} 天，已停止补齐")

        items = by_day[day]
        points = items[-1].points
        diff = points - previous_points if previous_points is not None else 0
        groups.append(DayGroup(date=day, points=points, diff=diff, items=items))
        previous_points = points

    groups.reverse()
    return groups


def daily_diff(account: Account, reference: datetime | None = None) -> int:
    """
    今日积分增量

    当前积分减去最近一条非今日记录；只有今日记录时减去第一条记录。
    """
    history = account.point_history
    if not history:
        return 0

    reference = reference or now()
    for item in reversed(history):
        if not is_same_day(item.date, reference):
            return account.total_points - item.points
    return account.total_points - history[0].points
