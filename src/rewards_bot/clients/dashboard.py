"""Dashboard 响应解码

promotions 按 offerid 映射到固定的任务类型，无法识别的条目归为 UNKNOWN 并忽略。
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from rewards_bot.config.constants import DEFAULT_CHECKIN_MAX, DEFAULT_READ_MAX
from rewards_bot.models.account import AccountStats, RedeemGoal
from rewards_bot.models.run_result import DashboardSnapshot

logger = logging.getLogger(__name__)


class PromotionKind(str, Enum):
    """任务类型"""
    READ = "read"
    CHECKIN = "checkin"
    PC_SEARCH = "pc_search"
    MOBILE_SEARCH = "mobile_search"
    DAILY_ACTIVITY = "daily_activity"
    DAILY_SET = "daily_set"
    UNKNOWN = "unknown"


@dataclass
class Promotion:
    """单个任务条目"""

    kind: PromotionKind
    offer_id: str
    title: str
    progress: int
    max: int


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def classify_offer(offer_id: str) -> PromotionKind:
    """根据 offerid 判定任务类型（大小写不敏感）"""
    offer_id = offer_id.lower()

    if offer_id == "enus_readarticle3_30points":
        return PromotionKind.READ
    if offer_id == "gamification_sapphire_dailycheckin":
        return PromotionKind.CHECKIN
    if "search" in offer_id:
        if "pc" in offer_id or "level2" in offer_id or "desktop" in offer_id:
            return PromotionKind.PC_SEARCH
        if "mobile" in offer_id:
            return PromotionKind.MOBILE_SEARCH
        return PromotionKind.UNKNOWN
    if "zhcn" in offer_id or "zhstar" in offer_id or "campaign" in offer_id:
        return PromotionKind.DAILY_ACTIVITY
    if "dailyset" in offer_id:
        return PromotionKind.DAILY_SET
    return PromotionKind.UNKNOWN


def decode_promotion(raw: dict[str, Any]) -> Promotion:
    """解码单个 promotion"""
    attrs = raw.get("attributes") or {}
    offer_id = str(attrs.get("offerid") or "")
    return Promotion(
        kind=classify_offer(offer_id),
        offer_id=offer_id,
        title=str(raw.get("title") or attrs.get("title") or ""),
        progress=_to_int(attrs.get("progress")),
        max=_to_int(attrs.get("max")),
    )


def decode_dashboard(data: Any) -> DashboardSnapshot:
    """
    解码 Dashboard 响应

    Args:
        data: 接口返回的 JSON（{"response": {"balance", "promotions", "redeemGoal"}}）

    Returns:
        DashboardSnapshot，缺失字段取默认值
    """
    body = data.get("response") if isinstance(data, dict) else None
    body = body or {}

    stats = AccountStats()

    goal = body.get("redeemGoal")
    if isinstance(goal, dict):
        stats.redeem_goal = RedeemGoal(
            title=goal.get("title") or "未知目标",
            price=_to_int(goal.get("price")),
            progress=_to_int(goal.get("progress")),
        )

    promotions = body.get("promotions")
    if not isinstance(promotions, list):
        promotions = []

    for raw in promotions:
        if not isinstance(raw, dict):
            continue
        promotion = decode_promotion(raw)
        logger.debug(f"任务: {promotion.title} ({promotion.offer_id}) {promotion.progress}/{promotion.max}")

        kind = promotion.kind
        if kind == PromotionKind.READ:
            stats.read_max = promotion.max if promotion.max > 0 else DEFAULT_READ_MAX
            stats.read_progress = promotion.progress
        elif kind == PromotionKind.CHECKIN:
            stats.checkin_max = promotion.max if promotion.max > 0 else DEFAULT_CHECKIN_MAX
            stats.checkin_progress = promotion.progress
        elif kind == PromotionKind.PC_SEARCH:
            # 多档 PC 搜索任务取上限最高的一档
            if promotion.max > stats.pc_search_max:
                stats.pc_search_max = promotion.max
                stats.pc_search_progress = promotion.progress
        elif kind == PromotionKind.MOBILE_SEARCH:
            if promotion.max > stats.mobile_search_max:
                stats.mobile_search_max = promotion.max
                stats.mobile_search_progress = promotion.progress
        elif kind == PromotionKind.DAILY_ACTIVITY and promotion.max > 0:
            stats.daily_activities_max += promotion.max
            stats.daily_activities_progress += promotion.progress
        elif kind == PromotionKind.DAILY_SET and promotion.max > 0:
            stats.daily_set_max += promotion.max
            stats.daily_set_progress += promotion.progress

    return DashboardSnapshot(total_points=_to_int(body.get("balance")), stats=stats)
