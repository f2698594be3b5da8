"""风控信号识别与处置策略"""

import json
import logging
from typing import Any

from rewards_bot.config.constants import AccountStatus
from rewards_bot.exceptions import RiskDetectedError

logger = logging.getLogger(__name__)

_RISK_STATUS_CODES = (403, 429)


def _body_text(data: Any) -> str:
    try:
        return json.dumps(data, ensure_ascii=False).lower()
    except (TypeError, ValueError):
        return str(data).lower()


def detect_risk(data: Any, status_code: int) -> str | None:
    """
    检测响应中的风控信号

    Returns:
        风控描述，未命中时返回 None
    """
    if status_code in _RISK_STATUS_CODES:
        return f"请求被拒绝 ({status_code})"

    text = _body_text(data)
    if "suspended" in text:
        return "账号已被微软封禁 (Suspended)"
    if "risk" in text:
        return "账号存在风控风险 (Risk)"
    if "verification" in text:
        return "需要人工验证 (Verification)"
    return None


def is_suspended(data: Any) -> bool:
    """响应体是否明确标记为封禁"""
    return "suspended" in _body_text(data)


def enforce_risk_policy(data: Any, status_code: int, ignore_risk: bool, context: str = "") -> str | None:
    """
    按账号的 ignore_risk 设置处置风控信号

    - ignore_risk 为 False: 任何风控信号都抛出 RiskDetectedError
    - ignore_risk 为 True: 仅响应体明确封禁时抛出，其余信号只记录日志

    Returns:
        被忽略的软风控描述，无信号时返回 None

    Raises:
        RiskDetectedError: 需要中止的风控信号
    """
    message = detect_risk(data, status_code)
    if message is None:
        return None

    if not ignore_risk or is_suspended(data):
        raise RiskDetectedError(message, status_code=status_code)

    logger.warning(f"[忽略风控] {context} 检测到 {message}，继续执行")
    return message


def classify_exception(exc: BaseException) -> AccountStatus:
    """
    将运行异常映射为账号状态

    风控异常或消息中提到封禁/风控的异常归为 RISK，其余归为 ERROR。
    """
    if isinstance(exc, RiskDetectedError):
        return AccountStatus.RISK
    message = str(exc).lower()
    if "suspend" in message or "risk" in message:
        return AccountStatus.RISK
    return AccountStatus.ERROR
