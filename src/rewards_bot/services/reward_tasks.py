"""Rewards 任务调用（Dashboard、签到序列、阅读）"""

import asyncio
import logging
import random
import secrets
import uuid
from datetime import datetime
from typing import Any

from rewards_bot.clients.base import RemoteResponse
from rewards_bot.clients.dashboard import decode_dashboard
from rewards_bot.clients.rewards import RewardsClient
from rewards_bot.config.constants import (
    READ_OFFER_ID,
    SAPPHIRE_OFFER_ID,
    SIGN_STEP_JITTER,
    SIGN_STEP_PAUSE,
    SignOutcome,
    get_activity_headers,
    get_cn_headers,
    get_read_headers,
)
from rewards_bot.core.timezone import beijing_date_num
from rewards_bot.exceptions import RemoteError, RiskDetectedError
from rewards_bot.models.run_result import DashboardSnapshot, ReadResult, SignResult, SubCallResult
from rewards_bot.services.risk import enforce_risk_policy

logger = logging.getLogger(__name__)


def _earned_points(data: dict[str, Any]) -> int:
    activity = (data.get("response") or {}).get("activity") or {}
    try:
        return int(activity.get("p") or 0)
    except (TypeError, ValueError):
        return 0


def _error_description(data: dict[str, Any]) -> str | None:
    error = data.get("error")
    if not error:
        return None
    if isinstance(error, dict):
        return str(error.get("description") or data.get("message") or error.get("code") or "未知错误")
    return str(data.get("message") or error)


def _is_already_done(description: str) -> bool:
    lowered = description.lower()
    return "duplicate" in lowered or "already" in lowered


def build_sapphire_attributes(moment: datetime | None = None) -> dict[str, Any]:
    """Sapphire 签到属性，date 为东八区 YYYYMMDD 整数"""
    return {
        "offerid": SAPPHIRE_OFFER_ID,
        "date": beijing_date_num(moment),
        "signIn": False,
        "timezoneOffset": "08:00:00",
    }


class RewardTasks:
    """Rewards 任务调用"""

    def __init__(self, client: RewardsClient | None = None):
        self.client = client or RewardsClient()

    async def fetch_dashboard(self, access_token: str, ignore_risk: bool = False) -> DashboardSnapshot:
        """
        获取 Dashboard 快照

        Raises:
            RiskDetectedError: 风控信号
            RemoteError: 鉴权失败或响应格式异常
        """
        response = await self.client.get_dashboard(access_token)

        if response.status_code == 401:
            raise RemoteError("鉴权失败 (401)", 401)

        ignored = enforce_risk_policy(response.data, response.status_code, ignore_risk, "Dashboard")

        usable = isinstance(response.data, dict) and bool(response.data.get("response"))

        if ignored is None:
            if not response.ok:
                raise RemoteError(f"Dashboard 请求失败 (Status: {response.status_code})", response.status_code)
            if not usable:
                raise RemoteError(f"Dashboard 返回异常格式 (Status: {response.status_code})", response.status_code)

        snapshot = decode_dashboard(response.data)
        # 忽略风控后的不可用响应只用于继续执行，不覆盖已知积分
        if not usable:
            snapshot.degraded = True
        return snapshot

    async def _pause(self) -> None:
        await asyncio.sleep(SIGN_STEP_PAUSE + random.uniform(0, SIGN_STEP_JITTER))

    async def _sub_call(
        self,
        name: str,
        payload: dict[str, Any],
        headers: dict[str, str],
        ignore_risk: bool,
    ) -> SubCallResult:
        """执行单个签到子调用，异常与风控都转换为结果分类"""
        try:
            response: RemoteResponse = await self.client.submit_activity(payload, headers)
            enforce_risk_policy(response.data, response.status_code, ignore_risk, name)
        except RiskDetectedError as e:
            return SubCallResult(name=name, outcome=SignOutcome.RISK, message=str(e))
        except RemoteError as e:
            return SubCallResult(name=name, outcome=SignOutcome.FAILED, message=f"{name}异常: {e}")

        data = response.data if isinstance(response.data, dict) else {}

        description = _error_description(data)
        if description is not None:
            if _is_already_done(description):
                return SubCallResult(name=name, outcome=SignOutcome.ALREADY_DONE, message=f"{name}已签")
            return SubCallResult(name=name, outcome=SignOutcome.FAILED, message=f"{name}错误: {description}")

        if not response.ok:
            return SubCallResult(
                name=name,
                outcome=SignOutcome.FAILED,
                message=f"{name}失败 (Status: {response.status_code})",
            )

        earned = _earned_points(data)
        if earned > 0:
            return SubCallResult(name=name, outcome=SignOutcome.EARNED, points=earned, message=f"{name}+{earned}")
        return SubCallResult(name=name, outcome=SignOutcome.COMPLETED, message=f"{name}完成(0分)")

    async def sign(self, access_token: str, ignore_risk: bool = False) -> SignResult:
        """
        执行签到序列: 活跃心跳(103) -> Sapphire 签到(101) -> 每日签到(101)

        三个子调用互相独立，单个失败不影响后续调用。
        """
        heartbeat = await self._sub_call(
            "通用",
            {
                "amount": 1,
                "attributes": {},
                "id": str(uuid.uuid4()),
                "type": 103,
                "country": "cn",
                "risk_context": {},
                "channel": "SAAndroid",
            },
            get_activity_headers(access_token),
            ignore_risk,
        )
        await self._pause()

        sapphire = await self._sub_call(
            "Sapphire",
            {
                "amount": 1,
                "attributes": build_sapphire_attributes(),
                "id": "",
                "type": 101,
                "country": "cn",
                "risk_context": {},
                "channel": "SAAndroid",
            },
            get_activity_headers(access_token),
            ignore_risk,
        )
        await self._pause()

        checkin = await self._sub_call(
            "签到",
            {
                "amount": 1,
                "attributes": build_sapphire_attributes(),
                "id": str(uuid.uuid4()),
                "type": 101,
                "country": "cn",
                "risk_context": {},
                "channel": "SAAndroid",
            },
            get_cn_headers(access_token),
            ignore_risk,
        )

        result = SignResult(calls=[heartbeat, sapphire, checkin])
        logger.debug(f"签到序列结果: {[(c.name, c.outcome.value, c.points) for c in result.calls]}")
        return result

    async def read(self, access_token: str, ignore_risk: bool = False) -> ReadResult:
        """
        提交一次阅读

        Raises:
            RiskDetectedError: 风控信号
            RemoteError: 网络错误
        """
        payload = {
            "amount": 1,
            "country": "cn",
            "id": secrets.token_hex(32),
            "type": 101,
            "attributes": {"offerid": READ_OFFER_ID},
        }
        response = await self.client.submit_activity(payload, get_read_headers(access_token))
        data = response.data if isinstance(response.data, dict) else {}

        description = _error_description(data)
        if description is not None and "already" in description.lower():
            return ReadResult(success=True, message="阅读已完成")

        enforce_risk_policy(response.data, response.status_code, ignore_risk, "阅读")

        if response.ok:
            return ReadResult(success=True, message="阅读心跳")
        return ReadResult(success=False, message=f"阅读失败: {response.status_code}")
