"""共享测试夹具"""

import asyncio
import itertools
from datetime import timedelta

import pytest

from rewards_bot.clients.auth import TokenBundle
from rewards_bot.clients.base import RemoteResponse
from rewards_bot.config.constants import READ_OFFER_ID, SAPPHIRE_OFFER_ID
from rewards_bot.core.timezone import now
from rewards_bot.exceptions import TokenError
from rewards_bot.models.account import Account
from rewards_bot.models.config import AppConfig, LocalBackupConfig
from rewards_bot.models.schedule import ScheduleEntry
from rewards_bot.repositories.account_repository import AccountRepository
from rewards_bot.repositories.config_repository import ConfigRepository
from rewards_bot.repositories.system_log_repository import SystemLogRepository

_ids = itertools.count(1)


def dashboard_response(balance: int, read_progress: int = 0, read_max: int = 30, status_code: int = 200):
    """构造 Dashboard 响应"""
    return RemoteResponse(status_code, {
        "response": {
            "balance": balance,
            "promotions": [
                {"attributes": {"offerid": READ_OFFER_ID, "progress": str(read_progress), "max": str(read_max)}},
            ],
        },
    })


def activity_response(points: int = 0):
    return RemoteResponse(200, {"response": {"activity": {"p": points}}})


def is_checkin_payload(payload: dict) -> bool:
    """签到序列的第三个子调用（每日签到）"""
    attrs = payload.get("attributes") or {}
    return payload["type"] == 101 and bool(payload["id"]) and attrs.get("offerid") == SAPPHIRE_OFFER_ID


def is_read_payload(payload: dict) -> bool:
    return (payload.get("attributes") or {}).get("offerid") == READ_OFFER_ID


class FakeRewardsClient:
    """按顺序返回预设 Dashboard 响应，活动提交交给 on_activity 决定"""

    def __init__(self, dashboards, on_activity=None):
        self.dashboards = list(dashboards)
        self.on_activity = on_activity or (lambda payload: activity_response())
        self.dashboard_calls = 0
        self.payloads: list[dict] = []

    async def get_dashboard(self, access_token):
        self.dashboard_calls += 1
        if len(self.dashboards) > 1:
            return self.dashboards.pop(0)
        return self.dashboards[0]

    async def submit_activity(self, payload, headers):
        self.payloads.append(payload)
        return self.on_activity(payload)


class FakeAuthClient:
    """记录刷新调用的授权客户端"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.renewed: list[str] = []
        self.exchanged: list[str] = []

    async def renew(self, refresh_token):
        self.renewed.append(refresh_token)
        if self.fail:
            raise TokenError("invalid_grant")
        return TokenBundle(access_token="fresh-access", refresh_token="M.rotated", expires_in=3600)

    async def exchange_code(self, code):
        self.exchanged.append(code)
        return TokenBundle(access_token="code-access", refresh_token="M.from-code", expires_in=3600)


@pytest.fixture
def account_repo():
    return AccountRepository()


@pytest.fixture
def app_config(tmp_path):
    return AppConfig(
        cron=ScheduleEntry(cron_expression="0 4 * * *", enabled=True),
        local_backup=LocalBackupConfig(
            schedule=ScheduleEntry(cron_expression="0 12 * * *"),
            path=str(tmp_path / "backups"),
            max_files=3,
        ),
        delay_between_accounts=5,
        min_delay=0,
        max_delay=0,
        auto_idle_delay=0,
    )


@pytest.fixture
def config_repo(app_config):
    return ConfigRepository(app_config)


@pytest.fixture
def system_log():
    return SystemLogRepository()


@pytest.fixture
def make_account(account_repo):
    """创建并保存账号，默认持有 2 小时后过期的 Access Token"""

    def _make(name: str | None = None, **fields) -> Account:
        index = next(_ids)
        data = {
            "id": f"acc-{index:04d}",
            "created_at": now(),
            "name": name or f"账号 {index}",
            "refresh_token": "M.validtoken" + "x" * 60,
            "access_token": "cached-access",
            "token_expires_at": now() + timedelta(hours=2),
        }
        data.update(fields)
        return account_repo.add(Account(**data))

    return _make


@pytest.fixture
def sleeps(monkeypatch):
    """拦截 asyncio.sleep，记录请求的秒数并立即让出控制权"""
    requested: list[float] = []
    original = asyncio.sleep

    async def fake_sleep(seconds, *args, **kwargs):
        requested.append(seconds)
        await original(0)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return requested
