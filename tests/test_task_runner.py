"""TaskRunner 测试"""

import asyncio

import pytest

from rewards_bot.clients.base import RemoteResponse
from rewards_bot.config.constants import MAX_READ_ITERATIONS, AccountStatus, LogSource, LogType, RunMode
from rewards_bot.core.timers import IdleResetTimers
from rewards_bot.services.credential import CredentialManager
from rewards_bot.services.reward_tasks import RewardTasks
from rewards_bot.services.task_runner import TaskRunner
from tests.conftest import (
    FakeAuthClient,
    FakeRewardsClient,
    activity_response,
    dashboard_response,
    is_checkin_payload,
    is_read_payload,
)

pytestmark = pytest.mark.unit


def build_runner(account_repo, config_repo, system_log, client):
    return TaskRunner(
        account_repo=account_repo,
        config_repo=config_repo,
        system_log=system_log,
        credentials=CredentialManager(FakeAuthClient(), account_repo, refresh_threshold_minutes=15),
        tasks=RewardTasks(client),
        idle_timers=IdleResetTimers(account_repo),
    )


@pytest.mark.asyncio
async def test_sign_points_counted_when_read_already_complete(account_repo, config_repo, system_log, make_account, sleeps):
    account = make_account()
    client = FakeRewardsClient(
        [dashboard_response(100, read_progress=2, read_max=2), dashboard_response(105, read_progress=2, read_max=2)],
        on_activity=lambda payload: activity_response(5) if is_checkin_payload(payload) else activity_response(),
    )
    runner = build_runner(account_repo, config_repo, system_log, client)

    result = await runner.run(account.id)

    assert result.status == AccountStatus.SUCCESS
    assert result.earned == 5
    assert result.total_points == 105
    assert result.sign is not None and result.sign.points == 5
    assert not any(is_read_payload(p) for p in client.payloads)

    stored = account_repo.get(account.id)
    assert stored.status == AccountStatus.SUCCESS
    assert stored.total_points == 105
    assert stored.last_daily_success is not None
    assert [item.points for item in stored.point_history] == [105]


@pytest.mark.asyncio
async def test_forbidden_dashboard_without_ignore_risk_ends_in_risk(account_repo, config_repo, system_log, make_account, sleeps):
    account = make_account()
    client = FakeRewardsClient([RemoteResponse(403, {"error": "Forbidden"})])
    runner = build_runner(account_repo, config_repo, system_log, client)

    result = await runner.run(account.id)

    assert result.status == AccountStatus.RISK
    assert account_repo.get(account.id).status == AccountStatus.RISK
    assert client.payloads == []
    assert account_repo.get(account.id).logs[-1].type == LogType.RISK
    assert any("风险警报" in log.message for log in system_log.recent(10))


@pytest.mark.asyncio
async def test_forbidden_dashboard_with_ignore_risk_continues(account_repo, config_repo, system_log, make_account, sleeps):
    account = make_account(ignore_risk=True, total_points=80)
    client = FakeRewardsClient([RemoteResponse(403, {"error": "Forbidden"})])
    runner = build_runner(account_repo, config_repo, system_log, client)

    result = await runner.run(account.id, RunMode.SIGN_ONLY)

    assert result.status == AccountStatus.SUCCESS
    assert len(client.payloads) == 3
    # 不可用的响应不会覆盖已知积分
    assert account_repo.get(account.id).total_points == 80


@pytest.mark.asyncio
async def test_suspended_body_aborts_even_with_ignore_risk(account_repo, config_repo, system_log, make_account, sleeps):
    account = make_account(ignore_risk=True)
    client = FakeRewardsClient([RemoteResponse(403, {"error": "Account suspended"})])
    runner = build_runner(account_repo, config_repo, system_log, client)

    result = await runner.run(account.id)

    assert result.status == AccountStatus.RISK


@pytest.mark.asyncio
async def test_read_loop_stops_at_iteration_cap(account_repo, config_repo, system_log, make_account, sleeps):
    account = make_account()
    client = FakeRewardsClient([dashboard_response(100, read_progress=0, read_max=500)])
    runner = build_runner(account_repo, config_repo, system_log, client)

    result = await runner.run(account.id, RunMode.READ_ONLY)

    reads = [p for p in client.payloads if is_read_payload(p)]
    assert len(reads) == MAX_READ_ITERATIONS
    assert result.status == AccountStatus.SUCCESS


@pytest.mark.asyncio
async def test_human_delay_observed_between_reads(account_repo, config_repo, system_log, make_account, sleeps):
    config_repo.get().min_delay = 3
    config_repo.get().max_delay = 3
    account = make_account()
    client = FakeRewardsClient([
        dashboard_response(100, read_progress=28, read_max=30),
        dashboard_response(102, read_progress=30, read_max=30),
    ])
    runner = build_runner(account_repo, config_repo, system_log, client)

    await runner.run(account.id, RunMode.READ_ONLY)

    assert sleeps == [3, 3]
    assert account_repo.get(account.id).stats.read_progress == 30


@pytest.mark.asyncio
async def test_concurrent_start_is_rejected(account_repo, config_repo, system_log, make_account):
    account = make_account()
    gate = asyncio.Event()

    class GatedClient(FakeRewardsClient):
        async def get_dashboard(self, access_token):
            await gate.wait()
            return await super().get_dashboard(access_token)

    client = GatedClient([dashboard_response(100, read_progress=30, read_max=30)])
    runner = build_runner(account_repo, config_repo, system_log, client)
    config_repo.get().run_sign = False

    first = asyncio.create_task(runner.run(account.id))
    await asyncio.sleep(0)

    running = account_repo.get(account.id)
    assert running.status == AccountStatus.RUNNING
    assert running.last_run_time is not None

    second = await runner.run(account.id, source=LogSource.USER)
    assert second.rejected
    assert second.status == AccountStatus.RUNNING
    assert account_repo.get(account.id).run_id == running.run_id

    gate.set()
    result = await first
    assert result.status == AccountStatus.SUCCESS


@pytest.mark.asyncio
async def test_unknown_account_is_rejected(account_repo, config_repo, system_log):
    runner = build_runner(account_repo, config_repo, system_log, FakeRewardsClient([dashboard_response(0)]))

    result = await runner.run("missing")

    assert result.rejected
    assert result.status == AccountStatus.ERROR


@pytest.mark.asyncio
async def test_remote_failure_ends_in_error_and_arms_idle_reset(account_repo, config_repo, system_log, make_account):
    config_repo.get().auto_idle_delay = 5
    account = make_account()
    client = FakeRewardsClient([RemoteResponse(500, None, "Bad Gateway")])
    runner = build_runner(account_repo, config_repo, system_log, client)

    result = await runner.run(account.id)

    assert result.status == AccountStatus.ERROR
    assert runner.idle_timers.pending(account.id)
    runner.idle_timers.cancel_all()


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    RemoteResponse(500, {"message": "Internal Server Error"}),
    RemoteResponse(200, {"message": "ok"}),
])
async def test_unusable_dashboard_ends_in_error_and_keeps_points(
    account_repo, config_repo, system_log, make_account, sleeps, response
):
    account = make_account(total_points=5000)
    client = FakeRewardsClient([response])
    runner = build_runner(account_repo, config_repo, system_log, client)

    result = await runner.run(account.id, RunMode.SIGN_ONLY)
    runner.idle_timers.cancel_all()

    assert result.status == AccountStatus.ERROR
    stored = account_repo.get(account.id)
    assert stored.status == AccountStatus.ERROR
    assert stored.total_points == 5000
    assert client.payloads == []


@pytest.mark.asyncio
async def test_risk_does_not_arm_idle_reset(account_repo, config_repo, system_log, make_account):
    config_repo.get().auto_idle_delay = 5
    account = make_account()
    client = FakeRewardsClient([RemoteResponse(429, {"error": "Too many requests"})])
    runner = build_runner(account_repo, config_repo, system_log, client)

    result = await runner.run(account.id)

    assert result.status == AccountStatus.RISK
    assert not runner.idle_timers.pending(account.id)


@pytest.mark.asyncio
async def test_refresh_account_updates_points_and_returns_to_idle(account_repo, config_repo, system_log, make_account):
    account = make_account(status=AccountStatus.SUCCESS)
    client = FakeRewardsClient([dashboard_response(321, read_progress=4, read_max=30)])
    runner = build_runner(account_repo, config_repo, system_log, client)

    updated = await runner.refresh_account(account.id)

    assert updated.status == AccountStatus.IDLE
    assert updated.total_points == 321
    assert updated.stats.read_progress == 4
    assert client.payloads == []
