"""SchedulerService 测试"""

import asyncio
from datetime import datetime

import pytest

from rewards_bot.config.constants import AccountStatus, LogSource
from rewards_bot.core.timers import IdleResetTimers
from rewards_bot.exceptions import SyncError
from rewards_bot.models.run_result import RunResult
from rewards_bot.services.scheduler import GLOBAL_TIMER_ID, SchedulerService, is_entry_due

pytestmark = pytest.mark.unit

FOUR_AM = datetime(2026, 10, 18, 4, 0, 20)


class FakeRunner:
    """记录执行顺序的运行器"""

    def __init__(self, account_repo, on_run=None):
        self.account_repo = account_repo
        self.idle_timers = IdleResetTimers(account_repo)
        self.on_run = on_run
        self.calls: list[str] = []

    async def run(self, account_id, mode=None, source=LogSource.SCHEDULER):
        self.calls.append(account_id)
        if self.on_run:
            self.on_run(account_id)
        account = self.account_repo.update(account_id, status=AccountStatus.SUCCESS)
        return RunResult(account_id, 5, account.total_points + 5, AccountStatus.SUCCESS)


class FakeNotifier:
    def __init__(self):
        self.batches: list[list[RunResult]] = []
        self.singles: list[RunResult] = []

    async def notify_batch(self, results):
        self.batches.append(results)
        return 1

    async def notify_single(self, result):
        self.singles.append(result)
        return 1


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def scheduler(account_repo, config_repo, system_log, notifier):
    return SchedulerService(
        account_repo=account_repo,
        config_repo=config_repo,
        system_log=system_log,
        runner=FakeRunner(account_repo),
        notifier=notifier,
    )


def test_entry_due_once_per_minute():
    assert is_entry_due("0 4 * * *", None, FOUR_AM)
    assert not is_entry_due("0 4 * * *", FOUR_AM.replace(second=5), FOUR_AM)
    assert is_entry_due("0 4 * * *", datetime(2026, 10, 17, 4, 0), FOUR_AM)
    assert not is_entry_due("0 4 * * *", None, FOUR_AM.replace(minute=1))
    assert not is_entry_due("not a cron", None, FOUR_AM)


@pytest.mark.asyncio
async def test_batch_processes_enabled_accounts_in_order(scheduler, make_account, notifier, sleeps):
    first = make_account()
    disabled = make_account(enabled=False)
    second = make_account()
    third = make_account()

    results = await scheduler.run_batch(LogSource.USER)

    assert scheduler.runner.calls == [first.id, second.id, third.id]
    assert disabled.id not in scheduler.runner.calls
    assert sleeps == [5, 5]
    assert len(results) == 3
    assert notifier.batches == [results]


@pytest.mark.asyncio
async def test_batch_skips_risk_and_completed_accounts(scheduler, config_repo, make_account):
    config_repo.get().skip_daily_completed = True
    pending = make_account()
    make_account(status=AccountStatus.RISK)
    make_account(last_daily_success=datetime.now())

    targets = scheduler.select_batch_targets(datetime.now())

    assert [account.id for account in targets] == [pending.id]


@pytest.mark.asyncio
async def test_stop_request_ends_batch_between_accounts(scheduler, account_repo, make_account, notifier, sleeps):
    accounts = [make_account() for _ in range(3)]
    scheduler.runner.on_run = lambda account_id: scheduler.stop()

    results = await scheduler.run_batch(LogSource.USER)

    assert scheduler.runner.calls == [accounts[0].id]
    assert len(results) == 1
    assert notifier.batches == [results]
    assert not scheduler.batch_running


@pytest.mark.asyncio
async def test_import_refused_while_batch_running(scheduler, account_repo, make_account, sleeps):
    accounts = [make_account() for _ in range(2)]
    document = scheduler.backup.export_document()
    errors = []

    def try_import(account_id):
        try:
            scheduler.backup.apply_document(document)
        except SyncError as e:
            errors.append(str(e))

    scheduler.runner.on_run = try_import

    await scheduler.run_batch(LogSource.USER)

    assert len(errors) == 2
    assert all("批量任务" in message for message in errors)
    assert scheduler.backup.apply_document(document) == len(accounts)


def test_collaborators_share_injected_empty_system_log(scheduler, system_log):
    assert len(system_log) == 0
    assert scheduler.system_log is system_log
    assert scheduler.notifier.system_log is system_log
    assert scheduler.backup.system_log is system_log
    assert scheduler.cloud_sync.system_log is system_log


@pytest.mark.asyncio
async def test_global_entry_fires_once_per_minute(scheduler, config_repo, make_account):
    batches = []

    async def fake_batch(source=LogSource.USER, mode=None):
        batches.append(source)
        return []

    scheduler.run_batch = fake_batch

    tasks = scheduler.tick(FOUR_AM)
    assert len(tasks) == 1
    assert config_repo.get().cron.last_run_time == FOUR_AM

    assert scheduler.tick(FOUR_AM.replace(second=50)) == []
    await asyncio.gather(*tasks)
    assert batches == [LogSource.SCHEDULER]


@pytest.mark.asyncio
async def test_reset_allows_refire_in_same_minute(scheduler, config_repo):
    async def fake_batch(source=LogSource.USER, mode=None):
        return []

    scheduler.run_batch = fake_batch

    first = scheduler.tick(FOUR_AM)
    assert scheduler.reset_entry(GLOBAL_TIMER_ID)
    assert config_repo.get().cron.last_run_time is None

    second = scheduler.tick(FOUR_AM.replace(second=40))
    assert len(second) == 1
    await asyncio.gather(*first, *second)


@pytest.mark.asyncio
async def test_account_entry_requires_enabled_and_cron_toggle(scheduler, account_repo, config_repo, make_account):
    config_repo.get().cron.enabled = False
    moment = datetime(2026, 10, 18, 8, 30, 5)
    own = make_account(cron_expression="30 8 * * *")
    make_account(cron_expression="30 8 * * *", cron_enabled=False)
    make_account(cron_expression="30 8 * * *", enabled=False)
    make_account()

    started = []

    async def fake_single(account_id, source=LogSource.USER, mode=None):
        started.append(account_id)

    scheduler.run_single = fake_single

    tasks = scheduler.tick(moment)
    await asyncio.gather(*tasks)

    assert started == [own.id]
    assert account_repo.get(own.id).last_run_time == moment
    assert scheduler.tick(moment.replace(second=45)) == []


@pytest.mark.asyncio
async def test_running_account_is_skipped_by_its_entry(scheduler, config_repo, make_account):
    config_repo.get().cron.enabled = False
    make_account(cron_expression="30 8 * * *", status=AccountStatus.RUNNING)

    assert scheduler.tick(datetime(2026, 10, 18, 8, 30)) == []


@pytest.mark.asyncio
async def test_global_entry_skipped_while_batch_running(scheduler, system_log):
    scheduler._batch_running = True

    assert scheduler.tick(FOUR_AM) == []
    assert "跳过" in system_log.recent(1)[0].message


def test_toggle_account_timer_flips_cron_toggle(scheduler, account_repo, make_account):
    account = make_account(cron_expression="0 9 * * *")

    assert scheduler.toggle_entry(account.id) is False
    assert account_repo.get(account.id).cron_enabled is False
    assert account_repo.get(account.id).enabled is True
    assert scheduler.toggle_entry("no-such-timer") is None


def test_list_timers_includes_builtin_and_account_entries(scheduler, make_account):
    account = make_account(cron_expression="0 9 * * *")
    make_account()

    timers = scheduler.list_timers(FOUR_AM)

    assert [timer.id for timer in timers] == [GLOBAL_TIMER_ID, "backup", account.id]
    assert timers[0].next_run_time == datetime(2026, 10, 19, 4, 0)
