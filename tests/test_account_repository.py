"""AccountRepository 测试"""

import pytest

from rewards_bot.config.constants import MAX_ACCOUNT_LOGS, AccountStatus, LogType

pytestmark = pytest.mark.unit


def test_update_returns_new_snapshot(account_repo, make_account):
    account = make_account()

    updated = account_repo.update(account.id, total_points=42)

    assert updated.total_points == 42
    assert account.total_points == 0
    assert account_repo.get(account.id) is updated
    assert account_repo.update("missing", total_points=1) is None


def test_duplicate_id_rejected(account_repo, make_account):
    account = make_account()

    with pytest.raises(ValueError):
        account_repo.add(account)


def test_log_ring_keeps_latest_entries(account_repo, make_account):
    account = make_account()

    for i in range(MAX_ACCOUNT_LOGS + 10):
        account_repo.add_log(account.id, f"line {i}", LogType.INFO)

    logs = account_repo.get(account.id).logs
    assert len(logs) == MAX_ACCOUNT_LOGS
    assert logs[0].message == "line 10"
    assert logs[-1].message == f"line {MAX_ACCOUNT_LOGS + 9}"


def test_try_start_run_is_exclusive(account_repo, make_account):
    account = make_account(status=AccountStatus.RISK, run_id=7)

    started = account_repo.try_start_run(account.id)
    assert started.status == AccountStatus.RUNNING
    assert started.run_id == 8
    assert started.last_run_time is not None

    assert account_repo.try_start_run(account.id) is None
    assert account_repo.get(account.id).run_id == 8
    assert account_repo.try_start_run("missing") is None
