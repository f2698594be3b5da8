"""AccountManager 测试"""

import pytest

from rewards_bot.exceptions import ConfigurationError, CredentialInputError
from rewards_bot.services.account_manager import AccountManager
from rewards_bot.services.credential import CredentialManager
from tests.conftest import FakeAuthClient

pytestmark = pytest.mark.unit


@pytest.fixture
def auth():
    return FakeAuthClient()


@pytest.fixture
def manager(account_repo, system_log, auth):
    credentials = CredentialManager(auth, account_repo, refresh_threshold_minutes=15)
    return AccountManager(account_repo, system_log, credentials)


@pytest.mark.asyncio
async def test_add_with_refresh_token(manager, auth):
    token = "M.R3_BAY." + "b" * 60

    account = await manager.add_account(token)

    assert account.refresh_token == token
    assert account.access_token is None
    assert account.name == "账号 1"
    assert account.enabled and account.cron_enabled and not account.ignore_risk
    assert auth.exchanged == []


@pytest.mark.asyncio
async def test_add_with_callback_url_exchanges_code(manager, auth):
    account = await manager.add_account(
        "https://login.live.com/oauth20_desktop.srf?code=M.C105_abc&lc=2052", "主号"
    )

    assert auth.exchanged == ["M.C105_abc"]
    assert account.name == "主号"
    assert account.refresh_token == "M.from-code"
    assert account.access_token == "code-access"
    assert account.token_expires_at is not None


@pytest.mark.asyncio
async def test_add_rejects_garbage(manager, account_repo):
    with pytest.raises(CredentialInputError):
        await manager.add_account("hello world")
    assert account_repo.list() == []


def test_find_by_prefix_and_name(manager, make_account):
    alpha = make_account("Alpha", id="abc-111")
    make_account("Beta", id="abd-222")

    assert manager.find("abc-111") is alpha
    assert manager.find("abc") is alpha
    assert manager.find("Beta").id == "abd-222"
    assert manager.find("ab") is None


def test_set_cron_validates_expression(manager, make_account):
    account = make_account()

    assert manager.set_cron(account.id, " 15 7 * * * ").cron_expression == "15 7 * * *"
    assert manager.set_cron(account.id, None).cron_expression is None
    with pytest.raises(ConfigurationError):
        manager.set_cron(account.id, "every day")


def test_toggle_and_ignore_risk(manager, make_account):
    account = make_account()

    assert manager.toggle_enabled(account.id).enabled is False
    assert manager.set_ignore_risk(account.id, True).ignore_risk is True
    assert manager.remove_account(account.id).id == account.id
    assert manager.find(account.id) is None
