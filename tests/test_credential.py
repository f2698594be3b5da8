"""CredentialManager 测试"""

from datetime import timedelta

import pytest

from rewards_bot.core.timezone import now
from rewards_bot.exceptions import TokenError
from rewards_bot.services.credential import CredentialManager
from tests.conftest import FakeAuthClient

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_token_close_to_expiry_is_refreshed_and_rotated(account_repo, make_account):
    auth = FakeAuthClient()
    manager = CredentialManager(auth, account_repo, refresh_threshold_minutes=15)
    account = make_account(token_expires_at=now() + timedelta(minutes=10))

    token = await manager.ensure_valid_token(account)

    assert token == "fresh-access"
    assert auth.renewed == [account.refresh_token]
    stored = account_repo.get(account.id)
    assert stored.refresh_token == "M.rotated"
    assert stored.access_token == "fresh-access"
    assert stored.token_expires_at > now() + timedelta(minutes=55)


@pytest.mark.asyncio
async def test_token_far_from_expiry_is_reused(account_repo, make_account):
    auth = FakeAuthClient()
    manager = CredentialManager(auth, account_repo, refresh_threshold_minutes=15)
    account = make_account(token_expires_at=now() + timedelta(minutes=20))

    token = await manager.ensure_valid_token(account)

    assert token == "cached-access"
    assert auth.renewed == []


@pytest.mark.asyncio
async def test_missing_access_token_triggers_refresh(account_repo, make_account):
    auth = FakeAuthClient()
    manager = CredentialManager(auth, account_repo, refresh_threshold_minutes=15)
    account = make_account(access_token=None, token_expires_at=None)

    assert await manager.ensure_valid_token(account) == "fresh-access"


@pytest.mark.asyncio
async def test_failed_refresh_falls_back_to_stale_token(account_repo, make_account):
    manager = CredentialManager(FakeAuthClient(fail=True), account_repo, refresh_threshold_minutes=15)
    account = make_account(token_expires_at=now() - timedelta(minutes=5))

    token = await manager.ensure_valid_token(account)

    assert token == "cached-access"
    assert "Token 错误" in account_repo.get(account.id).logs[-1].message


@pytest.mark.asyncio
async def test_failed_refresh_without_token_is_fatal(account_repo, make_account):
    manager = CredentialManager(FakeAuthClient(fail=True), account_repo, refresh_threshold_minutes=15)
    account = make_account(access_token=None, token_expires_at=None)

    with pytest.raises(TokenError):
        await manager.ensure_valid_token(account)
