"""凭证输入解析测试"""

import pytest

from rewards_bot.exceptions import CredentialInputError
from rewards_bot.utils.token_input import parse_token_input

pytestmark = pytest.mark.unit


def test_callback_url_yields_code():
    url = "https://login.live.com/oauth20_desktop.srf?code=M.C105_BAY.2.abc&lc=2052"
    assert parse_token_input(url) == ("code", "M.C105_BAY.2.abc")


def test_code_in_fragment():
    url = "https://login.live.com/oauth20_desktop.srf#code=M.C105_frag&state=1"
    assert parse_token_input(url) == ("code", "M.C105_frag")


def test_query_fragment_without_scheme():
    assert parse_token_input("lc=2052&code=M.C105%2Dxyz") == ("code", "M.C105-xyz")


def test_refresh_token_prefix():
    token = "M.R3_BAY." + "a" * 60
    assert parse_token_input(f"  {token}\n") == ("token", token)


def test_long_legacy_token():
    token = "E" * 600
    assert parse_token_input(token) == ("token", token)


@pytest.mark.parametrize("text", ["", "short", "M.tooshort-token", "not a token at all, just words"])
def test_unrecognized_input_rejected(text):
    with pytest.raises(CredentialInputError):
        parse_token_input(text)
