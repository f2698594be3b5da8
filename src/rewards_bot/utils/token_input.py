"""凭证输入解析"""

import re
from typing import Literal
from urllib.parse import parse_qs, unquote, urlparse

from rewards_bot.exceptions import CredentialInputError

_CODE_PATTERN = re.compile(r"[?&]code=([^&#\s]+)")

TokenInputKind = Literal["code", "token"]


def _code_from_url(text: str) -> str | None:
    parsed = urlparse(text)
    for part in (parsed.query, parsed.fragment):
        values = parse_qs(part).get("code")
        if values and values[0]:
            return values[0]
    return None


def parse_token_input(text: str) -> tuple[TokenInputKind, str]:
    """
    解析用户粘贴的凭证

    支持:
    - 登录回调 URL（query 或 fragment 中的 code）
    - 含 ?code= / &code= 的片段
    - 以 M. 开头且长度大于 50 的 Refresh Token
    - 长度大于 500 且不含空白的旧版 Token

    Returns:
        ("code", 授权码) 或 ("token", Refresh Token)

    Raises:
        CredentialInputError: 无法识别的输入
    """
    if not text or len(text) < 10:
        raise CredentialInputError("输入过短")

    trimmed = text.strip()

    if trimmed.startswith(("http://", "https://")):
        code = _code_from_url(trimmed)
        if code:
            return "code", code

    match = _CODE_PATTERN.search(trimmed)
    if match:
        return "code", unquote(match.group(1))

    if trimmed.startswith("M.") and len(trimmed) > 50:
        return "token", trimmed

    if len(trimmed) > 500 and not any(ch.isspace() for ch in trimmed):
        return "token", trimmed

    raise CredentialInputError("格式错误: 需以 M. 开头或为 Auth URL")
