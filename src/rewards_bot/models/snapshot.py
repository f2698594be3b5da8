"""快照文档编解码

快照格式: {"accounts": [...], "config": {...}, "exportDate": "...", "version": "..."}
"""

from dataclasses import replace
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from rewards_bot.config.constants import SNAPSHOT_VERSION, TRANSIENT_STATUSES, AccountStatus
from rewards_bot.models.account import Account
from rewards_bot.models.config import AppConfig

_accounts_adapter = TypeAdapter(list[Account])
_config_adapter = TypeAdapter(AppConfig)


class SnapshotDocument(BaseModel):
    """快照文档外壳"""

    model_config = ConfigDict(populate_by_name=True)

    accounts: list[dict[str, Any]]
    config: dict[str, Any] | None = None
    export_date: datetime | None = Field(default=None, alias="exportDate")
    version: str = SNAPSHOT_VERSION


def dump_snapshot(
    accounts: list[Account],
    config: AppConfig | None,
    export_date: datetime,
) -> dict[str, Any]:
    """
    序列化账号与配置为快照字典

    Args:
        accounts: 账号列表
        config: 运行时配置
        export_date: 导出时间

    Returns:
        可直接 json.dumps 的字典
    """
    document = SnapshotDocument(
        accounts=_accounts_adapter.dump_python(accounts, mode="json"),
        config=_config_adapter.dump_python(config, mode="json") if config else None,
        export_date=export_date,
    )
    return document.model_dump(mode="json", by_alias=True)


def load_snapshot(data: dict[str, Any]) -> tuple[list[Account], AppConfig | None]:
    """
    解析快照字典

    运行中/等待中的账号复位为 idle，risk/success/error 保持不变。

    Raises:
        pydantic.ValidationError: 文档结构不合法
    """
    document = SnapshotDocument.model_validate(data)
    accounts = _accounts_adapter.validate_python(document.accounts)
    accounts = [
        replace(account, status=AccountStatus.IDLE) if account.status in TRANSIENT_STATUSES else account
        for account in accounts
    ]
    config = _config_adapter.validate_python(document.config) if document.config else None
    return accounts, config
