"""配置管理模块"""

import logging
from pathlib import Path
from typing import List

from pydantic import Field, ConfigDict, field_validator
from pydantic_settings import BaseSettings

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """应用配置类"""

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== Bot 配置 ====================
    bot_token: str = Field(default="", description="Telegram Bot Token（控制面板）")
    admin_ids_str: str = Field(default="", alias="ADMIN_IDS", description="管理员 ID 列表（逗号分隔）")

    # ==================== 网络配置 ====================
    proxy_url: str = Field(default="", alias="PROXY_URL", description="出站代理地址（socks5:// 或 http://）")
    telegram_use_proxy: bool = Field(default=False, alias="TELEGRAM_USE_PROXY", description="Telegram 是否使用代理")
    impersonate_browser: str = Field(default="", description="curl_cffi 模拟浏览器版本，留空则不模拟")
    request_timeout: int = Field(default=20, ge=1, description="单次远程请求超时（秒）")

    # ==================== 运行时配置 ====================
    timezone: str = Field(default="Asia/Shanghai", description="时区配置")
    heartbeat_interval: int = Field(default=60, ge=5, description="调度心跳间隔（秒）")
    state_flush_interval: int = Field(default=300, ge=30, description="状态落盘间隔（秒）")
    token_refresh_minutes: int = Field(default=15, ge=0, description="Token 提前刷新阈值（分钟）")
    state_file: Path = Field(default=Path("data/state.json"), description="账号与配置状态文件")
    backup_dir: Path = Field(default=Path("backups"), description="本地备份目录")

    # ==================== 推送配置 ====================
    wxpusher_app_token: str = Field(default="", alias="WXPUSHER_APP_TOKEN", description="WxPusher AppToken")

    # ==================== 运行时默认值（首次启动写入状态） ====================
    default_cron_expression: str = Field(default="0 4 * * *", description="全局任务 Cron")
    default_backup_cron: str = Field(default="0 12 * * *", description="本地备份 Cron")
    default_backup_max_files: int = Field(default=30, ge=1, description="本地备份保留数量")
    default_delay_between_accounts: int = Field(default=5, ge=0, description="账号间隔（秒）")
    default_min_delay: int = Field(default=3, ge=0, description="随机延迟下限（秒）")
    default_max_delay: int = Field(default=8, ge=0, description="随机延迟上限（秒）")
    default_auto_idle_delay: int = Field(default=5, ge=0, description="完成后自动闲置延迟（分钟），0 为关闭")

    # ==================== 日志配置 ====================
    log_level_str: str = Field(default="INFO", alias="LOG_LEVEL", description="日志级别: DEBUG, INFO, WARNING, ERROR")

    @field_validator("log_level_str")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL 必须是 {', '.join(_LOG_LEVELS)} 之一，当前为 '{v}'")
        return level

    @property
    def log_level(self) -> int:
        """获取日志级别常量"""
        return getattr(logging, self.log_level_str)

    @property
    def admin_ids(self) -> List[int]:
        """可以使用控制命令的 Telegram 用户 ID"""
        return [int(part) for part in (p.strip() for p in self.admin_ids_str.split(",")) if part]

    @property
    def curl_proxy(self) -> dict | None:
        """
        获取用于 curl_cffi 的代理配置

        socks5:// 会被转换为 socks5h://，由代理服务器解析 DNS。

        Returns:
            代理配置字典，未配置时返回 None
        """
        if not self.proxy_url:
            return None

        proxy_url = self.proxy_url.strip()
        if proxy_url.startswith("socks5://"):
            proxy_url = proxy_url.replace("socks5://", "socks5h://", 1)

        return {"proxies": {"http": proxy_url, "https": proxy_url}}

    @property
    def session_kwargs(self) -> dict:
        """构造 AsyncSession 的公共参数"""
        kwargs = dict(self.curl_proxy or {})
        if self.impersonate_browser:
            kwargs["impersonate"] = self.impersonate_browser
        return kwargs

    @property
    def telegram_proxy_url(self) -> str | None:
        """获取用于 python-telegram-bot 的代理 URL"""
        if not self.telegram_use_proxy or not self.proxy_url:
            return None
        return self.proxy_url


# 全局配置实例
_settings: Settings | None = None


def get_settings() -> Settings:
    """获取配置实例（单例模式）"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
