"""工具函数模块"""

from rewards_bot.utils.cron import validate_cron, next_run, is_due
from rewards_bot.utils.token_input import parse_token_input
from rewards_bot.utils.formatter import (
    format_account_block,
    format_single_report,
    format_batch_report,
    format_account_line,
    format_timers,
    format_history,
    format_system_logs,
)

__all__ = [
    "validate_cron",
    "next_run",
    "is_due",
    "parse_token_input",
    "format_account_block",
    "format_single_report",
    "format_batch_report",
    "format_account_line",
    "format_timers",
    "format_history",
    "format_system_logs",
]
