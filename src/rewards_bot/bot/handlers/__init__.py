"""Bot 处理器模块"""

from rewards_bot.bot.handlers.start import start_handler, help_handler
from rewards_bot.bot.handlers.accounts import (
    accounts_handler,
    add_handler,
    remove_handler,
    toggle_handler,
    cron_handler,
    ignore_risk_handler,
    refresh_handler,
    history_handler,
)
from rewards_bot.bot.handlers.tasks import run_handler, stop_handler, timers_handler, reset_handler
from rewards_bot.bot.handlers.system import logs_handler, backup_handler, sync_handler

__all__ = [
    "start_handler",
    "help_handler",
    "accounts_handler",
    "add_handler",
    "remove_handler",
    "toggle_handler",
    "cron_handler",
    "ignore_risk_handler",
    "refresh_handler",
    "history_handler",
    "run_handler",
    "stop_handler",
    "timers_handler",
    "reset_handler",
    "logs_handler",
    "backup_handler",
    "sync_handler",
]
