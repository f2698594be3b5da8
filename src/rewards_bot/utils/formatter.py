"""格式化工具"""

from dataclasses import replace
from datetime import datetime

from rewards_bot.config.constants import RESULT_LABELS, STATUS_LABELS, AccountStatus
from rewards_bot.core.timezone import format_datetime, is_same_day, now
from rewards_bot.models.account import Account
from rewards_bot.models.run_result import RunResult
from rewards_bot.models.schedule import TimerView
from rewards_bot.models.system_log import SystemLog
from rewards_bot.services.history import DayGroup, daily_diff


def _signed(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


def format_account_block(account: Account, result: RunResult | None = None, index: int = 1) -> str:
    """
    格式化单个账号的报告块

    Args:
        account: 账号（取运行后的最新快照）
        result: 本轮运行结果，为空时按账号当前状态展示
        index: 序号

    Returns:
        报告块字符串
    """
    total_points = result.total_points if result else account.total_points
    diff = daily_diff(replace(account, total_points=total_points))

    if result is not None:
        status_str = RESULT_LABELS.get(result.status, result.status.value)
        points_line = f"● 积分: {total_points:,} (本轮+{result.earned} | 较昨日{_signed(diff)})"
    else:
        status_str = STATUS_LABELS.get(account.status, account.status.value)
        points_line = f"● 积分: {total_points:,} (今日{_signed(diff)})"

    s = account.stats
    checkin_str = f"已签 {s.checkin_progress} 天" if s.checkin_progress else "未签到"
    activated = (result is not None and result.status == AccountStatus.SUCCESS) or is_same_day(
        account.last_daily_success
    )

    return "\n".join([
        f"[{index}] {account.name}",
        f"● 状态: {status_str}",
        points_line,
        f"● 阅读: {s.read_progress}/{s.read_max}",
        f"● 搜索: 电脑 {s.pc_search_progress}/{s.pc_search_max} | 移动 {s.mobile_search_progress}/{s.mobile_search_max}",
        f"● 活动: {s.daily_activities_progress}/{s.daily_activities_max}",
        f"● 签到: SAPPHIRE {checkin_str} | Type 103 {'Activation' if activated else '未激活'}",
        "-----------------------",
    ])


def format_single_report(account: Account, result: RunResult, generated_at: datetime | None = None) -> str:
    """单账号任务小票"""
    lines = [
        "```text",
        "M S   R E W A R D S",
        "=== 任务小票 (单号) ===",
        f"日期: {format_datetime(generated_at or now())}",
        "-----------------------",
        format_account_block(account, result, 1),
        f"💰 本轮收益: {result.earned}",
        f"🏆 积分总池: {result.total_points:,}",
        "=======================",
        "```",
    ]
    return "\n".join(lines)


def format_batch_report(
    target_name: str,
    entries: list[tuple[Account, RunResult]],
    pool: int,
    generated_at: datetime | None = None,
) -> str:
    """
    批量任务汇总报告

    Args:
        target_name: 推送目标名称
        entries: (账号, 运行结果) 列表，已按订阅过滤
        pool: 该目标订阅账号的积分总和
        generated_at: 报告时间
    """
    success_count = sum(1 for _, result in entries if result.status == AccountStatus.SUCCESS)
    fail_count = len(entries) - success_count
    total_earned = sum(result.earned for _, result in entries)

    body = "\n".join(
        format_account_block(account, result, idx) for idx, (account, result) in enumerate(entries, 1)
    )

    lines = [
        "```text",
        "M S   R E W A R D S",
        "=== 任务汇总报告 ===",
        f"日期: {format_datetime(generated_at or now())}",
        f"目标: {target_name}",
        "-----------------------",
        body,
        "📊 统计",
        f"成功: {success_count}   失败: {fail_count}",
        f"💰 总收益: +{total_earned}",
        f"🏆 关注池: {pool:,}",
        "=======================",
        "```",
    ]
    return "\n".join(lines)


def format_account_line(account: Account) -> str:
    """账号列表中的一行"""
    flags = []
    if not account.enabled:
        flags.append("已禁用")
    if account.cron_expression:
        flags.append(f"⏰ {account.cron_expression}{'' if account.cron_enabled else ' (关)'}")
    if account.ignore_risk:
        flags.append("忽略风控")

    line = (
        f"{STATUS_LABELS.get(account.status, account.status.value)} "
        f"`{account.id[:8]}` *{account.name}* · {account.total_points:,} 分"
    )
    if flags:
        line += f"\n    {' | '.join(flags)}"
    return line


def format_timers(timers: list[TimerView]) -> str:
    """定时器概览"""
    if not timers:
        return "暂无定时器"

    lines = ["⏰ *定时器*", ""]
    for timer in timers:
        state = "🟢" if timer.enabled else "⚪"
        lines.append(f"{state} `{timer.id}` {timer.name}")
        lines.append(
            f"    {timer.cron_expression} | 上次 {format_datetime(timer.last_run_time, '%m-%d %H:%M')}"
            f" | 下次 {format_datetime(timer.next_run_time, '%m-%d %H:%M')}"
        )
    return "\n".join(lines)


def format_history(account: Account, groups: list[DayGroup], limit: int = 14) -> str:
    """积分历史（按日）"""
    if not groups:
        return f"📈 *{account.name}* 暂无积分记录"

    lines = [f"📈 *{account.name}* 积分历史", ""]
    for group in groups[:limit]:
        diff = "-" if group.diff == 0 else _signed(group.diff)
        suffix = " (无记录)" if group.is_gap else ""
        lines.append(f"`{group.date.isoformat()}` {group.points:,} {diff}{suffix}")
    return "\n".join(lines)


def format_system_logs(logs: list[SystemLog]) -> str:
    """系统日志"""
    if not logs:
        return "暂无日志"

    return "\n".join(
        f"`{format_datetime(log.timestamp, '%m-%d %H:%M:%S')}` [{log.source}] {log.message}"
        for log in logs
    )
