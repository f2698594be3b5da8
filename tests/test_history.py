"""积分历史测试"""

from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from rewards_bot.config.constants import MAX_POINT_HISTORY
from rewards_bot.models.account import PointHistoryItem
from rewards_bot.services.history import aggregate_by_day, daily_diff, record_point

pytestmark = pytest.mark.unit

BASE = datetime(2026, 3, 1, 9, 0, 0)


def test_zero_points_are_not_recorded():
    assert record_point([], 0, BASE) == []


def test_same_value_same_day_is_not_appended():
    history = record_point([], 100, BASE)
    history = record_point(history, 100, BASE + timedelta(hours=3))

    assert len(history) == 1
    assert history[0].date == BASE


def test_reading_within_coalesce_window_overwrites_last_entry():
    history = record_point([], 100, BASE)
    history = record_point(history, 110, BASE + timedelta(seconds=30))

    assert len(history) == 1
    assert history[0].points == 110
    assert history[0].date == BASE + timedelta(seconds=30)


def test_reading_after_coalesce_window_appends():
    history = record_point([], 100, BASE)
    history = record_point(history, 110, BASE + timedelta(minutes=5))

    assert [item.points for item in history] == [100, 110]


def test_history_is_capped():
    history = []
    for i in range(MAX_POINT_HISTORY + 20):
        history = record_point(history, 1000 + i, BASE + timedelta(minutes=2 * i))

    assert len(history) == MAX_POINT_HISTORY
    assert history[-1].points == 1000 + MAX_POINT_HISTORY + 19


def test_record_point_does_not_mutate_input():
    original = [PointHistoryItem(date=BASE, points=100)]
    record_point(original, 120, BASE + timedelta(seconds=10))

    assert original[0].points == 100


def test_aggregate_fills_gaps_with_contiguous_days():
    history = [
        PointHistoryItem(date=BASE, points=100),
        PointHistoryItem(date=BASE + timedelta(hours=5), points=120),
        PointHistoryItem(date=BASE + timedelta(days=3), points=150),
    ]

    groups = aggregate_by_day(history)

    dates = [group.date for group in groups]
    assert dates[0] == (BASE + timedelta(days=3)).date()
    for newer, older in zip(dates, dates[1:]):
        assert newer - older == timedelta(days=1)

    assert [group.is_gap for group in groups] == [False, True, True, False]
    assert groups[0].points == 150 and groups[0].diff == 30
    assert groups[1].points == 120 and groups[1].diff == 0
    assert groups[-1].points == 120 and groups[-1].diff == 0
    assert len(groups[-1].items) == 2


def test_aggregate_empty_history():
    assert aggregate_by_day([]) == []


def test_daily_diff_uses_last_entry_before_today(make_account):
    today = datetime(2026, 3, 5, 12, 0)
    account = make_account(
        total_points=260,
        point_history=[
            PointHistoryItem(date=today - timedelta(days=2), points=200),
            PointHistoryItem(date=today - timedelta(days=1), points=230),
            PointHistoryItem(date=today - timedelta(hours=1), points=250),
        ],
    )

    assert daily_diff(account, today) == 30


def test_daily_diff_with_only_today_entries(make_account):
    today = datetime(2026, 3, 5, 12, 0)
    account = make_account(
        total_points=260,
        point_history=[PointHistoryItem(date=today - timedelta(hours=2), points=240)],
    )

    assert daily_diff(account, today) == 20
    assert daily_diff(replace(account, point_history=[]), today) == 0
