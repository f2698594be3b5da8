"""Dashboard 解码测试"""

import pytest

from rewards_bot.clients.dashboard import PromotionKind, classify_offer, decode_dashboard

pytestmark = pytest.mark.unit


def promo(offer_id, progress, maximum, title=""):
    return {"title": title, "attributes": {"offerid": offer_id, "progress": str(progress), "max": str(maximum)}}


@pytest.mark.parametrize("offer_id, kind", [
    ("ENUS_readarticle3_30points", PromotionKind.READ),
    ("Gamification_Sapphire_DailyCheckIn", PromotionKind.CHECKIN),
    ("Sapphire_PCSearch_Level2", PromotionKind.PC_SEARCH),
    ("SearchDesktop_Daily", PromotionKind.PC_SEARCH),
    ("MobileSearch_Daily", PromotionKind.MOBILE_SEARCH),
    ("ZHCN_Quiz_20250101", PromotionKind.DAILY_ACTIVITY),
    ("Global_DailySet_Item1", PromotionKind.DAILY_SET),
    ("Search_Unclassified", PromotionKind.UNKNOWN),
    ("", PromotionKind.UNKNOWN),
])
def test_classify_offer(offer_id, kind):
    assert classify_offer(offer_id) == kind


def test_decode_full_dashboard():
    data = {
        "response": {
            "balance": "12345",
            "redeemGoal": {"title": "Xbox 礼品卡", "price": 6500, "progress": 1200},
            "promotions": [
                promo("ENUS_readarticle3_30points", 12, 30),
                promo("Gamification_Sapphire_DailyCheckIn", 3, 0),
                promo("PCSearch_Level1", 10, 50),
                promo("PCSearch_Level2", 20, 90),
                promo("MobileSearch", 15, 60),
                promo("ZHCN_Campaign_A", 10, 10),
                promo("ZHStar_B", 0, 5),
                promo("DailySet_1", 10, 10),
                promo("DailySet_2", 0, 10),
                promo("Something_else", 1, 1),
                "not a dict",
            ],
        },
    }

    snapshot = decode_dashboard(data)
    stats = snapshot.stats

    assert snapshot.total_points == 12345
    assert (stats.read_progress, stats.read_max) == (12, 30)
    assert (stats.checkin_progress, stats.checkin_max) == (3, 7)
    assert (stats.pc_search_progress, stats.pc_search_max) == (20, 90)
    assert (stats.mobile_search_progress, stats.mobile_search_max) == (15, 60)
    assert (stats.daily_activities_progress, stats.daily_activities_max) == (10, 15)
    assert (stats.daily_set_progress, stats.daily_set_max) == (10, 20)
    assert stats.redeem_goal.title == "Xbox 礼品卡"
    assert stats.redeem_goal.price == 6500


def test_decode_missing_fields_defaults():
    snapshot = decode_dashboard({"response": {"promotions": None}})

    assert snapshot.total_points == 0
    assert snapshot.stats.read_max == 30
    assert snapshot.stats.redeem_goal is None
    assert not snapshot.degraded


def test_read_promotion_without_max_uses_default():
    snapshot = decode_dashboard({"response": {"promotions": [promo("enus_readarticle3_30points", 5, 0)]}})
    assert snapshot.stats.read_max == 30
