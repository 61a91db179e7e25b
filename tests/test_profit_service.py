import pytest

from gymdash.core.utils import subscription_key
from gymdash.services.profit_service import compute_profits, member_price, validate_pricing


@pytest.mark.parametrize(
    "kind, key",
    [
        ("Monthly Fitness", "monthlyFitness"),
        ("Sauna", "sauna"),
        ("Three Month Cardio plan", "threeMonthCardioPlan"),
        ("", ""),
    ],
)
def test_subscription_key(kind, key):
    assert subscription_key(kind) == key


def test_member_price_sums_combined_subscriptions():
    pricing = {"monthlyFitness": 100, "sauna": 40}
    assert member_price("Monthly Fitness & Sauna", pricing) == 140
    assert member_price("Monthly Fitness & Unknown", pricing) == 100
    assert member_price(None, pricing) == 0


def test_compute_profits_empty():
    stats = compute_profits({"x": 1}, [])
    assert stats == {
        "totalRevenue": 0.0,
        "totalMembers": 0,
        "averageRevenuePerMember": 0.0,
        "monthlyRevenue": [],
    }


def test_compute_profits_groups_by_start_month():
    pricing = {"monthly": 30, "yearly": 300}
    members = [
        {"subscriptionType": "Monthly", "startDate": "2026-03-15"},
        {"subscriptionType": "Monthly", "startDate": "2026-03-01"},
        {"subscriptionType": "Yearly", "startDate": "2025-12-31"},
        {"subscriptionType": "Monthly", "startDate": "not a date"},
    ]
    stats = compute_profits(pricing, members)
    assert stats["totalRevenue"] == 390
    assert stats["totalMembers"] == 4
    assert stats["averageRevenuePerMember"] == 97.5
    assert stats["monthlyRevenue"] == [
        {"name": "2025-12", "total": 300},
        {"name": "2026-03", "total": 60},
    ]


def test_validate_pricing():
    assert validate_pricing({"a": 1, "b": 2.5}) == {"a": 1, "b": 2.5}
    with pytest.raises(ValueError):
        validate_pricing(["a"])
    with pytest.raises(ValueError):
        validate_pricing({"a": True})
    with pytest.raises(ValueError):
        validate_pricing({"a": float("nan")})
    with pytest.raises(ValueError):
        validate_pricing({"a": float("inf")})
