from __future__ import annotations

import datetime as dt
from decimal import Decimal
from types import SimpleNamespace

import pytest

from tradefin.modules.risk import scoring
from tradefin.shared.enums import RiskLevel

TODAY = dt.date(2026, 3, 1)


@pytest.mark.parametrize(
    "score,level",
    [
        ("100", RiskLevel.CRITICAL),
        ("75", RiskLevel.CRITICAL),
        ("74.99", RiskLevel.HIGH),
        ("60", RiskLevel.HIGH),
        ("59.99", RiskLevel.MEDIUM),
        ("25", RiskLevel.MEDIUM),
        ("24.99", RiskLevel.LOW),
        ("0", RiskLevel.LOW),
    ],
)
def test_level_thresholds(score: str, level: RiskLevel):
    assert scoring.risk_level_for(Decimal(score)) == level


def test_scores_are_clamped():
    assert scoring.clamp_score(150) == Decimal("100.00")
    assert scoring.clamp_score(-3) == Decimal("0.00")
    assert scoring.clamp_score("42.126") == Decimal("42.13")


def _lc(amount: str, currency: str, days: int):
    return SimpleNamespace(amount=Decimal(amount), currency=currency, expiry_date=TODAY + dt.timedelta(days=days))


def test_mid_size_usd_short_horizon_letter():
    result = scoring.score_letter_of_credit(_lc("150000", "USD", 90), today=TODAY)
    assert result.score == Decimal("35.00")
    assert scoring.risk_level_for(result.score) == RiskLevel.MEDIUM
    assert result.factors["amountRisk"] == 2
    assert result.factors["counterpartyRisk"] == 2
    assert result.recommendations == scoring.DEFAULT_RECOMMENDATION


def test_large_exotic_long_letter_hits_every_high_tier():
    result = scoring.score_letter_of_credit(_lc("2000000", "JPY", 400), today=TODAY)
    # 25 + 20 + 15 + 10
    assert result.score == Decimal("70.00")
    assert result.factors == {
        "amountRisk": 3,
        "durationRisk": 3,
        "currencyRisk": 3,
        "documentationRisk": 1,
        "counterpartyRisk": 2,
    }
    assert "Enhanced due diligence required" in result.recommendations
    assert "Periodic review recommended" in result.recommendations
    assert "Consider currency hedging" in result.recommendations


def test_letter_amount_tiers_are_strictly_greater_than():
    assert scoring.score_letter_of_credit(_lc("100000", "EUR", 10), today=TODAY).score == Decimal("25.00")
    assert scoring.score_letter_of_credit(_lc("1000000", "EUR", 10), today=TODAY).score == Decimal("35.00")
    assert scoring.score_letter_of_credit(_lc("10", "EUR", 181), today=TODAY).score == Decimal("30.00")


def _bg(amount: str, guarantee_type: str, days: int):
    return SimpleNamespace(
        amount=Decimal(amount), guarantee_type=guarantee_type, validity_period=TODAY + dt.timedelta(days=days)
    )


@pytest.mark.parametrize(
    "guarantee_type,expected",
    [
        ("Performance", Decimal("50.00")),
        ("financial guarantee", Decimal("50.00")),
        ("Bid Bond", Decimal("45.00")),
        ("Advance Payment", Decimal("45.00")),
        ("Customs", Decimal("40.00")),
    ],
)
def test_guarantee_type_tiers(guarantee_type: str, expected: Decimal):
    assert scoring.score_guarantee(_bg("250000", guarantee_type, 30), today=TODAY).score == expected


def test_large_long_performance_guarantee():
    result = scoring.score_guarantee(_bg("600000", "Performance", 500), today=TODAY)
    # 25 + 20 + 20 + 10
    assert result.score == Decimal("75.00")
    assert scoring.risk_level_for(result.score) == RiskLevel.CRITICAL
    assert "Senior approval required" in result.recommendations
    assert "Annual review required" in result.recommendations


def test_manual_and_fallback_results():
    manual = scoring.manual_result(Decimal("88"), {"sanctionsRisk": 3}, None)
    assert manual.score == Decimal("88.00")
    assert manual.factors == {"sanctionsRisk": 3}
    assert manual.recommendations == scoring.MANUAL_RECOMMENDATION
    assert scoring.manual_result(10, {"x": 1}, "Looks fine").recommendations == "Looks fine"

    assert scoring.not_found_result().score == Decimal("50.00")
    assert scoring.unknown_type_result().score == Decimal("40.00")
