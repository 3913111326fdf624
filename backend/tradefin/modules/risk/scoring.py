"""Deterministic weighted-sum risk scoring for LCs and BGs.

Each dimension contributes a fixed number of points and a 1-3 factor level
(1 low, 2 medium, 3 high). The total is capped at 100.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal

from tradefin.core.config import settings
from tradefin.shared.enums import RiskLevel


MAX_SCORE = Decimal("100")
MIN_SCORE = Decimal("0")
BASELINE = Decimal("10")

DEFAULT_RECOMMENDATION = "Standard monitoring recommended"
MANUAL_RECOMMENDATION = "Manual assessment completed"
NOT_FOUND_RECOMMENDATION = "Transaction not found - Default medium risk applied. Verify transaction details"
UNKNOWN_TYPE_RECOMMENDATION = "General trade transaction - Standard due diligence recommended"


@dataclass(frozen=True)
class RiskResult:
    score: Decimal
    factors: dict[str, int] = field(default_factory=dict)
    recommendations: str = DEFAULT_RECOMMENDATION


def clamp_score(score: Decimal | float | int) -> Decimal:
    value = Decimal(str(score))
    value = max(MIN_SCORE, min(MAX_SCORE, value))
    return value.quantize(Decimal("0.01"))


def risk_level_for(score: Decimal | float | int) -> RiskLevel:
    value = Decimal(str(score))
    if value >= 75:
        return RiskLevel.CRITICAL
    if value >= 60:
        return RiskLevel.HIGH
    if value >= 25:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _horizon(days: int, long_note: str, notes: list[str]) -> tuple[int, int]:
    if days > 365:
        notes.append(long_note)
        return 20, 3
    if days > 180:
        return 10, 2
    return 5, 1


def _result(points: int, factors: dict[str, int], notes: list[str]) -> RiskResult:
    score = clamp_score(Decimal(points) + BASELINE)
    return RiskResult(score=score, factors=factors, recommendations="".join(notes) or DEFAULT_RECOMMENDATION)


def score_letter_of_credit(lc, *, today: dt.date | None = None) -> RiskResult:
    today = today or dt.date.today()
    notes: list[str] = []
    points = 0

    amount = Decimal(lc.amount)
    if amount > Decimal("1000000"):
        points, amount_risk = points + 25, 3
        notes.append("Enhanced due diligence required; ")
    elif amount > Decimal("100000"):
        points, amount_risk = points + 15, 2
    else:
        points, amount_risk = points + 5, 1

    horizon_points, duration_risk = _horizon((lc.expiry_date - today).days, "Periodic review recommended; ", notes)
    points += horizon_points

    if (lc.currency or "").upper() not in settings.major_currencies:
        points, currency_risk = points + 15, 3
        notes.append("Consider currency hedging; ")
    else:
        points, currency_risk = points + 5, 1

    factors = {
        "amountRisk": amount_risk,
        "durationRisk": duration_risk,
        "currencyRisk": currency_risk,
        "documentationRisk": 1,
        # Placeholder dimension until counterparty data exists.
        "counterpartyRisk": 2,
    }
    return _result(points, factors, notes)


def score_guarantee(bg, *, today: dt.date | None = None) -> RiskResult:
    today = today or dt.date.today()
    notes: list[str] = []
    points = 0

    amount = Decimal(bg.amount)
    if amount > Decimal("500000"):
        points, amount_risk = points + 25, 3
        notes.append("Senior approval required; ")
    elif amount > Decimal("100000"):
        points, amount_risk = points + 15, 2
    else:
        points, amount_risk = points + 5, 1

    g_type = (bg.guarantee_type or "").lower()
    if "performance" in g_type or "financial" in g_type:
        points, type_risk = points + 20, 3
        notes.append("Thorough applicant assessment required; ")
    elif "bid" in g_type or "advance" in g_type:
        points, type_risk = points + 15, 2
    else:
        points, type_risk = points + 10, 1

    horizon_points, duration_risk = _horizon((bg.validity_period - today).days, "Annual review required; ", notes)
    points += horizon_points

    factors = {
        "amountRisk": amount_risk,
        "durationRisk": duration_risk,
        "guaranteeTypeRisk": type_risk,
        "counterpartyRisk": 2,
        "documentationRisk": 1,
    }
    return _result(points, factors, notes)


def manual_result(score: Decimal | float | int, factors: dict, remarks: str | None) -> RiskResult:
    return RiskResult(score=clamp_score(score), factors=dict(factors), recommendations=remarks or MANUAL_RECOMMENDATION)


def not_found_result() -> RiskResult:
    return RiskResult(score=clamp_score(50), factors={"transactionRisk": 2}, recommendations=NOT_FOUND_RECOMMENDATION)


def unknown_type_result() -> RiskResult:
    return RiskResult(score=clamp_score(40), factors={"transactionRisk": 2}, recommendations=UNKNOWN_TYPE_RECOMMENDATION)
