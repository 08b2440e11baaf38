"""
Additive risk heuristic for loan applications.

Starts at 50 and adjusts for time in business, requested amount and loan type;
the result is clamped to 0-100. Lower is less risky. An application is
auto-approval eligible when its score is below 30 and it passed validation.
"""
from __future__ import annotations

from typing import Any

from schemas.assessment import RiskAssessmentSchema
from utils.case import dict_keys_to_snake
from utils.coerce import to_number, to_text

BASE_RISK_SCORE = 50
AUTO_APPROVAL_THRESHOLD = 30
MIN_RISK_SCORE = 0
MAX_RISK_SCORE = 100

LOAN_TYPE_ADJUSTMENTS: dict[str, int] = {
    "refinance": -10,
    "bridge_loan": 10,
    "working_capital": 5,
}


def years_in_business_adjustment(years: float | None) -> int:
    if years is None:
        return 0
    if years >= 5:
        return -15
    if years >= 2:
        return -8
    if years < 1:
        return 20
    return 0


def amount_adjustment(amount: float | None) -> int:
    if amount is None:
        return 0
    if amount > 5_000_000:
        return 15
    if amount < 100_000:
        return -5
    return 0


def calculate_risk_score(
    years_in_business: float | None,
    amount_requested: float | None,
    loan_type: str | None,
) -> int:
    score = BASE_RISK_SCORE
    score += years_in_business_adjustment(years_in_business)
    score += amount_adjustment(amount_requested)
    score += LOAN_TYPE_ADJUSTMENTS.get(loan_type or "", 0)
    return max(MIN_RISK_SCORE, min(MAX_RISK_SCORE, score))


def score_application(application: dict[str, Any], is_valid: bool) -> RiskAssessmentSchema:
    data = dict_keys_to_snake(application) if application else {}
    score = calculate_risk_score(
        years_in_business=to_number(data.get("years_in_business")),
        amount_requested=to_number(data.get("amount_requested")),
        loan_type=to_text(data.get("loan_type")),
    )
    return RiskAssessmentSchema(
        risk_score=score,
        auto_approval_eligible=score < AUTO_APPROVAL_THRESHOLD and is_valid,
    )
