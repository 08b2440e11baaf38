"""
Advisory eligibility estimate: maximum financeable amount, rate range and term
options for a loan type, scaled by how long the business has operated.
The result is never persisted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from schemas.assessment import EligibilityResultSchema, InterestRateRangeSchema
from utils.case import dict_keys_to_snake
from utils.coerce import to_number, to_text

BASE_MAX_AMOUNT = 1_000_000
MAX_LOAN_AMOUNT_CAP = 50_000_000

YOUNG_BUSINESS_REQUIREMENT = "Minimum 1 year in business preferred"

STANDARD_REQUIREMENTS: tuple[str, ...] = (
    "Valid business license",
    "Financial statements (last 2 years)",
    "Tax returns (business and personal)",
    "Bank statements (last 6 months)",
    "Business plan or project description",
)


@dataclass(frozen=True)
class LoanProductTerms:
    amount_multiplier: float
    rate_min: float
    rate_max: float
    term_options: tuple[str, ...]


LOAN_PRODUCT_TERMS: dict[str, LoanProductTerms] = {
    "refinance": LoanProductTerms(
        1.2, 3.5, 6.5, ("5 years", "10 years", "15 years", "20 years", "25 years")
    ),
    "bridge_loan": LoanProductTerms(
        0.8, 6.0, 12.0, ("6 months", "12 months", "18 months", "24 months")
    ),
    "working_capital": LoanProductTerms(
        0.6, 4.0, 8.0, ("1 year", "2 years", "3 years", "5 years")
    ),
}

DEFAULT_PRODUCT_TERMS = LoanProductTerms(1.0, 4.0, 10.0, ("2 years", "5 years", "10 years"))


def business_age_multiplier(years: float | None) -> float:
    if years is None:
        return 1.0
    if years >= 5:
        return 5.0
    if years >= 2:
        return 2.0
    if years < 1:
        return 0.5
    return 1.0


def format_currency(amount: float) -> str:
    if float(amount).is_integer():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


def calculate_eligibility(
    years_in_business: float | None,
    loan_type: str | None,
    amount_requested: float | None,
) -> EligibilityResultSchema:
    requirements: list[str] = []
    reasons: list[str] = []

    if years_in_business is not None and years_in_business < 1:
        requirements.append(YOUNG_BUSINESS_REQUIREMENT)

    terms = LOAN_PRODUCT_TERMS.get(loan_type or "", DEFAULT_PRODUCT_TERMS)
    amount = BASE_MAX_AMOUNT * business_age_multiplier(years_in_business) * terms.amount_multiplier
    # Float multipliers such as 1.2 and 0.6 leave sub-cent noise.
    max_amount = min(round(amount, 2), MAX_LOAN_AMOUNT_CAP)

    eligible = True
    if amount_requested is not None and amount_requested > max_amount:
        eligible = False
        reasons.append(
            f"Requested amount exceeds maximum eligible amount of {format_currency(max_amount)}"
        )

    requirements.extend(STANDARD_REQUIREMENTS)

    return EligibilityResultSchema(
        eligible=eligible,
        max_loan_amount=max_amount,
        interest_rate_range=InterestRateRangeSchema(min=terms.rate_min, max=terms.rate_max),
        term_options=list(terms.term_options),
        requirements=requirements,
        reasons=reasons,
    )


def evaluate_eligibility(application: dict[str, Any]) -> EligibilityResultSchema:
    """Eligibility for a raw application payload (snake_case or camelCase keys)."""
    data = dict_keys_to_snake(application) if application else {}
    return calculate_eligibility(
        years_in_business=to_number(data.get("years_in_business")),
        loan_type=to_text(data.get("loan_type")),
        amount_requested=to_number(data.get("amount_requested")),
    )
