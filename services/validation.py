"""
Structural and business validation of a loan application payload.
Every rule runs; errors accumulate in rule order rather than stopping at the first failure.
"""
from __future__ import annotations

import re
from typing import Any

from schemas.assessment import ValidationResultSchema
from services.risk_scoring import score_application
from utils.case import dict_keys_to_snake
from utils.coerce import to_number, to_text

MIN_LOAN_AMOUNT = 1_000
MAX_LOAN_AMOUNT = 50_000_000
MIN_NAME_LENGTH = 2

# Loose sanity check applied to the digits-only form of the phone number.
_PHONE_PATTERN = re.compile(r"\+?[1-9]\d{0,15}")
_NON_DIGITS = re.compile(r"\D")


def validation_errors(application: dict[str, Any]) -> list[str]:
    """Return the ordered list of rule violations for an application (empty when valid)."""
    data = dict_keys_to_snake(application) if application else {}
    errors: list[str] = []

    if len(to_text(data.get("first_name"))) < MIN_NAME_LENGTH:
        errors.append("First name must be at least 2 characters")

    if len(to_text(data.get("last_name"))) < MIN_NAME_LENGTH:
        errors.append("Last name must be at least 2 characters")

    if len(to_text(data.get("business_name"))) < MIN_NAME_LENGTH:
        errors.append("Business name is required")

    amount = to_number(data.get("amount_requested"))
    if amount is None:
        amount = 0
    if amount < MIN_LOAN_AMOUNT:
        errors.append("Minimum loan amount is $1,000")
    if amount > MAX_LOAN_AMOUNT:
        errors.append("Maximum loan amount is $50,000,000")

    digits = _NON_DIGITS.sub("", to_text(data.get("phone")))
    if not _PHONE_PATTERN.fullmatch(digits):
        errors.append("Invalid phone number format")

    return errors


def validate_application(application: dict[str, Any]) -> ValidationResultSchema:
    """
    Validate an application and attach its risk assessment.
    Accepts snake_case or camelCase keys. Never raises for bad input.
    """
    errors = validation_errors(application)
    is_valid = not errors
    assessment = score_application(application, is_valid=is_valid)
    return ValidationResultSchema(
        is_valid=is_valid,
        errors=errors,
        risk_score=assessment.risk_score,
        auto_approval_eligible=assessment.auto_approval_eligible,
    )
