"""
Submission pipeline: validate, score, pick the initial workflow status, assign an
application number, persist, then hand the record to the CRM sync in the background.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from fastapi import BackgroundTasks
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import CrmSyncConfig
from models import LoanApplication
from schemas.application import APPLICATION_FIELDS, ApplicationResponse
from schemas.assessment import EligibilityResultSchema, ValidationResultSchema
from services.application_number import generate_application_number, with_collision_suffix
from services.crm_sync import sync_submitted_application
from services.eligibility import evaluate_eligibility
from services.exceptions import (
    ApplicationNotFound,
    ApplicationValidationError,
    InvalidStatusTransition,
    PersistenceError,
)
from services.status_transitions import allowed_transitions
from services.validation import validate_application
from utils.case import dict_keys_to_snake
from utils.coerce import to_number, to_text

logger = logging.getLogger(__name__)

HIGH_RISK_THRESHOLD = 70
MAX_NUMBER_ATTEMPTS = 5

_NUMERIC_FIELDS = {"amount_requested", "years_in_business"}


def initial_status(validation: ValidationResultSchema) -> str:
    """Workflow status assigned to a freshly submitted application."""
    if validation.auto_approval_eligible:
        return "under_review"
    if validation.risk_score > HIGH_RISK_THRESHOLD:
        return "requires_review"
    return "submitted"


def submission_errors(data: dict[str, Any]) -> list[str]:
    """Checks on the stored shape of a payload that already passed validation."""
    errors: list[str] = []
    loan_details = data.get("loan_details")
    if loan_details is not None and not isinstance(loan_details, dict):
        errors.append("Loan details must be an object")
    years = to_number(data.get("years_in_business"))
    if years is not None and years < 0:
        errors.append("Years in business cannot be negative")
    return errors


def application_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Pick the persisted applicant/business/loan columns out of a raw payload."""
    fields: dict[str, Any] = {}
    for name in APPLICATION_FIELDS:
        if name not in data:
            continue
        value = data[name]
        if name in _NUMERIC_FIELDS:
            fields[name] = to_number(value)
        else:
            fields[name] = None if value is None else to_text(value)
    return fields


def application_to_dict(app: LoanApplication) -> dict[str, Any]:
    return ApplicationResponse.model_validate(app).model_dump(mode="json")


@dataclass
class SubmissionResult:
    application: LoanApplication
    risk_score: int
    auto_approval_eligible: bool


class ApplicationProcessor:
    def __init__(
        self,
        session: AsyncSession,
        crm_config: CrmSyncConfig,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.session = session
        self.crm_config = crm_config
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def validate(self, application_data: dict[str, Any]) -> ValidationResultSchema:
        return validate_application(application_data)

    def calculate_eligibility(self, application_data: dict[str, Any]) -> EligibilityResultSchema:
        return evaluate_eligibility(application_data)

    async def process(
        self,
        application_data: dict[str, Any],
        user_id: str,
        application_id: Optional[str] = None,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> SubmissionResult:
        """
        Submit an application for the given user.

        With application_id, the user's existing draft is submitted in place;
        otherwise a new record is inserted. Raises ApplicationValidationError
        before anything is written when the payload fails validation.
        """
        data = dict_keys_to_snake(application_data) if application_data else {}
        validation = self.validate(data)
        errors = validation.errors + submission_errors(data)
        if errors:
            logger.info(f"Application rejected by validation: {len(errors)} error(s)")
            raise ApplicationValidationError(errors)

        status = initial_status(validation)
        now = self._clock()

        try:
            if application_id:
                app = await self._load_draft(application_id, user_id)
            else:
                app = LoanApplication(
                    id=f"app-{uuid.uuid4().hex[:12]}",
                    user_id=user_id,
                    application_started_date=now,
                    created_at=now,
                )
                self.session.add(app)

            for name, value in application_fields(data).items():
                setattr(app, name, value)
            if not app.loan_type:
                app.loan_type = "other"
            app.loan_details = {
                **(app.loan_details or {}),
                **(data.get("loan_details") or {}),
                "risk_score": validation.risk_score,
                "auto_approval_eligible": validation.auto_approval_eligible,
            }
            app.status = status
            app.application_number = await self._unique_application_number(now)
            app.application_submitted_date = now
            app.updated_at = now
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.exception("Failed to persist loan application")
            raise PersistenceError("Failed to process application") from e

        logger.info(
            f"Application {app.application_number} processed with risk score: {validation.risk_score}"
        )

        if background_tasks is not None:
            background_tasks.add_task(
                sync_submitted_application, self.crm_config, application_to_dict(app)
            )

        return SubmissionResult(
            application=app,
            risk_score=validation.risk_score,
            auto_approval_eligible=validation.auto_approval_eligible,
        )

    async def _load_draft(self, application_id: str, user_id: str) -> LoanApplication:
        result = await self.session.execute(
            select(LoanApplication).where(
                LoanApplication.id == application_id,
                LoanApplication.user_id == user_id,
            )
        )
        app = result.scalar_one_or_none()
        if app is None:
            raise ApplicationNotFound(application_id)
        if app.status != "draft" or app.application_number:
            raise InvalidStatusTransition(app.status, "submitted", allowed_transitions(app.status))
        return app

    async def _unique_application_number(self, now: datetime) -> str:
        base = generate_application_number(now)
        candidate = base
        for _ in range(MAX_NUMBER_ATTEMPTS):
            existing = await self.session.execute(
                select(LoanApplication.id).where(LoanApplication.application_number == candidate)
            )
            if existing.scalar_one_or_none() is None:
                return candidate
            candidate = with_collision_suffix(base)
        raise PersistenceError("Failed to process application")
