"""
Admin-directed status changes, guarded by the application workflow:

    draft -> submitted -> under_review -> approved -> funded
    requires_review -> under_review -> rejected

rejected and funded are terminal. A draft leaves the draft status only through
ApplicationProcessor.process, which validates, scores and numbers it; the admin
handler cannot move drafts.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models import LoanApplication
from services.exceptions import ApplicationNotFound, InvalidStatusTransition, PersistenceError

logger = logging.getLogger(__name__)

LEGAL_TRANSITIONS: dict[str, frozenset[str]] = {
    "draft": frozenset({"submitted"}),
    "submitted": frozenset({"under_review"}),
    "requires_review": frozenset({"under_review"}),
    "under_review": frozenset({"approved", "rejected"}),
    "approved": frozenset({"funded"}),
    "rejected": frozenset(),
    "funded": frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in LEGAL_TRANSITIONS.items() if not targets)

# Edges reachable through update_status; submission of drafts belongs to the processor.
ADMIN_TRANSITIONS: dict[str, frozenset[str]] = {
    s: targets for s, targets in LEGAL_TRANSITIONS.items() if s != "draft"
}


def allowed_transitions(
    status: str, transitions: dict[str, frozenset[str]] = LEGAL_TRANSITIONS
) -> frozenset[str]:
    return transitions.get(status, frozenset())


def check_transition(
    current: str, requested: str, transitions: dict[str, frozenset[str]] = LEGAL_TRANSITIONS
) -> None:
    allowed = allowed_transitions(current, transitions)
    if requested not in allowed:
        raise InvalidStatusTransition(current, requested, allowed)


class StatusTransitionHandler:
    def __init__(self, session: AsyncSession, clock: Optional[Callable[[], datetime]] = None):
        self.session = session
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def update_status(
        self,
        application_id: str,
        new_status: str,
        notes: Optional[str] = None,
    ) -> LoanApplication:
        """
        Move an application to new_status and record the admin note.

        The note replaces loan_details.status_notes; earlier notes are not kept here.
        Raises ApplicationNotFound, InvalidStatusTransition or PersistenceError;
        nothing is modified when any of them is raised.
        """
        try:
            result = await self.session.execute(
                select(LoanApplication).where(LoanApplication.id == application_id)
            )
            app = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to load application {application_id}")
            raise PersistenceError("Failed to update application status") from e

        if app is None:
            raise ApplicationNotFound(application_id)
        check_transition(app.status, new_status, ADMIN_TRANSITIONS)

        try:
            app.status = new_status
            app.updated_at = self._clock()
            app.loan_details = {**(app.loan_details or {}), "status_notes": notes or ""}
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to update status of application {application_id}")
            raise PersistenceError("Failed to update application status") from e

        logger.info(f"Application {application_id} status updated to: {new_status}")
        return app
