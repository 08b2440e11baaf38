"""
Read side of the admin review dashboard: filtered application listing and
portfolio statistics across all users.
"""
from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import LoanApplication
from schemas.application import ADMIN_STATUS_FILTER, ApplicationFilter, ApplicationStats
from services.exceptions import ApplicationValidationError

logger = logging.getLogger(__name__)


def filter_errors(filters: ApplicationFilter) -> list[str]:
    errors: list[str] = []
    if filters.status and filters.status not in ADMIN_STATUS_FILTER:
        errors.append(
            f"Unknown status filter '{filters.status}'. Expected one of: {', '.join(ADMIN_STATUS_FILTER)}"
        )
    if filters.amount_min is not None and filters.amount_max is not None and filters.amount_min > filters.amount_max:
        errors.append("amountMin must not exceed amountMax")
    if filters.date_from and filters.date_to and _utc(filters.date_from) > _utc(filters.date_to):
        errors.append("dateFrom must not be after dateTo")
    return errors


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


async def filtered_applications(session: AsyncSession, filters: ApplicationFilter) -> list[LoanApplication]:
    """All users' applications matching the filters, newest first."""
    errors = filter_errors(filters)
    if errors:
        raise ApplicationValidationError(errors)

    query = select(LoanApplication)
    if filters.status:
        query = query.where(LoanApplication.status == filters.status)
    if filters.loan_type:
        query = query.where(LoanApplication.loan_type == filters.loan_type)
    if filters.date_from:
        query = query.where(LoanApplication.created_at >= _utc(filters.date_from))
    if filters.date_to:
        query = query.where(LoanApplication.created_at <= _utc(filters.date_to))
    if filters.amount_min is not None:
        query = query.where(LoanApplication.amount_requested >= filters.amount_min)
    if filters.amount_max is not None:
        query = query.where(LoanApplication.amount_requested <= filters.amount_max)
    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.where(
            or_(
                LoanApplication.business_name.ilike(pattern),
                LoanApplication.first_name.ilike(pattern),
                LoanApplication.last_name.ilike(pattern),
                LoanApplication.application_number.ilike(pattern),
            )
        )

    result = await session.execute(query.order_by(LoanApplication.created_at.desc()))
    return list(result.scalars().all())


async def _count_since(session: AsyncSession, since: datetime) -> int:
    result = await session.execute(
        select(func.count()).select_from(LoanApplication).where(LoanApplication.created_at >= since)
    )
    return result.scalar_one()


async def application_stats(session: AsyncSession, now: Optional[datetime] = None) -> ApplicationStats:
    """
    Counts by status and loan type, requested totals, and how many applications
    were created this calendar month and this week (weeks start on Sunday, UTC).
    The average is taken over all applications, including those without an amount.
    """
    now = _utc(now or datetime.now(timezone.utc))

    by_status = dict(
        (await session.execute(
            select(LoanApplication.status, func.count()).group_by(LoanApplication.status)
        )).all()
    )
    by_loan_type = dict(
        (await session.execute(
            select(LoanApplication.loan_type, func.count()).group_by(LoanApplication.loan_type)
        )).all()
    )
    total, total_amount = (
        await session.execute(
            select(func.count(), func.coalesce(func.sum(LoanApplication.amount_requested), 0.0))
            .select_from(LoanApplication)
        )
    ).one()

    today = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
    start_of_month = today.replace(day=1)
    # isoweekday: Monday=1 .. Sunday=7
    start_of_week = today - timedelta(days=now.isoweekday() % 7)

    stats = ApplicationStats(
        total=total,
        by_status=by_status,
        by_loan_type=by_loan_type,
        total_amount=float(total_amount),
        average_amount=float(total_amount) / total if total else 0.0,
        this_month=await _count_since(session, start_of_month),
        this_week=await _count_since(session, start_of_week),
    )
    logger.debug(f"Computed application stats over {total} application(s)")
    return stats
