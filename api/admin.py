from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from schemas.application import ApplicationFilter
from security import CurrentUser, get_optional_user, require_admin
from services.admin_dashboard import application_stats, filtered_applications
from services.application_processor import application_to_dict
from utils.case import dict_keys_to_camel

router = APIRouter(prefix="/api/admin", tags=["admin"])


async def get_admin(user: Optional[CurrentUser] = Depends(get_optional_user)) -> CurrentUser:
    return require_admin(user)


@router.get("/applications")
async def list_applications(
    status: Optional[str] = None,
    loan_type: Optional[str] = Query(None, alias="loanType"),
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    amount_min: Optional[float] = Query(None, alias="amountMin"),
    amount_max: Optional[float] = Query(None, alias="amountMax"),
    search: Optional[str] = Query(None, alias="searchTerm"),
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_admin),
):
    """Applications across all borrowers for the review queue, newest first."""
    filters = ApplicationFilter(
        status=status,
        loan_type=loan_type,
        date_from=date_from,
        date_to=date_to,
        amount_min=amount_min,
        amount_max=amount_max,
        search=search,
    )
    apps = await filtered_applications(db, filters)
    return {"applications": [dict_keys_to_camel(application_to_dict(a)) for a in apps]}


@router.get("/applications/stats")
async def get_stats(
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_admin),
):
    stats = await application_stats(db)
    return {"stats": stats.model_dump(by_alias=True)}
