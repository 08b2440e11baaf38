from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import LoanApplication
from schemas.application import DraftCreate
from security import CurrentUser, get_current_user
from services.application_processor import application_to_dict
from utils.case import dict_keys_to_camel

router = APIRouter(prefix="/api/applications", tags=["applications"])

MSG_APPLICATION_NOT_FOUND = "Application not found"


def _app_to_response(app: LoanApplication) -> dict[str, Any]:
    """Serialize application to dict with camelCase for frontend."""
    return dict_keys_to_camel(application_to_dict(app))


async def _get_owned(db: AsyncSession, application_id: str, user: CurrentUser) -> LoanApplication:
    result = await db.execute(
        select(LoanApplication).where(
            LoanApplication.id == application_id,
            LoanApplication.user_id == user.id,
        )
    )
    app = result.scalar_one_or_none()
    if not app:
        raise HTTPException(status_code=404, detail=MSG_APPLICATION_NOT_FOUND)
    return app


@router.get("")
async def list_applications(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(
        select(LoanApplication)
        .where(LoanApplication.user_id == user.id)
        .order_by(LoanApplication.created_at.desc())
    )
    apps = result.scalars().all()
    return [_app_to_response(a) for a in apps]


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return _app_to_response(await _get_owned(db, application_id, user))


@router.post("", status_code=201)
async def create_draft(
    body: DraftCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Save an in-progress application. Drafts are not validated and get no application number."""
    now = datetime.now(timezone.utc)
    app = LoanApplication(
        id=f"app-{uuid.uuid4().hex[:12]}",
        user_id=user.id,
        status="draft",
        **body.model_dump(by_alias=False),
        application_started_date=now,
        created_at=now,
        updated_at=now,
    )
    db.add(app)
    await db.flush()
    return _app_to_response(app)


@router.delete("/{application_id}", status_code=204)
async def delete_draft(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    app = await _get_owned(db, application_id, user)
    if app.status != "draft":
        raise HTTPException(status_code=409, detail="Only draft applications can be deleted")
    await db.delete(app)
    await db.flush()
