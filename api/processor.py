from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from config import CrmSyncConfig, settings
from database import get_db
from schemas.application import ProcessorRequest, StatusUpdate
from security import CurrentUser, get_optional_user, require_admin
from services.application_processor import ApplicationProcessor, application_to_dict
from services.exceptions import ApplicationValidationError, AuthenticationRequired
from services.status_transitions import StatusTransitionHandler
from utils.case import camel_payload, dict_keys_to_camel, dict_keys_to_snake

router = APIRouter(prefix="/api", tags=["loan-application-processor"])


def get_crm_config() -> CrmSyncConfig:
    return settings.crm_sync_config()


@router.post("/loan-application-processor")
async def loan_application_processor(
    body: ProcessorRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    user: Optional[CurrentUser] = Depends(get_optional_user),
    crm_config: CrmSyncConfig = Depends(get_crm_config),
):
    """
    Action envelope for the borrower and admin clients.
    validate and calculate-eligibility are pure and need no credentials;
    process needs a signed-in user, updateStatus an admin.
    """
    processor = ApplicationProcessor(db, crm_config)
    application_data: dict[str, Any] = dict_keys_to_snake(body.application_data or {})

    if body.action == "validate":
        return camel_payload(processor.validate(application_data))

    if body.action == "calculate-eligibility":
        return camel_payload(processor.calculate_eligibility(application_data))

    if body.action == "process":
        if user is None:
            raise AuthenticationRequired()
        result = await processor.process(
            application_data,
            user_id=user.id,
            application_id=body.application_id,
            background_tasks=background_tasks,
        )
        return {
            "success": True,
            "application": dict_keys_to_camel(application_to_dict(result.application)),
            "riskScore": result.risk_score,
            "autoApprovalEligible": result.auto_approval_eligible,
            "message": "Application processed successfully",
        }

    if body.action == "updateStatus":
        require_admin(user)
        try:
            update = StatusUpdate.model_validate(application_data)
        except ValidationError as e:
            raise ApplicationValidationError(
                [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            ) from e
        handler = StatusTransitionHandler(db)
        app = await handler.update_status(body.application_id or "", update.status, update.notes)
        return {
            "success": True,
            "application": dict_keys_to_camel(application_to_dict(app)),
            "message": "Application status updated successfully",
        }

    return JSONResponse(status_code=400, content={"error": "Invalid action"})
