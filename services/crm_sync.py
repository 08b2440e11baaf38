"""
Best-effort push of submitted applications to the external CRM.
Failures are logged and reported in the result; nothing here raises or retries.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from config import CrmSyncConfig

logger = logging.getLogger(__name__)


class CrmSyncResult(BaseModel):
    success: bool
    error: Optional[str] = None


class CrmSyncClient:
    def __init__(self, config: CrmSyncConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport

    def map_application(self, application: dict[str, Any]) -> dict[str, Any]:
        crm_data: dict[str, Any] = {}
        for app_field, crm_field in self.config.field_mapping.items():
            if application.get(app_field) is not None:
                crm_data[crm_field] = application[app_field]
        crm_data["source"] = "loan_application"
        crm_data["imported_at"] = datetime.now(timezone.utc).isoformat()
        crm_data["application_number"] = application.get("application_number")
        return crm_data

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(
            transport=self._transport, timeout=self.config.timeout_seconds
        ) as client:
            return await client.post(self.config.endpoint, json=payload, headers=self._headers())

    async def sync_application(self, application: dict[str, Any]) -> CrmSyncResult:
        number = application.get("application_number")
        if not self.config.endpoint:
            return CrmSyncResult(success=False, error="CRM endpoint not configured")
        crm_data = self.map_application(application)
        try:
            response = await self._post(crm_data)
        except httpx.HTTPError as e:
            logger.warning(f"CRM sync failed for {number}: {e}")
            return CrmSyncResult(success=False, error=str(e))
        if response.status_code >= 400:
            logger.warning(f"CRM sync failed for {number}: HTTP {response.status_code} {response.text}")
            return CrmSyncResult(success=False, error=response.text or f"HTTP {response.status_code}")
        logger.info(f"Application {number} synced to CRM")
        return CrmSyncResult(success=True)

    async def test_connection(self) -> CrmSyncResult:
        if not self.config.endpoint:
            return CrmSyncResult(success=False, error="CRM endpoint not configured")
        try:
            response = await self._post(
                {"test": True, "timestamp": datetime.now(timezone.utc).isoformat()}
            )
        except httpx.HTTPError as e:
            return CrmSyncResult(success=False, error=f"Connection test failed: {e}")
        if response.status_code >= 400:
            return CrmSyncResult(success=False, error=f"Connection test failed: {response.text}")
        return CrmSyncResult(success=True)


async def sync_submitted_application(config: CrmSyncConfig, application: dict[str, Any]) -> None:
    """Background task run after a submission response has been sent."""
    if not config.enabled:
        logger.debug(f"CRM auto-sync disabled; skipping {application.get('application_number')}")
        return
    try:
        await CrmSyncClient(config).sync_application(application)
    except Exception:
        logger.exception(f"Unexpected CRM sync error for {application.get('application_number')}")
