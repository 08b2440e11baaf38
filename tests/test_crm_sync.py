"""
CRM sync against an httpx.MockTransport; no network access.
"""
import json
import unittest
from unittest.mock import patch

import httpx

from config import CrmSyncConfig
from services.crm_sync import CrmSyncClient, sync_submitted_application


APPLICATION = {
    "application_number": "HBF-2026-032-00065",
    "first_name": "Ada",
    "last_name": "Lovelace",
    "business_name": "Analytical Engines LLC",
    "amount_requested": 50_000.0,
    "phone": None,
    "status": "under_review",
}


class RecordingTransport(httpx.MockTransport):
    def __init__(self, status_code=200, body=""):
        self.requests = []

        def handler(request):
            self.requests.append(request)
            return httpx.Response(status_code, text=body)

        super().__init__(handler)


class TestFieldMapping(unittest.TestCase):
    def test_custom_mapping_and_metadata(self):
        config = CrmSyncConfig(
            webhook_url="https://crm.example.test/hook",
            field_mapping={"first_name": "FirstName", "business_name": "Company", "phone": "Phone"},
        )
        mapped = CrmSyncClient(config).map_application(APPLICATION)
        self.assertEqual(mapped["FirstName"], "Ada")
        self.assertEqual(mapped["Company"], "Analytical Engines LLC")
        self.assertNotIn("Phone", mapped)
        self.assertNotIn("last_name", mapped)
        self.assertEqual(mapped["source"], "loan_application")
        self.assertEqual(mapped["application_number"], "HBF-2026-032-00065")
        self.assertIn("imported_at", mapped)

    def test_webhook_takes_precedence(self):
        config = CrmSyncConfig(api_endpoint="https://crm.example.test/api", webhook_url="https://crm.example.test/hook")
        self.assertEqual(config.endpoint, "https://crm.example.test/hook")

    def test_enabled_requires_flag_and_endpoint(self):
        self.assertFalse(CrmSyncConfig(auto_sync=True).enabled)
        self.assertFalse(CrmSyncConfig(webhook_url="https://crm.example.test/hook").enabled)
        self.assertTrue(CrmSyncConfig(auto_sync=True, api_endpoint="https://crm.example.test/api").enabled)


class TestCrmSyncClient(unittest.IsolatedAsyncioTestCase):
    async def test_successful_sync_posts_mapped_payload(self):
        transport = RecordingTransport()
        config = CrmSyncConfig(api_endpoint="https://crm.example.test/api", api_key="crm-key")
        result = await CrmSyncClient(config, transport=transport).sync_application(APPLICATION)

        self.assertTrue(result.success)
        self.assertIsNone(result.error)
        self.assertEqual(len(transport.requests), 1)
        request = transport.requests[0]
        self.assertEqual(str(request.url), "https://crm.example.test/api")
        self.assertEqual(request.headers["Authorization"], "Bearer crm-key")
        body = json.loads(request.content)
        self.assertEqual(body["first_name"], "Ada")
        self.assertEqual(body["source"], "loan_application")

    async def test_no_auth_header_without_key(self):
        transport = RecordingTransport()
        config = CrmSyncConfig(webhook_url="https://crm.example.test/hook")
        await CrmSyncClient(config, transport=transport).sync_application(APPLICATION)
        self.assertNotIn("Authorization", transport.requests[0].headers)

    async def test_error_status_is_reported(self):
        transport = RecordingTransport(status_code=502, body="bad gateway")
        config = CrmSyncConfig(webhook_url="https://crm.example.test/hook")
        with self.assertLogs("services.crm_sync", level="WARNING"):
            result = await CrmSyncClient(config, transport=transport).sync_application(APPLICATION)
        self.assertFalse(result.success)
        self.assertEqual(result.error, "bad gateway")

    async def test_transport_error_is_reported(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        config = CrmSyncConfig(webhook_url="https://crm.example.test/hook")
        client = CrmSyncClient(config, transport=httpx.MockTransport(handler))
        with self.assertLogs("services.crm_sync", level="WARNING"):
            result = await client.sync_application(APPLICATION)
        self.assertFalse(result.success)
        self.assertIn("connection refused", result.error)

    async def test_missing_endpoint(self):
        result = await CrmSyncClient(CrmSyncConfig()).sync_application(APPLICATION)
        self.assertFalse(result.success)
        self.assertEqual(result.error, "CRM endpoint not configured")

    async def test_connection_check(self):
        transport = RecordingTransport()
        config = CrmSyncConfig(webhook_url="https://crm.example.test/hook")
        result = await CrmSyncClient(config, transport=transport).test_connection()
        self.assertTrue(result.success)
        self.assertTrue(json.loads(transport.requests[0].content)["test"])


class TestBackgroundSync(unittest.IsolatedAsyncioTestCase):
    async def test_disabled_sync_does_nothing(self):
        with patch.object(CrmSyncClient, "sync_application") as sync:
            await sync_submitted_application(CrmSyncConfig(), APPLICATION)
        sync.assert_not_called()

    async def test_unexpected_error_is_logged_not_raised(self):
        config = CrmSyncConfig(auto_sync=True, webhook_url="https://crm.example.test/hook")
        with patch.object(CrmSyncClient, "sync_application", side_effect=RuntimeError("boom")):
            with self.assertLogs("services.crm_sync", level="ERROR") as logs:
                await sync_submitted_application(config, APPLICATION)
        self.assertIn("HBF-2026-032-00065", logs.output[0])


if __name__ == "__main__":
    unittest.main()
