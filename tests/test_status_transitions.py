import unittest
import warnings
from datetime import datetime, timezone
from pathlib import Path

from helpers import FIXED_NOW, DatabaseTestCase, FixedClock
from models import LoanApplication
from services.exceptions import ApplicationNotFound, InvalidStatusTransition
import services.status_transitions
from services.status_transitions import (
    ADMIN_TRANSITIONS,
    LEGAL_TRANSITIONS,
    TERMINAL_STATUSES,
    StatusTransitionHandler,
    allowed_transitions,
    check_transition,
)


class TestTransitionTable(unittest.TestCase):
    def test_terminal_statuses(self):
        self.assertEqual(TERMINAL_STATUSES, frozenset({"rejected", "funded"}))

    def test_review_paths(self):
        check_transition("submitted", "under_review")
        check_transition("requires_review", "under_review")
        check_transition("under_review", "approved")
        check_transition("under_review", "rejected")
        check_transition("approved", "funded")

    def test_skipping_review_is_illegal(self):
        with self.assertRaises(InvalidStatusTransition) as ctx:
            check_transition("submitted", "funded")
        self.assertEqual(ctx.exception.allowed, frozenset({"under_review"}))

    def test_terminal_status_cannot_move(self):
        for status in TERMINAL_STATUSES:
            for target in LEGAL_TRANSITIONS:
                with self.assertRaises(InvalidStatusTransition):
                    check_transition(status, target)

    def test_unknown_status_has_no_transitions(self):
        self.assertEqual(allowed_transitions("archived"), frozenset())
        with self.assertRaises(InvalidStatusTransition):
            check_transition("approved", "archived")

    def test_admin_cannot_move_drafts(self):
        check_transition("draft", "submitted")
        self.assertNotIn("draft", ADMIN_TRANSITIONS)
        with self.assertRaises(InvalidStatusTransition):
            check_transition("draft", "submitted", ADMIN_TRANSITIONS)

    def test_module_compiles_without_warnings(self):
        source = Path(services.status_transitions.__file__).read_text(encoding="utf-8")
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(source, "status_transitions.py", "exec")


class TestStatusTransitionHandler(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.later = datetime(2026, 2, 3, 9, 0, 0, tzinfo=timezone.utc)
        self.handler = StatusTransitionHandler(self.session, clock=FixedClock(self.later))
        self.session.add(
            LoanApplication(
                id="app-1",
                user_id="user-1",
                application_number="HBF-2026-032-00065",
                status="under_review",
                loan_type="refinance",
                amount_requested=50_000,
                loan_details={"risk_score": 20, "auto_approval_eligible": True},
                created_at=FIXED_NOW,
                updated_at=FIXED_NOW,
            )
        )
        await self.session.flush()

    async def test_approve_with_notes(self):
        app = await self.handler.update_status("app-1", "approved", "Strong financials")
        self.assertEqual(app.status, "approved")
        self.assertEqual(app.updated_at, self.later)
        self.assertEqual(
            app.loan_details,
            {"risk_score": 20, "auto_approval_eligible": True, "status_notes": "Strong financials"},
        )

    async def test_missing_notes_are_stored_empty(self):
        app = await self.handler.update_status("app-1", "rejected")
        self.assertEqual(app.loan_details["status_notes"], "")

    async def test_notes_are_replaced(self):
        await self.handler.update_status("app-1", "approved", "first")
        app = await self.handler.update_status("app-1", "funded", "second")
        self.assertEqual(app.status, "funded")
        self.assertEqual(app.loan_details["status_notes"], "second")

    async def test_illegal_transition_leaves_record_untouched(self):
        with self.assertRaises(InvalidStatusTransition):
            await self.handler.update_status("app-1", "draft", "undo")
        app = await self.session.get(LoanApplication, "app-1")
        self.assertEqual(app.status, "under_review")
        self.assertNotIn("status_notes", app.loan_details)
        self.assertEqual(app.updated_at, FIXED_NOW)

    async def test_draft_cannot_be_submitted_by_admin(self):
        self.session.add(
            LoanApplication(
                id="app-draft",
                user_id="user-1",
                status="draft",
                loan_type="refinance",
                loan_details={},
                created_at=FIXED_NOW,
                updated_at=FIXED_NOW,
            )
        )
        await self.session.flush()
        with self.assertRaises(InvalidStatusTransition):
            await self.handler.update_status("app-draft", "submitted")
        draft = await self.session.get(LoanApplication, "app-draft")
        self.assertEqual(draft.status, "draft")
        self.assertIsNone(draft.application_number)

    async def test_unknown_application(self):
        with self.assertRaises(ApplicationNotFound):
            await self.handler.update_status("app-missing", "approved")


if __name__ == "__main__":
    unittest.main()
