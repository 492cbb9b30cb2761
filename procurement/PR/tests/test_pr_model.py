"""
Tests for the PurchaseRequisition state machine and edit guards.
"""

from decimal import Decimal

from django.test import TestCase

from core.approval.exceptions import InvalidInput, InvalidTransition
from procurement.PR.models import PurchaseRequisition
from procurement.PR.tests.fixtures import (
    create_category,
    create_department,
    create_pr,
    create_user,
)


class PRStateMachineTest(TestCase):

    def setUp(self):
        self.department = create_department("IT")
        self.requester = create_user("requester@test.com", role="employee", department=self.department)
        self.manager = create_user("manager@test.com", role="manager", department=self.department)
        self.pr = create_pr(self.requester, total_value="1500.00")

    def test_new_pr_is_pending(self):
        self.assertEqual(self.pr.status, PurchaseRequisition.PENDING)
        self.assertTrue(self.pr.can_be_edited())
        self.assertTrue(self.pr.can_be_approved())
        self.assertFalse(self.pr.is_terminal)

    def test_snapshot(self):
        category = create_category("Hardware")
        pr = create_pr(self.requester, quantity=3, total_value="900.50", category=category)

        snapshot = pr.get_snapshot()

        self.assertEqual(snapshot["total_value"], Decimal("900.50"))
        self.assertEqual(snapshot["quantity"], 3)
        self.assertEqual(snapshot["department_id"], self.department.id)
        self.assertEqual(snapshot["category_id"], category.id)
        self.assertEqual(snapshot["created_by_id"], self.requester.id)
        self.assertEqual(snapshot["status"], "pending")
        self.assertIsNone(snapshot["approval_workflow_id"])
        self.assertEqual(set(snapshot), set(PurchaseRequisition.SNAPSHOT_FIELDS))

    def test_change_status_records_decision(self):
        self.pr.change_status("approved", approver=self.manager, comments="Go ahead")

        self.pr.refresh_from_db()
        self.assertEqual(self.pr.status, PurchaseRequisition.APPROVED)
        self.assertEqual(self.pr.decided_by, self.manager)
        self.assertEqual(self.pr.decision_comments, "Go ahead")
        self.assertIsNotNone(self.pr.decided_at)
        self.assertTrue(self.pr.is_terminal)

    def test_terminal_states_are_final(self):
        self.pr.change_status("rejected")

        for target in ("approved", "rejected"):
            with self.subTest(target=target):
                with self.assertRaises(InvalidTransition) as ctx:
                    self.pr.change_status(target)
                self.assertEqual(ctx.exception.message, "Only pending PRs can be approved or rejected")

        self.pr.refresh_from_db()
        self.assertEqual(self.pr.status, PurchaseRequisition.REJECTED)

    def test_change_status_to_pending_is_refused(self):
        with self.assertRaises(InvalidTransition):
            self.pr.change_status("pending")

    def test_update_content_while_pending(self):
        self.pr.update_content(item="Monitor", quantity=2, total_value=Decimal("400.00"))

        self.pr.refresh_from_db()
        self.assertEqual(self.pr.item, "Monitor")
        self.assertEqual(self.pr.quantity, 2)
        self.assertEqual(self.pr.total_value, Decimal("400.00"))

    def test_update_content_after_decision_is_refused(self):
        self.pr.change_status("approved", approver=self.manager)

        with self.assertRaises(InvalidTransition):
            self.pr.update_content(item="Something else")

        self.pr.refresh_from_db()
        self.assertEqual(self.pr.item, "Laptop")

    def test_update_content_rejects_protected_fields(self):
        with self.assertRaises(InvalidInput):
            self.pr.update_content(status="approved")

    def test_update_content_validates_values(self):
        with self.assertRaises(InvalidInput):
            self.pr.update_content(quantity=0)
