"""Test transactional behaviour of the approval ledger.

Decisions are recorded one after another with real commits, the order in
which the PR row lock serializes competing requests. A finalize that loses
the race is exercised directly through _finalize.
"""

from django.db import transaction
from django.test import TransactionTestCase

from core.approval.exceptions import InvalidTransition, NoEligibleApprovers
from core.approval.managers import ApprovalManager
from core.approval.models import Approval
from procurement.PR.models import PurchaseRequisition
from procurement.PR.tests.fixtures import (
    create_department,
    create_pr,
    create_user,
    create_workflow_with_rule,
)


class LedgerTransactionTest(TransactionTestCase):
    """Approval ledger and PR status stay consistent across commits."""

    def setUp(self):
        self.it = create_department("IT")
        self.requester = create_user("requester@test.com", role="employee", department=self.it)
        self.approvers = [
            create_user(f"manager{i}@test.com", role="manager", department=self.it)
            for i in range(1, 4)
        ]
        self.workflow = create_workflow_with_rule(self.it)
        self.pr = create_pr(self.requester, total_value="5000.00")
        ApprovalManager.init_approvals(self.pr.id, self.workflow.id)

    def test_last_approval_finalizes(self):
        for approver in self.approvers[:-1]:
            ApprovalManager.record_approval(self.pr.id, approver.id, "approved")
            self.pr.refresh_from_db()
            self.assertEqual(self.pr.status, PurchaseRequisition.PENDING)

        ApprovalManager.record_approval(self.pr.id, self.approvers[-1].id, "approved")

        self.pr.refresh_from_db()
        self.assertEqual(self.pr.status, PurchaseRequisition.APPROVED)
        self.assertEqual(self.pr.decided_by_id, self.approvers[-1].id)

    def test_rejection_racing_final_approval(self):
        """Whichever decision commits first wins; the other is refused."""
        ApprovalManager.record_approval(self.pr.id, self.approvers[0].id, "approved")
        ApprovalManager.record_approval(self.pr.id, self.approvers[1].id, "approved")
        ApprovalManager.record_approval(self.pr.id, self.approvers[2].id, "approved")

        with self.assertRaises(InvalidTransition):
            ApprovalManager.record_approval(self.pr.id, self.approvers[0].id, "rejected")

        self.pr.refresh_from_db()
        self.assertEqual(self.pr.status, PurchaseRequisition.APPROVED)

    def test_decision_rolls_back_with_caller_transaction(self):
        with self.assertRaises(RuntimeError):
            with transaction.atomic():
                ApprovalManager.record_approval(self.pr.id, self.approvers[0].id, "rejected")
                raise RuntimeError("request aborted")

        self.pr.refresh_from_db()
        self.assertEqual(self.pr.status, PurchaseRequisition.PENDING)
        self.assertEqual(
            Approval.objects.filter(pr=self.pr, status=Approval.STATUS_PENDING).count(), 3
        )

    def test_failed_init_writes_nothing(self):
        workflow = create_workflow_with_rule(self.it, approver_role="cfo", name="CFO")
        pr = create_pr(self.requester, total_value="5000.00")

        with self.assertRaises(NoEligibleApprovers):
            ApprovalManager.init_approvals(pr.id, workflow.id)

        pr.refresh_from_db()
        self.assertFalse(Approval.objects.filter(pr=pr).exists())
        self.assertIsNone(pr.approval_workflow_id)

    def test_finalize_to_current_status_is_noop(self):
        for approver in self.approvers:
            ApprovalManager.record_approval(self.pr.id, approver.id, "approved")
        self.pr.refresh_from_db()
        decided_at = self.pr.decided_at

        with self.assertLogs("core.approval.managers", level="WARNING") as logs:
            ApprovalManager._finalize(self.pr, PurchaseRequisition.APPROVED, self.approvers[0])

        self.assertIn("finalize skipped", logs.output[0])
        self.pr.refresh_from_db()
        self.assertEqual(self.pr.decided_at, decided_at)
        self.assertEqual(self.pr.decided_by_id, self.approvers[-1].id)

    def test_finalize_to_other_terminal_status_is_refused(self):
        ApprovalManager.record_approval(self.pr.id, self.approvers[0].id, "rejected")
        self.pr.refresh_from_db()

        with self.assertRaises(InvalidTransition):
            ApprovalManager._finalize(self.pr, PurchaseRequisition.APPROVED)
