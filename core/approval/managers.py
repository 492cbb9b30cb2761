"""Approval workflow manager.

Central entry point for the approval engine: workflow and rule storage,
routing a purchase requisition to its approvers, and recording their
decisions. Every PR status change made by the engine goes through here.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from core.job_roles.models import JobRole
from core.user_accounts.models import Department, approver_queryset
from procurement.PR.models import PurchaseRequisition

from .exceptions import (
    ApprovalError,
    ApprovalNotFound,
    InvalidInput,
    InvalidTransition,
    NoEligibleApprovers,
    PRNotFound,
    WorkflowNotFound,
)
from .models import Approval, ApprovalWorkflow, WorkflowRule
from .rule_engine import RuleEngine, normalize_conditions, normalize_logic

logger = logging.getLogger(__name__)
User = get_user_model()


class ApprovalManager:
    """Central manager for rule-based PR approval workflows."""

    # ----------------------
    # Helper Methods
    # ----------------------

    @staticmethod
    def _get_pr(pr_id, lock=False):
        qs = PurchaseRequisition.objects.all()
        if lock:
            qs = qs.select_for_update()
        try:
            return qs.get(pk=pr_id)
        except PurchaseRequisition.DoesNotExist:
            raise PRNotFound(f"PR {pr_id} not found", pr_id=pr_id)

    @staticmethod
    def _get_workflow(workflow_id, lock=False):
        qs = ApprovalWorkflow.objects.all()
        if lock:
            qs = qs.select_for_update()
        try:
            return qs.get(pk=workflow_id)
        except ApprovalWorkflow.DoesNotExist:
            raise WorkflowNotFound(f"Workflow {workflow_id} not found", workflow_id=workflow_id)

    # ----------------------
    # Workflow Store
    # ----------------------

    @classmethod
    def create_workflow(cls, department_id, name) -> ApprovalWorkflow:
        """Create an empty workflow for a department.

        Raises:
            InvalidInput: If the name is blank or the department does not exist
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput("Workflow name is required", department_id=department_id)
        name = name.strip()

        if department_id is None or not Department.objects.filter(pk=department_id).exists():
            raise InvalidInput(
                f"Department {department_id} does not exist",
                department_id=department_id,
            )

        workflow = ApprovalWorkflow.objects.create(department_id=department_id, name=name)
        logger.info("Created workflow %s '%s' for department %s", workflow.id, name, department_id)
        return workflow

    @classmethod
    def add_rule(cls, workflow_id, condition, approver_role, logic="AND") -> WorkflowRule:
        """Append a rule to a workflow.

        Condition fields are PR snapshot keys in snake_case, as listed in
        PurchaseRequisition.SNAPSHOT_FIELDS ("total_value", not "totalValue").
        A field outside that list never matches, so the rule is stored with a
        warning and will surface as NoApproversMatched if nothing else matches.

        Args:
            workflow_id: Target workflow
            condition: One {"field", "operator", "value"} mapping or a list of them
            approver_role: Job role code that must approve when the rule matches
            logic: "AND" (default) or "OR" across the rule's conditions

        Raises:
            InvalidInput: Malformed condition, unsupported operator, blank role or bad logic
            WorkflowNotFound: If the workflow does not exist
        """
        conditions = normalize_conditions(condition)
        logic = normalize_logic(logic)

        if not isinstance(approver_role, str) or not approver_role.strip():
            raise InvalidInput("approver_role is required", workflow_id=workflow_id)
        approver_role = approver_role.strip()

        with transaction.atomic():
            workflow = cls._get_workflow(workflow_id, lock=True)

            last_index = workflow.rules.aggregate(last=Max("order_index"))["last"] or 0
            rule = WorkflowRule.objects.create(
                workflow=workflow,
                order_index=last_index + 1,
                conditions=[c.to_dict() for c in conditions],
                logic=logic,
                approver_role=approver_role,
            )
            # Rule changes count as workflow updates
            workflow.save(update_fields=["updated_at"])

        unknown_fields = [c.field for c in conditions if c.field not in PurchaseRequisition.SNAPSHOT_FIELDS]
        if unknown_fields:
            logger.warning(
                "Rule %s on workflow %s tests fields missing from the PR snapshot: %s",
                rule.id, workflow.id, unknown_fields,
            )
        if not JobRole.objects.filter(code=approver_role).exists():
            logger.warning(
                "Rule %s on workflow %s targets unknown job role '%s'",
                rule.id, workflow.id, approver_role,
            )
        logger.info(
            "Added rule %s (#%s) to workflow %s: %s -> %s",
            rule.id, rule.order_index, workflow.id,
            f" {logic} ".join(str(c) for c in conditions), approver_role,
        )
        return rule

    @classmethod
    def get_workflow_by_id(cls, workflow_id) -> ApprovalWorkflow:
        """Return a workflow with its department and rules loaded.

        Raises:
            WorkflowNotFound: If the workflow does not exist
        """
        try:
            return (
                ApprovalWorkflow.objects
                .select_related("department")
                .prefetch_related("rules")
                .get(pk=workflow_id)
            )
        except ApprovalWorkflow.DoesNotExist:
            raise WorkflowNotFound(f"Workflow {workflow_id} not found", workflow_id=workflow_id)

    @classmethod
    def list_workflows(cls, department_id=None):
        workflows = ApprovalWorkflow.objects.select_related("department").prefetch_related("rules")
        if department_id is not None:
            workflows = workflows.filter(department_id=department_id)
        return workflows

    # ----------------------
    # Approval Ledger
    # ----------------------

    @classmethod
    def init_approvals(cls, pr_id, workflow_id):
        """Route a pending PR through a workflow.

        Evaluates the workflow's rules against the PR, then creates one
        pending Approval per active user holding any matched role (in the
        PR's department unless APPROVAL_RESTRICT_TO_DEPARTMENT is off).
        Every matched role must be covered by at least one user.

        Running it again for the same PR never duplicates an approver.

        Returns:
            List of Approval records for the matched approvers

        Raises:
            PRNotFound, WorkflowNotFound
            InvalidTransition: If the PR is no longer pending
            NoApproversMatched: If no rule matches the PR
            NoEligibleApprovers: If a matched role has no eligible user
        """
        with transaction.atomic():
            pr = cls._get_pr(pr_id, lock=True)
            workflow = cls.get_workflow_by_id(workflow_id)

            if not pr.can_be_approved():
                raise InvalidTransition(
                    f"Cannot start approvals for PR in {pr.status} status",
                    pr_id=pr.id,
                    current_status=pr.status,
                )

            if workflow.department_id != pr.department_id:
                logger.warning(
                    "PR %s (department %s) routed through workflow %s of department %s",
                    pr.id, pr.department_id, workflow.id, workflow.department_id,
                )

            roles = RuleEngine.determine_next_approvers(
                workflow.get_rules(), pr.get_snapshot(), workflow_id=workflow.id
            )

            approvers = list(approver_queryset(roles, pr.department_id))
            covered = {user.role_code for user in approvers}
            missing = [role for role in roles if role not in covered]
            if missing:
                raise NoEligibleApprovers(
                    pr_id=pr.id,
                    workflow_id=workflow.id,
                    department_id=pr.department_id,
                    roles=missing,
                )

            approvals = []
            created_count = 0
            for user in approvers:
                approval, created = Approval.objects.get_or_create(pr=pr, approver=user)
                approvals.append(approval)
                created_count += int(created)

            if pr.approval_workflow_id != workflow.id:
                pr.approval_workflow = workflow
                pr.save(update_fields=["approval_workflow", "updated_at"])

        logger.info(
            "Initialized approvals for PR %s via workflow %s: roles=%s, approvers=%s, new=%s",
            pr.id, workflow.id, roles, [a.approver_id for a in approvals], created_count,
        )
        return approvals

    @classmethod
    def record_approval(cls, pr_id, approver_id, status, comments=None) -> Approval:
        """Record an approver's decision and finalize the PR when possible.

        The (PR, approver) record is updated in place, or created with the
        decision when the approver was not assigned by init_approvals.
        A rejection finalizes the PR as rejected straight away. An approval
        finalizes it as approved once no pending approvals remain.
        Repeating the decision already on record changes nothing while the
        PR is pending; once the PR is final every call is refused.

        Raises:
            InvalidInput: If status is not "approved" or "rejected"
            PRNotFound: If the PR does not exist
            ApprovalNotFound: If no active user has approver_id
            InvalidTransition: If the PR has already been finalized
        """
        if status not in Approval.DECISION_STATUSES:
            raise InvalidInput(
                f"Invalid status '{status}'. Must be 'approved' or 'rejected'",
                pr_id=pr_id,
                status=status,
            )

        with transaction.atomic():
            # PR row first, then the approval row
            pr = cls._get_pr(pr_id, lock=True)
            if not pr.can_be_approved():
                raise InvalidTransition(
                    pr_id=pr.id,
                    current_status=pr.status,
                    approver_id=approver_id,
                    requested_status=status,
                )

            approval = Approval.objects.select_for_update().filter(pr=pr, approver_id=approver_id).first()
            if approval is None:
                if not User.objects.filter(pk=approver_id, is_active=True).exists():
                    raise ApprovalNotFound(
                        f"Approver {approver_id} not found",
                        pr_id=pr_id,
                        approver_id=approver_id,
                    )
                approval = Approval(pr=pr, approver_id=approver_id)
                logger.info("Adding unassigned approver %s to PR %s", approver_id, pr.id)
            elif approval.status == status:
                logger.debug("Approval %s already %s; nothing to record", approval.id, status)
                return approval

            approval.status = status
            approval.comments = comments or ""
            approval.approved_at = timezone.now()
            approval.save()

            logger.info("Approver %s %s PR %s", approver_id, status, pr.id)

            if status == Approval.STATUS_REJECTED:
                cls._finalize(pr, PurchaseRequisition.REJECTED, approval.approver, comments)
            else:
                remaining = pr.approvals.filter(status=Approval.STATUS_PENDING).count()
                if remaining == 0:
                    cls._finalize(pr, PurchaseRequisition.APPROVED, approval.approver, comments)
                else:
                    logger.debug("PR %s still waiting on %s approval(s)", pr.id, remaining)

        return approval

    @classmethod
    def _finalize(cls, pr, status, approver=None, comments=None):
        """Move the PR to a terminal status; no-op if it is already there."""
        if pr.status == status:
            logger.warning("PR %s is already %s; finalize skipped", pr.id, status)
            return pr
        return pr.change_status(status, approver=approver, comments=comments)

    @classmethod
    def get_approvals(cls, pr_id):
        """Approvals of a PR in creation order.

        Raises:
            PRNotFound: If the PR does not exist
        """
        if not PurchaseRequisition.objects.filter(pk=pr_id).exists():
            raise PRNotFound(f"PR {pr_id} not found", pr_id=pr_id)
        return (
            Approval.objects
            .filter(pr_id=pr_id)
            .select_related("approver", "approver__job_role")
            .order_by("created_at", "id")
        )

    # ----------------------
    # Approver queues
    # ----------------------

    @classmethod
    def get_user_pending_approvals(cls, user):
        """Approvals waiting on ``user`` for PRs still open."""
        return (
            Approval.objects
            .filter(
                approver=user,
                status=Approval.STATUS_PENDING,
                pr__status=PurchaseRequisition.PENDING,
            )
            .select_related("pr", "pr__department", "approver")
            .order_by("created_at", "id")
        )

    @classmethod
    def get_user_approval_history(cls, user):
        """Decisions ``user`` has recorded, newest first."""
        return (
            Approval.objects
            .filter(approver=user)
            .exclude(status=Approval.STATUS_PENDING)
            .select_related("pr", "pr__department", "approver")
            .order_by("-approved_at", "-id")
        )

    @classmethod
    def batch_record_approval(cls, pr_ids, approver_id, status, comments=None):
        """Record the same decision on several PRs.

        Each PR is handled in its own transaction, so one failure does not
        undo the others.

        Returns:
            {"succeeded": [{"pr_id", "approval_id", "pr_status"}],
             "failed": [{"pr_id", "error", "message"}]}
        """
        if not pr_ids or not isinstance(pr_ids, (list, tuple)):
            raise InvalidInput("pr_ids must be a non-empty list", approver_id=approver_id)
        if status not in Approval.DECISION_STATUSES:
            raise InvalidInput(
                f"Invalid status '{status}'. Must be 'approved' or 'rejected'",
                status=status,
            )

        result = {"succeeded": [], "failed": []}
        for pr_id in dict.fromkeys(pr_ids):
            try:
                approval = cls.record_approval(pr_id, approver_id, status, comments)
            except ApprovalError as e:
                result["failed"].append({
                    "pr_id": pr_id,
                    "error": e.__class__.__name__,
                    "message": e.message,
                })
                continue

            result["succeeded"].append({
                "pr_id": pr_id,
                "approval_id": approval.id,
                "pr_status": PurchaseRequisition.objects.values_list("status", flat=True).get(pk=pr_id),
            })

        logger.info(
            "Batch %s by %s: %s succeeded, %s failed",
            status, approver_id, len(result["succeeded"]), len(result["failed"]),
        )
        return result
