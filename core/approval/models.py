"""Approval workflow models.

A workflow belongs to a department and holds an ordered list of rules.
Each rule maps a set of conditions on a purchase requisition to the job
role that has to approve it. Approvals are the per-approver ledger rows
created when a PR is routed through a workflow.
"""

from django.conf import settings
from django.db import models

from .rule_engine import LOGIC_AND, LOGIC_OR, Condition, Rule


class ApprovalWorkflow(models.Model):
    """Per-department container of approval rules."""

    department = models.ForeignKey(
        'user_accounts.Department',
        on_delete=models.PROTECT,
        related_name='approval_workflows',
    )
    name = models.CharField(max_length=120)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "approval_workflow"
        ordering = ["department", "name", "id"]

    def __str__(self):
        return f"{self.name} ({self.department})"

    def get_rules(self):
        """Rules in evaluation order, as engine ``Rule`` objects."""
        # rules.all() so a prefetch_related("rules") is reused
        rules = sorted(self.rules.all(), key=lambda rule: rule.order_index)
        return [rule.to_rule() for rule in rules]


class WorkflowRule(models.Model):
    """One routing rule: conditions combined with AND/OR, and a target role.

    Rules are append-only; ``order_index`` is assigned by
    ``ApprovalManager.add_rule`` under a row lock on the workflow.
    """

    LOGIC_CHOICES = [
        (LOGIC_AND, "All conditions must hold"),
        (LOGIC_OR, "Any condition may hold"),
    ]

    workflow = models.ForeignKey(
        ApprovalWorkflow,
        related_name="rules",
        on_delete=models.CASCADE,
    )
    order_index = models.PositiveIntegerField(help_text="1-based evaluation order")
    conditions = models.JSONField(
        default=list,
        help_text='List of {"field", "operator", "value"} objects',
    )
    logic = models.CharField(max_length=3, choices=LOGIC_CHOICES, default=LOGIC_AND)
    approver_role = models.CharField(
        max_length=50,
        help_text="Job role code whose holders must approve",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "approval_workflow_rule"
        ordering = ["workflow", "order_index"]
        unique_together = ("workflow", "order_index")

    def __str__(self):
        joined = f" {self.logic} ".join(str(c) for c in self.get_conditions())
        return f"{self.workflow_id}#{self.order_index} [{joined}] -> {self.approver_role}"

    def get_conditions(self):
        # Stored rows were validated on creation; parse leniently so an
        # unsupported operator is reported by the evaluator, not here.
        return tuple(Condition.from_dict(item, strict=False) for item in self.conditions)

    def to_rule(self):
        return Rule(
            id=self.pk,
            conditions=self.get_conditions(),
            logic=self.logic,
            approver_role=self.approver_role,
        )


class Approval(models.Model):
    """One approver's decision on one purchase requisition."""

    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]
    DECISION_STATUSES = (STATUS_APPROVED, STATUS_REJECTED)

    pr = models.ForeignKey(
        'PR.PurchaseRequisition',
        on_delete=models.CASCADE,
        related_name="approvals",
    )
    approver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="approvals",
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    comments = models.TextField(blank=True, default="")
    approved_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the decision was recorded",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "approval"
        ordering = ["created_at", "id"]
        unique_together = ("pr", "approver")
        indexes = [
            models.Index(fields=["approver", "status"], name="approval_approver_status_idx"),
            models.Index(fields=["pr", "status"], name="approval_pr_status_idx"),
        ]

    def __str__(self):
        return f"PR {self.pr_id} / {self.approver_id}: {self.status}"

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING
