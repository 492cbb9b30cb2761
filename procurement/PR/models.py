"""
Purchase Requisition (PR) Models

A PR is what employees submit for approval. Its status is driven by the
approval engine (core.approval.managers.ApprovalManager):

    pending --(any rejection)----------> rejected
    pending --(no approvals pending)---> approved

Both outcomes are terminal. Content may only change while pending.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from core.approval.exceptions import InvalidInput, InvalidTransition

logger = logging.getLogger(__name__)


class PurchaseRequisition(models.Model):
    """Purchase requisition submitted by an employee of a department."""

    # Status choices
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
    ]
    TERMINAL_STATUSES = (APPROVED, REJECTED)

    # Fields that may be changed through update_content()
    EDITABLE_FIELDS = ('item', 'quantity', 'total_value', 'category')
    # Attributes rule conditions can test
    SNAPSHOT_FIELDS = (
        'id', 'item', 'quantity', 'total_value', 'department_id', 'category_id',
        'created_by_id', 'status', 'approval_workflow_id',
    )

    # Core fields
    item = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    total_value = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Total requested amount"
    )

    department = models.ForeignKey(
        'user_accounts.Department',
        on_delete=models.PROTECT,
        related_name='purchase_requisitions'
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='purchase_requisitions'
    )
    category = models.ForeignKey(
        'catalog.Category',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='purchase_requisitions'
    )

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PENDING
    )
    approval_workflow = models.ForeignKey(
        'approval.ApprovalWorkflow',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='purchase_requisitions',
        help_text="Workflow used to route this PR"
    )

    # Decision tracking
    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='decided_requisitions',
        help_text="Approver whose decision finalized the PR"
    )
    decided_at = models.DateTimeField(null=True, blank=True)
    decision_comments = models.TextField(blank=True, default='')

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'purchase_requisition'
        verbose_name = 'Purchase Requisition'
        verbose_name_plural = 'Purchase Requisitions'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status', 'department'], name='pr_status_department_idx'),
        ]

    def __str__(self):
        return f"PR {self.id} - {self.item} x{self.quantity} ({self.status})"

    # ==================== HELPER METHODS ====================

    def get_snapshot(self):
        """
        Flat attribute mapping the rule engine evaluates conditions against.

        Keys match the names used in workflow rule conditions, e.g.
        {"field": "total_value", "operator": ">", "value": 1000}.
        """
        return {name: getattr(self, name) for name in self.SNAPSHOT_FIELDS}

    def is_pending(self):
        return self.status == self.PENDING

    def is_approved(self):
        return self.status == self.APPROVED

    def is_rejected(self):
        return self.status == self.REJECTED

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    def can_be_edited(self):
        """Check if PR content can be edited (only while pending)."""
        return self.status == self.PENDING

    def can_be_approved(self):
        """Check if decisions can still be recorded (only while pending)."""
        return self.status == self.PENDING

    # ==================== STATE MACHINE ====================

    def change_status(self, status, approver=None, comments=None):
        """
        Move a pending PR to a terminal status.

        Args:
            status: 'approved' or 'rejected'
            approver: User whose decision finalized the PR (optional)
            comments: Decision comments (optional)

        Raises:
            InvalidTransition: If the PR is not pending or status is not terminal
        """
        if status not in self.TERMINAL_STATUSES:
            raise InvalidTransition(
                f"Cannot change PR status to '{status}'",
                pr_id=self.id,
                current_status=self.status,
                target_status=status,
            )
        if not self.can_be_approved():
            raise InvalidTransition(
                pr_id=self.id,
                current_status=self.status,
                target_status=status,
            )

        self.status = status
        self.decided_by = approver
        self.decided_at = timezone.now()
        self.decision_comments = comments or ''
        self.save(update_fields=[
            'status', 'decided_by', 'decided_at', 'decision_comments', 'updated_at'
        ])

        logger.info(
            "PR %s finalized as %s by %s",
            self.id, status, getattr(approver, 'pk', None)
        )
        return self

    def update_content(self, **updates):
        """
        Update editable content fields of a pending PR.

        Raises:
            InvalidInput: If a field is not editable
            InvalidTransition: If the PR is no longer pending
        """
        unknown = sorted(set(updates) - set(self.EDITABLE_FIELDS))
        if unknown:
            raise InvalidInput(
                f"Fields cannot be updated: {', '.join(unknown)}",
                pr_id=self.id,
                fields=unknown,
            )
        if not self.can_be_edited():
            raise InvalidTransition(
                f"Cannot edit PR in {self.status} status",
                pr_id=self.id,
                current_status=self.status,
            )

        for field, value in updates.items():
            setattr(self, field, value)

        if updates:
            try:
                self.full_clean(exclude=['department', 'created_by', 'approval_workflow', 'decided_by'])
            except ValidationError as e:
                raise InvalidInput(
                    'Invalid PR content',
                    pr_id=self.id,
                    errors=e.message_dict,
                ) from e
            self.save(update_fields=list(updates) + ['updated_at'])
        return self
