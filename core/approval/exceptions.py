"""Typed failures raised by the approval workflow engine.

Every error carries a ``detail`` dict naming the workflow, rule, PR or
approver involved so callers can report exactly what went wrong, and an
HTTP ``status_code`` used by the API layer when translating the failure.

All errors subclass ``ValueError`` so existing ``except ValueError``
handlers in views keep working.
"""

from rest_framework import status


class ApprovalError(ValueError):
    """Base class for all approval engine failures."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Approval workflow error"

    def __init__(self, message=None, **detail):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self):
        return {
            'error': self.__class__.__name__,
            'message': self.message,
            'detail': self.detail,
        }


class NotFound(ApprovalError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class WorkflowNotFound(NotFound):
    default_message = "Workflow not found"


class PRNotFound(NotFound):
    default_message = "PR not found"


class ApprovalNotFound(NotFound):
    default_message = "Approval not found"


class InvalidInput(ApprovalError):
    default_message = "Invalid input"


class NoApproversMatched(ApprovalError):
    """The workflow's rules matched none of the PR's attributes.

    This is a workflow configuration problem, not a PR content problem.
    """

    default_message = "No approvers matched based on workflow rules."


class NoEligibleApprovers(ApprovalError):
    """A required role matched but nobody in the PR's department holds it."""

    default_message = "No users found for the approver roles."


class InvalidTransition(ApprovalError):
    """The PR state machine refused the requested change."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Only pending PRs can be approved or rejected"
