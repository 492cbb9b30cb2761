"""
API Views for the approval workflow engine.

Workflow store:
    GET/POST  /core/approval/workflows/
    GET       /core/approval/workflows/{id}/
    POST      /core/approval/workflows/{id}/rules/

PR approvals:
    POST      /core/approval/pr/{pr_id}/approvals/init/{workflow_id}/
    GET/POST  /core/approval/pr/{pr_id}/approvals/
    POST      /core/approval/pr/{pr_id}/approve/
    POST      /core/approval/pr/{pr_id}/reject/

Approver queues:
    GET       /core/approval/pending/
    GET       /core/approval/history/
    POST      /core/approval/batch/approve/
"""
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from requisition_project.pagination import auto_paginate
from requisition_project.response_formatter import (
    approval_error_response,
    error_response,
    success_response,
)

from .exceptions import ApprovalError
from .managers import ApprovalManager
from .models import Approval
from .serializers import (
    ApprovalCommentSerializer,
    ApprovalDecisionSerializer,
    ApprovalQueueSerializer,
    ApprovalSerializer,
    ApprovalWorkflowCreateSerializer,
    ApprovalWorkflowListSerializer,
    ApprovalWorkflowSerializer,
    BatchApprovalSerializer,
    WorkflowRuleCreateSerializer,
    WorkflowRuleSerializer,
)


# ============================================================================
# Workflow store
# ============================================================================

@api_view(['GET', 'POST'])
@auto_paginate
def workflow_list(request):
    """
    List workflows or create a new one.

    GET /workflows/
    - Query params:
        - department: Filter by department ID

    POST /workflows/
    - Request body: {"department": 1, "name": "IT purchases"}
    """
    if request.method == 'GET':
        department_id = request.query_params.get('department')
        if department_id is not None and not department_id.isdigit():
            return error_response("department must be an integer")

        workflows = ApprovalManager.list_workflows(
            int(department_id) if department_id is not None else None
        )
        serializer = ApprovalWorkflowListSerializer(workflows, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    serializer = ApprovalWorkflowCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        workflow = ApprovalManager.create_workflow(
            serializer.validated_data['department'],
            serializer.validated_data['name'],
        )
    except ApprovalError as e:
        return approval_error_response(e)

    workflow = ApprovalManager.get_workflow_by_id(workflow.id)
    return success_response(
        data=ApprovalWorkflowSerializer(workflow).data,
        message="Workflow created",
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
def workflow_detail(request, pk):
    """
    GET /workflows/{id}/
    - Workflow with its rules in evaluation order
    """
    try:
        workflow = ApprovalManager.get_workflow_by_id(pk)
    except ApprovalError as e:
        return approval_error_response(e)

    return Response(ApprovalWorkflowSerializer(workflow).data, status=status.HTTP_200_OK)


@api_view(['POST'])
def workflow_add_rule(request, pk):
    """
    Append a rule to a workflow.

    POST /workflows/{id}/rules/
    - Request body:
        {"condition": {"field": "total_value", "operator": ">", "value": 1000},
         "approver_role": "manager"}
      or
        {"conditions": [...], "logic": "OR", "approver_role": "finance"}
    """
    serializer = WorkflowRuleCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        rule = ApprovalManager.add_rule(
            pk,
            data['condition_input'],
            data['approver_role'],
            logic=data['logic'],
        )
    except ApprovalError as e:
        return approval_error_response(e)

    return success_response(
        data=WorkflowRuleSerializer(rule).data,
        message="Rule added",
        status_code=status.HTTP_201_CREATED,
    )


# ============================================================================
# PR approvals
# ============================================================================

@api_view(['POST'])
def pr_init_approvals(request, pr_id, workflow_id):
    """
    Route a PR through a workflow, creating one pending approval per approver.

    POST /pr/{pr_id}/approvals/init/{workflow_id}/
    """
    try:
        approvals = ApprovalManager.init_approvals(pr_id, workflow_id)
    except ApprovalError as e:
        return approval_error_response(e)

    return success_response(
        data=ApprovalSerializer(approvals, many=True).data,
        message=f"{len(approvals)} approval(s) initialized",
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'POST'])
@auto_paginate
def pr_approvals(request, pr_id):
    """
    GET /pr/{pr_id}/approvals/
    - Approvals of the PR in creation order

    POST /pr/{pr_id}/approvals/
    - Record the current user's decision
    - Request body: {"status": "approved" | "rejected", "comments": "..."}
    """
    if request.method == 'GET':
        try:
            approvals = ApprovalManager.get_approvals(pr_id)
        except ApprovalError as e:
            return approval_error_response(e)
        return Response(ApprovalSerializer(approvals, many=True).data, status=status.HTTP_200_OK)

    serializer = ApprovalDecisionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    return _record_decision(
        request,
        pr_id,
        serializer.validated_data['status'],
        serializer.validated_data.get('comments'),
    )


@api_view(['POST'])
def pr_approve(request, pr_id):
    """
    POST /pr/{pr_id}/approve/
    - Request body (optional): {"comments": "..."}
    """
    return _decision_shortcut(request, pr_id, Approval.STATUS_APPROVED)


@api_view(['POST'])
def pr_reject(request, pr_id):
    """
    POST /pr/{pr_id}/reject/
    - Request body (optional): {"comments": "..."}
    """
    return _decision_shortcut(request, pr_id, Approval.STATUS_REJECTED)


def _decision_shortcut(request, pr_id, decision):
    serializer = ApprovalCommentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    return _record_decision(request, pr_id, decision, serializer.validated_data.get('comments'))


def _record_decision(request, pr_id, decision, comments):
    try:
        approval = ApprovalManager.record_approval(pr_id, request.user.id, decision, comments)
    except ApprovalError as e:
        return approval_error_response(e)

    approval.pr.refresh_from_db(fields=['status'])
    data = ApprovalSerializer(approval).data
    data['pr_status'] = approval.pr.status
    return success_response(data=data, message=f"Decision recorded: {decision}")


# ============================================================================
# Approver queues
# ============================================================================

@api_view(['GET'])
@auto_paginate
def my_pending_approvals(request):
    """
    GET /pending/
    - Approvals waiting on the current user for PRs still pending
    """
    approvals = ApprovalManager.get_user_pending_approvals(request.user)
    return Response(ApprovalQueueSerializer(approvals, many=True).data, status=status.HTTP_200_OK)


@api_view(['GET'])
@auto_paginate
def my_approval_history(request):
    """
    GET /history/
    - Decisions recorded by the current user, newest first
    - Query params:
        - status: approved | rejected
    """
    approvals = ApprovalManager.get_user_approval_history(request.user)

    status_filter = request.query_params.get('status')
    if status_filter:
        if status_filter not in Approval.DECISION_STATUSES:
            return error_response("status must be 'approved' or 'rejected'")
        approvals = approvals.filter(status=status_filter)

    return Response(ApprovalQueueSerializer(approvals, many=True).data, status=status.HTTP_200_OK)


@api_view(['POST'])
def batch_approve(request):
    """
    Approve several PRs at once as the current user.

    POST /batch/approve/
    - Request body: {"pr_ids": [1, 2, 3], "comments": "..."}
    - Each PR is processed independently; failures are reported per PR.
    """
    serializer = BatchApprovalSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        result = ApprovalManager.batch_record_approval(
            serializer.validated_data['pr_ids'],
            request.user.id,
            Approval.STATUS_APPROVED,
            serializer.validated_data.get('comments'),
        )
    except ApprovalError as e:
        return approval_error_response(e)

    return success_response(
        data=result,
        message=f"{len(result['succeeded'])} approved, {len(result['failed'])} failed",
    )
