"""
Purchase Requisition Views - API Endpoints for PR Operations

Thin wrappers that handle HTTP request/response, pagination and
format conversion. Status rules live on PurchaseRequisition; approval
routing lives in core.approval.
"""

from django.db import transaction
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from requisition_project.response_formatter import (
    approval_error_response,
    error_response,
    success_response,
)
from requisition_project.pagination import auto_paginate
from core.approval.exceptions import ApprovalError, PRNotFound

from procurement.PR.models import PurchaseRequisition
from procurement.PR.serializers import (
    PRCreateSerializer,
    PRDetailSerializer,
    PRListSerializer,
    PRStatusSerializer,
    PRUpdateSerializer,
)


def _get_pr(pk, lock=False):
    if lock:
        qs = PurchaseRequisition.objects.select_for_update()
    else:
        qs = PurchaseRequisition.objects.select_related('department', 'category', 'created_by', 'decided_by')
    try:
        return qs.get(pk=pk)
    except PurchaseRequisition.DoesNotExist:
        raise PRNotFound(f"PR {pk} not found", pr_id=pk)


@api_view(['GET', 'POST'])
@auto_paginate
def pr_list(request):
    """
    GET: List PRs with optional filtering
        - status: pending | approved | rejected
        - department: Department ID
        - created_by: User ID
    POST: Create a new PR (status starts as pending)
    """
    if request.method == 'GET':
        queryset = PurchaseRequisition.objects.select_related('department', 'category')

        status_filter = request.query_params.get('status')
        if status_filter:
            valid = [choice for choice, _ in PurchaseRequisition.STATUS_CHOICES]
            if status_filter not in valid:
                return error_response(f"status must be one of: {', '.join(valid)}")
            queryset = queryset.filter(status=status_filter)

        for param, field in (('department', 'department_id'), ('created_by', 'created_by_id')):
            value = request.query_params.get(param)
            if value:
                if not value.isdigit():
                    return error_response(f"{param} must be an integer")
                queryset = queryset.filter(**{field: int(value)})

        serializer = PRListSerializer(queryset, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    serializer = PRCreateSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    pr = serializer.save()
    return success_response(
        data=PRDetailSerializer(pr).data,
        message="PR created successfully",
        status_code=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PUT', 'PATCH'])
def pr_detail(request, pk):
    """
    GET: PR details
    PUT/PATCH: Update item, quantity, total_value or category (pending PRs only)
    """
    if request.method == 'GET':
        try:
            pr = _get_pr(pk)
        except ApprovalError as e:
            return approval_error_response(e)
        return Response(PRDetailSerializer(pr).data, status=status.HTTP_200_OK)

    serializer = PRUpdateSerializer(data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        with transaction.atomic():
            pr = _get_pr(pk, lock=True)
            pr.update_content(**serializer.validated_data)
    except ApprovalError as e:
        return approval_error_response(e)

    return success_response(
        data=PRDetailSerializer(pr).data,
        message="PR updated successfully"
    )


@api_view(['PATCH'])
def pr_change_status(request, pk):
    """
    Finalize a pending PR directly, recording the current user as decider.

    PATCH /procurement/pr/{id}/status/
    - Request body: {"status": "approved" | "rejected", "comments": "..."}
    """
    serializer = PRStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        with transaction.atomic():
            pr = _get_pr(pk, lock=True)
            pr.change_status(
                serializer.validated_data['status'],
                approver=request.user,
                comments=serializer.validated_data.get('comments'),
            )
    except ApprovalError as e:
        return approval_error_response(e)

    return success_response(
        data=PRDetailSerializer(pr).data,
        message=f"PR {pr.status}"
    )
