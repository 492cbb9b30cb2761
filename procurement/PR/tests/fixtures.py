"""
Test fixtures and helper functions for PR and approval tests.

This module provides common test data setup to avoid code duplication
across test files.
"""

from decimal import Decimal
from django.contrib.auth import get_user_model

from core.job_roles.models import JobRole
from core.user_accounts.models import Department
from procurement.catalog.models import Category
from procurement.PR.models import PurchaseRequisition

User = get_user_model()


def create_department(name='IT'):
    """Get or create a test department"""
    department, _ = Department.objects.get_or_create(name=name)
    return department


def create_role(code='manager', name=None):
    """Get or create a job role by code"""
    role, _ = JobRole.objects.get_or_create(
        code=code,
        defaults={'name': name or code.replace('_', ' ').title()}
    )
    return role


def create_user(email, role=None, department=None, name=None, is_active=True, password='testpass123'):
    """
    Create a test user.

    role may be a JobRole or a role code; codes are created on demand.
    """
    if isinstance(role, str):
        role = create_role(role)
    return User.objects.create_user(
        email=email,
        name=name or email.split('@')[0].title(),
        password=password,
        job_role=role,
        department=department,
        is_active=is_active,
    )


def create_category(name='IT Equipment'):
    """Get or create a test purchase category"""
    category, _ = Category.objects.get_or_create(name=name)
    return category


def create_pr(created_by, department=None, item='Laptop', quantity=1,
              total_value='1500.00', category=None, status=PurchaseRequisition.PENDING):
    """Create a test purchase requisition"""
    return PurchaseRequisition.objects.create(
        item=item,
        quantity=quantity,
        total_value=Decimal(str(total_value)),
        department=department or created_by.department,
        created_by=created_by,
        category=category,
        status=status,
    )


def create_workflow_with_rule(department, condition=None, approver_role='manager',
                              name='Default Workflow', logic='AND'):
    """
    Create a workflow with a single rule through ApprovalManager.

    Defaults to the classic threshold rule: total_value > 1000 -> manager.
    """
    from core.approval.managers import ApprovalManager

    if condition is None:
        condition = {'field': 'total_value', 'operator': '>', 'value': 1000}

    workflow = ApprovalManager.create_workflow(department.id, name)
    ApprovalManager.add_rule(workflow.id, condition, approver_role, logic=logic)
    return workflow
