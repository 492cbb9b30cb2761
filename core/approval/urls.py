"""
URL Configuration for Approval app.
Handles workflows, rules, per-PR approvals and approver queues.
"""
from django.urls import path
from . import views

app_name = 'approval'

urlpatterns = [
    # Workflow endpoints
    path('workflows/', views.workflow_list, name='workflow-list'),
    path('workflows/<int:pk>/', views.workflow_detail, name='workflow-detail'),
    path('workflows/<int:pk>/rules/', views.workflow_add_rule, name='workflow-add-rule'),

    # PR approval endpoints
    path(
        'pr/<int:pr_id>/approvals/init/<int:workflow_id>/',
        views.pr_init_approvals,
        name='pr-init-approvals'
    ),
    path('pr/<int:pr_id>/approvals/', views.pr_approvals, name='pr-approvals'),
    path('pr/<int:pr_id>/approve/', views.pr_approve, name='pr-approve'),
    path('pr/<int:pr_id>/reject/', views.pr_reject, name='pr-reject'),

    # Approver queue endpoints
    path('pending/', views.my_pending_approvals, name='pending'),
    path('history/', views.my_approval_history, name='history'),
    path('batch/approve/', views.batch_approve, name='batch-approve'),
]
