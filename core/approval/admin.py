from django.contrib import admin
from .models import ApprovalWorkflow, WorkflowRule, Approval


class WorkflowRuleInline(admin.TabularInline):
    """Inline admin for rules within a workflow."""
    model = WorkflowRule
    extra = 0
    fields = ['order_index', 'conditions', 'logic', 'approver_role']
    readonly_fields = ['order_index']
    ordering = ['order_index']


@admin.register(ApprovalWorkflow)
class ApprovalWorkflowAdmin(admin.ModelAdmin):
    """Admin for per-department workflows."""
    list_display = ['name', 'department', 'created_at', 'updated_at']
    list_filter = ['department']
    search_fields = ['name', 'department__name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [WorkflowRuleInline]


@admin.register(WorkflowRule)
class WorkflowRuleAdmin(admin.ModelAdmin):
    list_display = ['workflow', 'order_index', 'logic', 'approver_role', 'created_at']
    list_filter = ['logic', 'approver_role']
    search_fields = ['workflow__name', 'approver_role']
    ordering = ['workflow', 'order_index']


@admin.register(Approval)
class ApprovalAdmin(admin.ModelAdmin):
    """Approval ledger is read-only; decisions go through the API."""
    list_display = ['pr', 'approver', 'status', 'approved_at', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['approver__email', 'approver__name', 'pr__item']
    readonly_fields = ['pr', 'approver', 'status', 'comments', 'approved_at', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
