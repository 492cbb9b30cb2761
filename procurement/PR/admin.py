from django.contrib import admin
from .models import PurchaseRequisition


@admin.register(PurchaseRequisition)
class PurchaseRequisitionAdmin(admin.ModelAdmin):
    list_display = ['id', 'item', 'quantity', 'total_value', 'department', 'status', 'created_by', 'created_at']
    list_filter = ['status', 'department', 'category']
    search_fields = ['item', 'created_by__email']
    readonly_fields = ['status', 'approval_workflow', 'decided_by', 'decided_at', 'decision_comments', 'created_at', 'updated_at']
