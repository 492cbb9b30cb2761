from django.contrib import admin
from .models import JobRole


@admin.register(JobRole)
class JobRoleAdmin(admin.ModelAdmin):
    """Admin configuration for JobRole model"""
    list_display = ['code', 'name', 'created_at']
    search_fields = ['code', 'name']
    readonly_fields = ['created_at', 'updated_at']
