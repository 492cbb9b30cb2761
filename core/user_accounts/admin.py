from django.contrib import admin
from .models import CustomUser, Department


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    """Admin configuration for Department model"""
    list_display = ['name', 'created_at']
    search_fields = ['name']


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    """Admin configuration for CustomUser model"""
    list_display = ['email', 'name', 'job_role', 'department', 'is_active']
    list_filter = ['job_role', 'department', 'is_active']
    search_fields = ['email', 'name']
    readonly_fields = ['last_login']

    fieldsets = (
        ('User Information', {
            'fields': ('email', 'name')
        }),
        ('Approval Routing', {
            'fields': ('job_role', 'department')
        }),
        ('Status & Permissions', {
            'fields': ('is_active', 'is_super_user')
        }),
        ('Authentication', {
            'fields': ('password', 'last_login')
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        """Super user flag and email are fixed once a super user exists"""
        readonly = list(self.readonly_fields)
        if obj and obj.is_super_user:
            readonly.extend(['is_super_user', 'email'])
        return readonly
