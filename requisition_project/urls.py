"""
URL configuration for requisition_project.

- admin/                 Django admin (users, departments, roles, categories)
- core/                  Approval workflow engine endpoints
- procurement/pr/        Purchase requisition store
- auth/                  JWT token endpoints
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('core/', include('core.urls')),
    path('procurement/pr/', include('procurement.PR.urls')),

    # Authentication endpoints (token obtain / refresh)
    path('auth/', include('core.user_accounts.auth_urls')),
]
