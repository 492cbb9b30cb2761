"""
URL Configuration for Core module.
Handles the user directory and the approval workflow engine.
"""
from django.urls import path, include

app_name = 'core'

urlpatterns = [
    # User accounts sub-app URLs
    path('user_accounts/', include('core.user_accounts.urls')),

    # Approval sub-app URLs
    path('approval/', include('core.approval.urls')),
]
