"""
Purchase Requisition URL Configuration

Mounted at /procurement/pr/. Approval routing for PRs lives under
/core/approval/pr/.
"""

from django.urls import path
from procurement.PR import views

app_name = 'pr'

urlpatterns = [
    path('', views.pr_list, name='pr-list'),
    path('<int:pk>/', views.pr_detail, name='pr-detail'),
    path('<int:pk>/status/', views.pr_change_status, name='pr-change-status'),
]
