"""
Purchase Requisition Serializers - API Layer for PR Operations

Thin wrappers for request validation and response formatting.
Status changes and edit rules live on the model (PurchaseRequisition).
"""

from decimal import Decimal

from rest_framework import serializers

from core.user_accounts.models import Department
from core.user_accounts.serializers import UserSummarySerializer
from procurement.catalog.models import Category
from procurement.PR.models import PurchaseRequisition


class PRListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for listing PRs"""

    department_name = serializers.CharField(source='department.name', read_only=True)
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)

    class Meta:
        model = PurchaseRequisition
        fields = [
            'id', 'item', 'quantity', 'total_value',
            'department', 'department_name', 'category', 'category_name',
            'status', 'created_by', 'created_at',
        ]
        read_only_fields = fields


class PRDetailSerializer(serializers.ModelSerializer):
    """Detailed serializer for a PR including its decision tracking"""

    department_name = serializers.CharField(source='department.name', read_only=True)
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    created_by_details = UserSummarySerializer(source='created_by', read_only=True)
    decided_by_details = UserSummarySerializer(source='decided_by', read_only=True)
    pending_approvals = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = PurchaseRequisition
        fields = [
            'id', 'item', 'quantity', 'total_value',
            'department', 'department_name', 'category', 'category_name',
            'status', 'approval_workflow', 'pending_approvals',
            'created_by', 'created_by_details',
            'decided_by', 'decided_by_details', 'decided_at', 'decision_comments',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_pending_approvals(self, obj):
        """Number of approvers who have not decided yet"""
        return obj.approvals.filter(status='pending').count()


class PRCreateSerializer(serializers.Serializer):
    """
    Serializer for creating PRs.

    Example Request Body:
    {
        "item": "Dell Laptop XPS 15",
        "quantity": 3,
        "total_value": "4500.00",
        "category": 2
    }

    department defaults to the requesting user's department.
    """

    item = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1)
    total_value = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0'))
    department = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.all(),
        required=False
    )
    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.filter(is_active=True),
        required=False,
        allow_null=True
    )

    def validate(self, attrs):
        """Fill department from the requester when not given"""
        if not attrs.get('department'):
            user = self.context['request'].user
            if not getattr(user, 'department_id', None):
                raise serializers.ValidationError({
                    'department': 'department is required when the requester has none'
                })
            attrs['department'] = user.department
        return attrs

    def create(self, validated_data):
        return PurchaseRequisition.objects.create(
            created_by=self.context['request'].user,
            **validated_data
        )


class PRUpdateSerializer(serializers.Serializer):
    """Content fields a requester may change while the PR is pending"""

    item = serializers.CharField(max_length=255, required=False)
    quantity = serializers.IntegerField(min_value=1, required=False)
    total_value = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal('0'), required=False
    )
    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.filter(is_active=True),
        required=False,
        allow_null=True
    )


class PRStatusSerializer(serializers.Serializer):
    """Request body for a direct status change"""

    status = serializers.ChoiceField(choices=list(PurchaseRequisition.TERMINAL_STATUSES))
    comments = serializers.CharField(required=False, allow_blank=True, allow_null=True)
