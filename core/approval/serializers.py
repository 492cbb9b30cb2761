"""
Serializers for approval workflow models.

Read serializers render workflows, rules and approvals. Request serializers
only check shapes; condition contents are validated by ApprovalManager.
"""
from rest_framework import serializers

from core.user_accounts.serializers import UserSummarySerializer
from procurement.PR.serializers import PRListSerializer

from .models import Approval, ApprovalWorkflow, WorkflowRule
from .exceptions import InvalidInput
from .rule_engine import LOGIC_AND, normalize_logic


class WorkflowRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = WorkflowRule
        fields = ['id', 'workflow', 'order_index', 'conditions', 'logic', 'approver_role', 'created_at']
        read_only_fields = fields


class ApprovalWorkflowListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for listing workflows."""
    department_name = serializers.CharField(source='department.name', read_only=True)
    rule_count = serializers.SerializerMethodField()

    class Meta:
        model = ApprovalWorkflow
        fields = ['id', 'name', 'department', 'department_name', 'rule_count', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_rule_count(self, obj):
        # rules are prefetched by ApprovalManager.list_workflows
        return len(obj.rules.all())


class ApprovalWorkflowSerializer(serializers.ModelSerializer):
    """Full workflow with its ordered rules."""
    department_name = serializers.CharField(source='department.name', read_only=True)
    rules = serializers.SerializerMethodField()

    class Meta:
        model = ApprovalWorkflow
        fields = ['id', 'name', 'department', 'department_name', 'rules', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_rules(self, obj):
        rules = sorted(obj.rules.all(), key=lambda rule: rule.order_index)
        return WorkflowRuleSerializer(rules, many=True).data


class ApprovalWorkflowCreateSerializer(serializers.Serializer):
    department = serializers.IntegerField(min_value=1)
    name = serializers.CharField(max_length=120)


class WorkflowRuleCreateSerializer(serializers.Serializer):
    """
    Request body for appending a rule.

    Either a single condition:
        {"condition": {"field": "total_value", "operator": ">", "value": 1000},
         "approver_role": "manager"}
    or several combined with logic:
        {"conditions": [{...}, {...}], "logic": "OR", "approver_role": "finance"}
    """
    condition = serializers.JSONField(required=False)
    conditions = serializers.JSONField(required=False)
    approver_role = serializers.CharField(max_length=50)
    logic = serializers.CharField(max_length=3, default=LOGIC_AND)

    def validate_logic(self, value):
        """Same case-insensitive AND/OR the manager accepts"""
        try:
            return normalize_logic(value)
        except InvalidInput as e:
            raise serializers.ValidationError(e.message)

    def validate(self, data):
        has_single = 'condition' in data
        has_many = 'conditions' in data
        if has_single == has_many:
            raise serializers.ValidationError(
                "Provide exactly one of 'condition' or 'conditions'"
            )
        data['condition_input'] = data.pop('condition') if has_single else data.pop('conditions')
        return data


class ApprovalSerializer(serializers.ModelSerializer):
    approver_details = UserSummarySerializer(source='approver', read_only=True)

    class Meta:
        model = Approval
        fields = [
            'id', 'pr', 'approver', 'approver_details', 'status',
            'comments', 'approved_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ApprovalQueueSerializer(serializers.ModelSerializer):
    """Approval with its PR, used by the pending and history queues."""
    pr_details = PRListSerializer(source='pr', read_only=True)

    class Meta:
        model = Approval
        fields = ['id', 'pr', 'pr_details', 'status', 'comments', 'approved_at', 'created_at']
        read_only_fields = fields


class ApprovalDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=list(Approval.DECISION_STATUSES))
    comments = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ApprovalCommentSerializer(serializers.Serializer):
    """Body of the approve/reject shortcuts."""
    comments = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class BatchApprovalSerializer(serializers.Serializer):
    pr_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
    )
    comments = serializers.CharField(required=False, allow_blank=True, allow_null=True)
