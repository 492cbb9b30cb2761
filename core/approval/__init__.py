"""
Rule-based approval workflow engine for purchase requisitions.

Usage:
    from core.approval.managers import ApprovalManager

    workflow = ApprovalManager.create_workflow(department.id, "Default")
    ApprovalManager.add_rule(
        workflow.id,
        {"field": "total_value", "operator": ">", "value": 1000},
        "manager",
    )

    ApprovalManager.init_approvals(pr.id, workflow.id)
    ApprovalManager.record_approval(pr.id, user.id, "approved", comments="OK")
"""

# Don't import models/managers at module level to avoid AppRegistryNotReady errors
# Import them directly from their modules when needed:
# from core.approval.managers import ApprovalManager
# from core.approval.rule_engine import RuleEngine, Condition
