"""
PR Tests Package

- fixtures.py: Shared factories for departments, roles, users, PRs and workflows
- test_pr_model.py: PurchaseRequisition snapshot, status changes and content edits
- test_pr_api.py: PR list, create, detail, update and status endpoints
"""
