"""
Role default permissions and the operations catalog.

Every API operation is identified by a dotted key ("fund.deposit",
"deferredPayment.delete", ...). A rule either names the roles allowed to run
it directly, or lists permission codes of which the user needs any one (or,
when required_all is set, all of them).

Usage:
    from authentication.roles import can_role_execute

    if not can_role_execute("fund.adminTransaction", user.role, user.effective_permissions):
        raise Unauthorized(...)
"""

from __future__ import annotations

from dataclasses import dataclass, field

ROLE_DEFAULT_PERMISSIONS: dict[str, tuple[str, ...]] = {
    "admin": (
        "view_dashboard",
        "manage_users",
        "view_users",
        "manage_projects",
        "view_projects",
        "manage_project_transactions",
        "view_project_transactions",
        "manage_transactions",
        "view_transactions",
        "manage_documents",
        "view_documents",
        "view_reports",
        "view_activity_logs",
        "manage_settings",
        "view_income",
    ),
    "manager": (
        "view_dashboard",
        "view_users",
        "manage_projects",
        "view_projects",
        "manage_project_transactions",
        "view_project_transactions",
        "manage_transactions",
        "view_transactions",
        "manage_documents",
        "view_documents",
        "view_reports",
        "view_income",
    ),
    "user": (
        "view_dashboard",
        "view_projects",
        "manage_project_transactions",
        "view_project_transactions",
        "manage_transactions",
        "view_transactions",
        "manage_documents",
        "view_documents",
    ),
    "viewer": (
        "view_dashboard",
        "view_projects",
        "view_project_transactions",
        "view_transactions",
        "view_documents",
    ),
}


@dataclass(frozen=True)
class OperationRule:
    """
    Authorization rule for one operation.

    Attributes:
        description: Human-readable summary
        required_any: Permission codes; holding one of them is enough
        required_all: Permission codes that must all be held (takes precedence)
        allowed_roles: Roles allowed regardless of permissions
    """

    description: str
    required_any: tuple[str, ...] = field(default_factory=tuple)
    required_all: tuple[str, ...] = field(default_factory=tuple)
    allowed_roles: tuple[str, ...] = field(default_factory=tuple)


OPERATIONS_CATALOG: dict[str, OperationRule] = {
    # Users
    "user.list": OperationRule("List users", required_any=("view_users",)),
    "user.assignProject": OperationRule("Assign a user to a project", allowed_roles=("admin",)),
    "user.removeProject": OperationRule("Remove a user from a project", allowed_roles=("admin",)),
    # Projects
    "project.create": OperationRule("Create a project", required_any=("manage_projects",)),
    "project.update": OperationRule("Update a project", required_any=("manage_projects",)),
    "project.delete": OperationRule("Delete a project", allowed_roles=("admin",)),
    "project.list": OperationRule("List projects", required_any=("view_projects",)),
    # Transactions
    "transaction.create": OperationRule(
        "Create a transaction",
        required_any=("manage_transactions", "manage_project_transactions"),
    ),
    "transaction.update": OperationRule("Update a transaction", required_any=("manage_transactions",)),
    "transaction.delete": OperationRule("Delete a transaction", required_any=("manage_transactions",)),
    "transaction.list": OperationRule(
        "List transactions",
        required_any=("view_transactions", "view_project_transactions"),
    ),
    # Activity log
    "activityLog.view": OperationRule("View the activity log", required_any=("view_activity_logs",)),
    # Funds
    "fund.deposit": OperationRule("Deposit into a project fund", required_any=("manage_project_transactions",)),
    "fund.withdraw": OperationRule("Withdraw from a project fund", required_any=("manage_project_transactions",)),
    "fund.adminTransaction": OperationRule("Administrator fund transaction", allowed_roles=("admin",)),
    "fund.list": OperationRule("List funds", required_any=("view_projects", "view_transactions")),
    # Expense types and ledger
    "expenseType.manage": OperationRule("Manage expense types", required_any=("manage_transactions",)),
    "expenseType.view": OperationRule("View expense types", required_any=("view_transactions",)),
    "ledger.view": OperationRule("View ledger entries", required_any=("view_transactions",)),
    "ledger.reclassify": OperationRule("Reclassify expense transactions", allowed_roles=("admin",)),
    # Deferred payments
    "deferredPayment.create": OperationRule("Create a deferred payment", required_any=("manage_transactions",)),
    "deferredPayment.pay": OperationRule("Pay a deferred payment installment", required_any=("manage_transactions",)),
    "deferredPayment.delete": OperationRule("Delete a deferred payment", allowed_roles=("admin", "manager")),
    "deferredPayment.list": OperationRule("List deferred payments", required_any=("view_transactions",)),
    # Transaction edit permissions
    "transactionEditPermission.grant": OperationRule(
        "Grant a transaction edit permission", allowed_roles=("admin", "manager")
    ),
    "transactionEditPermission.revoke": OperationRule(
        "Revoke a transaction edit permission", allowed_roles=("admin", "manager")
    ),
    "transactionEditPermission.view": OperationRule(
        "View transaction edit permissions", required_any=("view_transactions",)
    ),
}


def can_role_execute(operation: str, role: str, permissions=()) -> bool:
    """
    Decide whether a role/permission set may run an operation.

    Unknown operations are denied.
    """
    rule = OPERATIONS_CATALOG.get(operation)
    if rule is None:
        return False
    if role in rule.allowed_roles:
        return True
    held = set(permissions)
    if rule.required_all:
        return all(code in held for code in rule.required_all)
    return any(code in held for code in rule.required_any)
