"""
Finance app: funds, transactions and the ledger core.

This app handles:
- Admin and project funds, deposits and withdrawals
- Deferred payments repaid in installments
- Time-boxed transaction edit permissions and their hourly expiry
- Expense classification into ledger entries
- Activity log of every mutating operation

Related apps:
    - authentication: User, roles and the operations catalog
    - projects: Project and assignments used for access scoping

Usage:
    from finance.services import FundTransferService

    result = FundTransferService.deposit(user, project_id=7, amount=200_000)
"""
