import django.db.models.deletion
import django.utils.timezone
import django_fsm
from django.conf import settings
from django.db import migrations, models


def _timestamps():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
        ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("projects", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Fund",
            fields=[
                *_timestamps(),
                ("name", models.CharField(help_text="Display name of the fund", max_length=255)),
                (
                    "kind",
                    models.CharField(
                        choices=[("admin", "Admin"), ("project", "Project")],
                        db_index=True,
                        help_text="Whether the fund belongs to an admin user or a project",
                        max_length=20,
                    ),
                ),
                ("balance", models.BigIntegerField(default=0, help_text="Current balance in minor units")),
                ("version", models.PositiveIntegerField(default=1, help_text="Version for optimistic locking - incremented on each save")),
                (
                    "owner",
                    models.OneToOneField(
                        blank=True,
                        help_text="Owning admin user (admin funds only)",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="admin_fund",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "project",
                    models.OneToOneField(
                        blank=True,
                        help_text="Owning project (project funds only)",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="fund",
                        to="projects.project",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="DeferredPayment",
            fields=[
                *_timestamps(),
                ("beneficiary_name", models.CharField(db_index=True, help_text="Who is owed the money", max_length=200)),
                ("total_amount", models.BigIntegerField(help_text="Total owed in minor units")),
                ("paid_amount", models.BigIntegerField(default=0, help_text="Sum of installments paid so far")),
                ("remaining_amount", models.BigIntegerField(help_text="total_amount - paid_amount")),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[("pending", "Pending"), ("partial", "Partially Paid"), ("completed", "Completed")],
                        db_index=True,
                        default="pending",
                        help_text="Repayment state (managed by FSM)",
                        max_length=50,
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                ("due_date", models.DateField(blank=True, null=True)),
                ("installments", models.PositiveSmallIntegerField(default=1, help_text="Planned number of installments")),
                ("payment_frequency", models.CharField(default="monthly", help_text="Planned installment frequency", max_length=20)),
                ("notes", models.TextField(blank=True, default="")),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=1, help_text="Version for optimistic locking - incremented on each save")),
                (
                    "project",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="deferred_payments",
                        to="projects.project",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who recorded the obligation",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="deferred_payments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                *_timestamps(),
                ("date", models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text="Business date of the transaction")),
                (
                    "type",
                    models.CharField(
                        choices=[("income", "Income"), ("expense", "Expense")],
                        help_text="Income or expense",
                        max_length=10,
                    ),
                ),
                ("amount", models.PositiveBigIntegerField(help_text="Amount in minor units (always positive)")),
                ("description", models.TextField(blank=True, default="", help_text="Free-text description")),
                ("expense_type", models.CharField(blank=True, default="", help_text="Expense type label used for classification", max_length=200)),
                ("is_archived", models.BooleanField(default=False, help_text="Whether the transaction is archived")),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who created the transaction",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "deferred_payment",
                    models.ForeignKey(
                        blank=True,
                        help_text="Deferred payment this installment belongs to",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="transactions",
                        to="finance.deferredpayment",
                    ),
                ),
                (
                    "employee",
                    models.ForeignKey(
                        blank=True,
                        help_text="Employee this transaction is attributed to",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="transactions",
                        to="projects.employee",
                    ),
                ),
                (
                    "fund",
                    models.ForeignKey(
                        blank=True,
                        help_text="Fund whose balance this transaction moved",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="transactions",
                        to="finance.fund",
                    ),
                ),
                (
                    "project",
                    models.ForeignKey(
                        blank=True,
                        help_text="Project this transaction belongs to",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="transactions",
                        to="projects.project",
                    ),
                ),
                (
                    "source_fund",
                    models.ForeignKey(
                        blank=True,
                        help_text="Fund debited on the other side of a deposit",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="outgoing_transfers",
                        to="finance.fund",
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="ExpenseType",
            fields=[
                *_timestamps(),
                ("name", models.CharField(help_text="Expense type name", max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(db_index=True, default=True, help_text="Inactive types are ignored by classification")),
                (
                    "project",
                    models.ForeignKey(
                        blank=True,
                        help_text="Project scope; null for a global type",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="expense_types",
                        to="projects.project",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                *_timestamps(),
                ("date", models.DateTimeField(default=django.utils.timezone.now, help_text="Date of the classified movement")),
                ("account_name", models.CharField(help_text="Name of the bucket at classification time", max_length=200)),
                ("amount", models.BigIntegerField(help_text="Amount in minor units")),
                ("debit_amount", models.BigIntegerField(default=0)),
                ("credit_amount", models.BigIntegerField(default=0)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "entry_type",
                    models.CharField(
                        choices=[
                            ("classified", "Classified"),
                            ("general_expense", "General Expense"),
                            ("deferred_payment", "Deferred Payment"),
                            ("manual", "Manual"),
                        ],
                        db_index=True,
                        default="classified",
                        max_length=30,
                    ),
                ),
                (
                    "expense_type",
                    models.ForeignKey(
                        blank=True,
                        help_text="Bucket the transaction was mapped to",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ledger_entries",
                        to="finance.expensetype",
                    ),
                ),
                (
                    "project",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ledger_entries",
                        to="projects.project",
                    ),
                ),
                (
                    "transaction",
                    models.ForeignKey(
                        blank=True,
                        help_text="Classified transaction",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ledger_entries",
                        to="finance.transaction",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "ledger entries",
                "ordering": ["-date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="TransactionEditPermission",
            fields=[
                *_timestamps(),
                ("granted_at", models.DateTimeField(default=django.utils.timezone.now, help_text="When the permission was granted")),
                ("expires_at", models.DateTimeField(db_index=True, help_text="When the permission stops being effective")),
                ("is_active", models.BooleanField(default=True, help_text="False once revoked or expired")),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[("active", "Active"), ("revoked", "Revoked"), ("expired", "Expired")],
                        db_index=True,
                        default="active",
                        help_text="Grant state (managed by FSM)",
                        max_length=50,
                    ),
                ),
                ("revoked_at", models.DateTimeField(blank=True, null=True)),
                ("reason", models.TextField(blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "granted_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who granted the permission",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "project",
                    models.ForeignKey(
                        blank=True,
                        help_text="Project whose transactions may be edited",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="edit_permissions",
                        to="projects.project",
                    ),
                ),
                (
                    "revoked_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who revoked the permission",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        help_text="User allowed to edit transactions",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="edit_permissions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-granted_at"],
            },
        ),
        migrations.CreateModel(
            name="ActivityLog",
            fields=[
                *_timestamps(),
                ("action", models.CharField(db_index=True, help_text="Action identifier, e.g. 'fund.deposit'", max_length=100)),
                ("entity_type", models.CharField(help_text="Kind of entity acted on", max_length=50)),
                ("entity_id", models.BigIntegerField(blank=True, help_text="Primary key of the entity acted on", null=True)),
                ("details", models.TextField(blank=True, default="", help_text="Human-readable description of what happened")),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who performed the action",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activity_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        # Constraints and indexes
        migrations.AddConstraint(
            model_name="fund",
            constraint=models.CheckConstraint(
                condition=models.Q(
                    models.Q(("kind", "admin"), ("owner__isnull", False), ("project__isnull", True)),
                    models.Q(("kind", "project"), ("owner__isnull", True), ("project__isnull", False)),
                    _connector="OR",
                ),
                name="fund_single_owner",
            ),
        ),
        migrations.AddConstraint(
            model_name="fund",
            constraint=models.CheckConstraint(
                condition=models.Q(("balance__gte", 0)),
                name="fund_balance_non_negative",
            ),
        ),
        migrations.AddConstraint(
            model_name="deferredpayment",
            constraint=models.CheckConstraint(
                condition=models.Q(("total_amount__gt", 0)),
                name="deferred_payment_total_positive",
            ),
        ),
        migrations.AddConstraint(
            model_name="deferredpayment",
            constraint=models.CheckConstraint(
                condition=models.Q(
                    ("total_amount", models.F("paid_amount") + models.F("remaining_amount"))
                ),
                name="deferred_payment_amounts_balance",
            ),
        ),
        migrations.AddIndex(
            model_name="transaction",
            index=models.Index(fields=["project", "date"], name="txn_project_date_idx"),
        ),
        migrations.AddIndex(
            model_name="transaction",
            index=models.Index(fields=["type", "date"], name="txn_type_date_idx"),
        ),
        migrations.AddConstraint(
            model_name="transaction",
            constraint=models.CheckConstraint(
                condition=models.Q(("amount__gt", 0)),
                name="transaction_amount_positive",
            ),
        ),
        migrations.AddConstraint(
            model_name="expensetype",
            constraint=models.UniqueConstraint(
                fields=("name", "project"),
                name="unique_expense_type_per_project",
            ),
        ),
        migrations.AddConstraint(
            model_name="expensetype",
            constraint=models.UniqueConstraint(
                condition=models.Q(("project__isnull", True)),
                fields=("name",),
                name="unique_global_expense_type",
            ),
        ),
        migrations.AddIndex(
            model_name="ledgerentry",
            index=models.Index(fields=["entry_type", "date"], name="ledger_entry_type_date_idx"),
        ),
        migrations.AddIndex(
            model_name="transactioneditpermission",
            index=models.Index(fields=["is_active", "expires_at"], name="edit_perm_active_expiry_idx"),
        ),
        migrations.AddConstraint(
            model_name="transactioneditpermission",
            constraint=models.CheckConstraint(
                condition=models.Q(
                    models.Q(("project__isnull", True), ("user__isnull", False)),
                    models.Q(("project__isnull", False), ("user__isnull", True)),
                    _connector="OR",
                ),
                name="edit_permission_single_target",
            ),
        ),
        migrations.AddConstraint(
            model_name="transactioneditpermission",
            constraint=models.UniqueConstraint(
                condition=models.Q(("is_active", True), ("user__isnull", False)),
                fields=("user",),
                name="unique_active_edit_permission_per_user",
            ),
        ),
        migrations.AddConstraint(
            model_name="transactioneditpermission",
            constraint=models.UniqueConstraint(
                condition=models.Q(("is_active", True), ("project__isnull", False)),
                fields=("project",),
                name="unique_active_edit_permission_per_project",
            ),
        ),
        migrations.AddIndex(
            model_name="activitylog",
            index=models.Index(fields=["entity_type", "entity_id"], name="activity_entity_idx"),
        ),
    ]
