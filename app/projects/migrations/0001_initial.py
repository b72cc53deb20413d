import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Project",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("name", models.CharField(help_text="Project name", max_length=200)),
                ("description", models.TextField(blank=True, default="", help_text="Free-text description")),
                ("start_date", models.DateField(default=django.utils.timezone.localdate, help_text="Date the project started")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("on_hold", "On Hold"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="active",
                        help_text="Lifecycle status",
                        max_length=20,
                    ),
                ),
                ("progress", models.PositiveSmallIntegerField(default=0, help_text="Completion percentage (0-100)")),
                ("budget", models.BigIntegerField(default=0, help_text="Planned budget in minor units")),
                ("spent", models.BigIntegerField(default=0, help_text="Amount spent so far in minor units")),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who created the project",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_projects",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="ProjectAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("assigned_at", models.DateTimeField(default=django.utils.timezone.now, help_text="When the assignment was made")),
                (
                    "assigned_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who made the assignment",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "project",
                    models.ForeignKey(
                        help_text="Project the user is assigned to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="projects.project",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Assigned user",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="project_assignments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-assigned_at"],
            },
        ),
        migrations.AddField(
            model_name="project",
            name="members",
            field=models.ManyToManyField(
                blank=True,
                related_name="projects",
                through="projects.ProjectAssignment",
                through_fields=("project", "user"),
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        migrations.CreateModel(
            name="Employee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("name", models.CharField(help_text="Employee name", max_length=200)),
                ("salary", models.BigIntegerField(default=0, help_text="Monthly salary in minor units")),
                ("active", models.BooleanField(default=True, help_text="Whether the employee is currently employed")),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "assigned_project",
                    models.ForeignKey(
                        blank=True,
                        help_text="Project the employee works on",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="employees",
                        to="projects.project",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
            },
        ),
        migrations.AddConstraint(
            model_name="project",
            constraint=models.CheckConstraint(
                condition=models.Q(("progress__lte", 100)),
                name="project_progress_max_100",
            ),
        ),
        migrations.AddConstraint(
            model_name="projectassignment",
            constraint=models.UniqueConstraint(
                fields=("user", "project"),
                name="unique_project_assignment",
            ),
        ),
    ]
