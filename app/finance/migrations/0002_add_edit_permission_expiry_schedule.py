"""
Add celery-beat schedule for expiring transaction edit permissions.

Creates the hourly periodic task that runs
finance.tasks.expire_edit_permissions.
"""

from django.db import migrations

TASK_NAME = "Expire Transaction Edit Permissions"


def create_periodic_task(apps, schema_editor):
    """Create the periodic task for the edit permission sweep."""
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    schedule, _ = IntervalSchedule.objects.get_or_create(
        every=1,
        period="hours",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "finance.tasks.expire_edit_permissions",
            "interval": schedule,
            "enabled": True,
            "description": (
                "Deactivates transaction edit permissions whose expiry time "
                "has passed."
            ),
        },
    )


def remove_periodic_task(apps, schema_editor):
    """Remove the periodic task on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("finance", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_task, remove_periodic_task),
    ]
