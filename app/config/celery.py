"""
Celery configuration for the accounting service.

Redis is both the message broker and the result backend. Periodic tasks
live in the django-celery-beat database scheduler; the hourly
finance.tasks.expire_edit_permissions entry is created by a finance data
migration.

Run a worker and the scheduler with:
    celery -A config worker -l info
    celery -A config beat -l info

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Picks up finance.tasks
app.autodiscover_tasks()
