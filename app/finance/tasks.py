"""
Celery tasks for the finance app.

Tasks:
- expire_edit_permissions: Hourly sweep deactivating expired edit permissions

The schedule is stored in django-celery-beat (see migration
0002_add_edit_permission_expiry_schedule).
"""

from __future__ import annotations

import logging

from celery import shared_task
from django.conf import settings

from finance.exceptions import LockAcquisitionError
from finance.locks import DistributedLock
from finance.services import EditPermissionService

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

SWEEP_LOCK_KEY = "finance:edit-permission-sweep"


@shared_task(bind=True)
def expire_edit_permissions(self) -> dict:
    """
    Deactivate every edit permission past its expiry time.

    Only one worker sweeps at a time; a run that finds the lock taken
    returns immediately. The sweep itself is a single idempotent UPDATE.

    Returns:
        Dict with:
        - expired_count: Number of grants expired by this run
        - skipped: Present (True) when another worker held the lock
    """
    lock = DistributedLock(
        SWEEP_LOCK_KEY,
        ttl=settings.EDIT_PERMISSION_SWEEP_LOCK_TTL_SECONDS,
        blocking=False,
    )
    try:
        lock.acquire()
    except LockAcquisitionError:
        logger.info("Edit permission sweep already running, skipping")
        return {"expired_count": 0, "skipped": True}

    try:
        expired_count = EditPermissionService.expire_sweep()
    finally:
        lock.release()

    logger.info(
        f"Edit permission sweep complete: expired {expired_count} grants",
        extra={"expired_count": expired_count},
    )
    return {"expired_count": expired_count}
