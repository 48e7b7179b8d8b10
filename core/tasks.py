"""
Celery tasks for session housekeeping.
"""

import logging

from celery import shared_task
from django.utils import timezone

from .models import Session

logger = logging.getLogger(__name__)


@shared_task
def purge_expired_sessions():
    """
    Delete sessions past their expiry.
    Run daily via Celery Beat. Expired sessions are already refused at
    lookup time, so this only keeps the table small.
    """
    deleted, _ = Session.objects.filter(expires_at__lte=timezone.now()).delete()
    if deleted:
        logger.info("Purged %s expired session(s)", deleted)
    return f"Purged {deleted} expired sessions"
