"""
Display-only classification of how long ago a treatment was done.

The dashboard colours grid cells with the same thresholds (see
static/paddock/dashboard.js); nothing here is stored.
"""

from django.utils import timezone

BLANK = 'blank'
OVERDUE = 'overdue'
DUE_SOON = 'due_soon'
RECENT = 'recent'
NEUTRAL = 'neutral'

OVERDUE_AFTER_DAYS = 365
DUE_SOON_AFTER_DAYS = 270
RECENT_WITHIN_DAYS = 90


def days_since(treatment_date, today=None):
    """Whole days between ``treatment_date`` and ``today``; None when there is no date."""
    if treatment_date is None:
        return None
    if today is None:
        today = timezone.localdate()
    return (today - treatment_date).days


def classify(treatment_date, today=None):
    age = days_since(treatment_date, today)
    if age is None:
        return BLANK
    if age > OVERDUE_AFTER_DAYS:
        return OVERDUE
    if age > DUE_SOON_AFTER_DAYS:
        return DUE_SOON
    if age <= RECENT_WITHIN_DAYS:
        return RECENT
    return NEUTRAL
