"""
Celery application for background jobs (session cleanup).
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'paddock.settings')

app = Celery('paddock')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
