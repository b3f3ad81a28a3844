"""
Celery application for background and scheduled account tasks.

See `the celery docs
<https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html>`_.
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('config')

# All CELERY_* names in the Django settings configure the worker and beat
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
