"""
Celery configuration for the order fulfillment engine.

DJANGO_SETTINGS_MODULE is set before the app is instantiated so Celery
reads the Django settings (``CELERY_`` prefix).
"""

import os
from logging.config import dictConfig

from celery import Celery
from celery.signals import setup_logging

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("fulfillment")

# Read configuration from Django settings with the CELERY_ prefix
app.config_from_object("django.conf:settings", namespace="CELERY")

# Discover tasks.py in every installed app
app.autodiscover_tasks()


@setup_logging.connect
def configure_logging(**kwargs):
    """Route worker logs through the structlog JSON formatter."""
    from django.conf import settings

    dictConfig(settings.LOGGING)
