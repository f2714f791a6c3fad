import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "quiz_platform.settings")

app = Celery("quiz_platform")

# All celery-related settings carry the CELERY_ prefix in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
