# review_portal/celery.py
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "review_portal.settings")

app = Celery("review_portal")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
