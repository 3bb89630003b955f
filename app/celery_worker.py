# app/celery_worker.py
from celery import Celery
from celery.signals import setup_logging

from app.utils.logging import configure_logging
from app.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "orders",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAŻNE: Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "app.tasks.integrations",
)

celery_app.conf.timezone = "UTC"


@setup_logging.connect
def configure_worker_logging(**kwargs):
    # podpiety handler wylacza domyslna konfiguracje logow Celery
    configure_logging()
