"""Celery configuration"""
from celery import Celery
from celery.schedules import crontab

from app.config.settings import get_settings

settings = get_settings()


def create_celery_app() -> Celery:
    """Create and configure the Celery application"""
    app = Celery(
        "booking_worker",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["app.tasks.calendar_tasks"],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone=settings.BUSINESS_TIMEZONE,
        enable_utc=True,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        task_routes={
            "app.tasks.calendar_tasks.*": {"queue": "calendar"},
        },
        beat_schedule={
            # Reconcile the external calendar every night
            "sync-calendar-window": {
                "task": "app.tasks.calendar_tasks.sync_calendar_window",
                "schedule": crontab(hour=3, minute=0),
            },
        },
    )

    return app


celery_app = create_celery_app()
