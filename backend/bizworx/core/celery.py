from celery import Celery
from celery.schedules import crontab
from bizworx.core.settings import get_settings

settings = get_settings()

celery_app = Celery(
    "bizworx",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["bizworx.tasks.job_tasks"]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    result_expires=3600,
)

# Daily at 00:05 UTC: move yesterday's unfinished jobs forward
celery_app.conf.beat_schedule = {
    "reschedule-incomplete-jobs": {
        "task": "bizworx.tasks.job_tasks.reschedule_incomplete_jobs",
        "schedule": crontab(hour=0, minute=5),
    },
}
