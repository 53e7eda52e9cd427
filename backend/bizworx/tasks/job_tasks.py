import logging

from bizworx.core.celery import celery_app
from bizworx.db import get_db
from bizworx.services.job_service import JobService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def reschedule_incomplete_jobs(self) -> dict:
    """
    Move jobs left in ``scheduled`` from yesterday into the next free slot.

    Returns:
        Dictionary with the number of jobs moved
    """
    db = None
    try:
        logger.info("Starting automatic job rescheduling")
        db = next(get_db())
        moved = JobService.reschedule_incomplete_jobs(db)
        logger.info(f"Automatic rescheduling moved {moved} jobs")
        return {"success": True, "rescheduled": moved}

    except Exception as exc:
        logger.error(f"Automatic job rescheduling failed: {exc}")
        if db:
            db.rollback()
        raise self.retry(exc=exc, countdown=300, max_retries=3)

    finally:
        if db:
            db.close()
