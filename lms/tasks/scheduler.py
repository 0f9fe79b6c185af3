# tasks/scheduler.py
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from fastapi.concurrency import run_in_threadpool
from pymongo.database import Database

from lms.services import payment_service

logger = logging.getLogger(__name__)

def create_scheduler() -> AsyncIOScheduler:
    return AsyncIOScheduler()

def schedule_jobs(scheduler: AsyncIOScheduler, db: Database, interval_minutes: int) -> None:
    scheduler.add_job(
        reconcile_enrollments,
        trigger=IntervalTrigger(minutes=interval_minutes),
        args=[db],
        id="reconcile_enrollments",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

async def reconcile_enrollments(db: Database):
    handled = await run_in_threadpool(payment_service.reconcile_enrollments, db)
    if handled:
        logger.info(f"Enrollment reconciliation handled {len(handled)} orders")
