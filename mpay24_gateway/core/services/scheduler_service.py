"""
Scheduler Service - APScheduler integration for deferred (adhoc) tasks.

An adhoc task runs once at or after its next run time. Queueing a task that is
already queued (same name, user and payload) moves it to the new run time
instead of adding a duplicate.
"""
import hashlib
import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from sqlalchemy.orm import Session

from mpay24_gateway.core.services.config_service import SHOPPING_CART_PLUGIN, get_config

logger = logging.getLogger(__name__)

CHECK_STATUS_TASK = "check_status"
CHECK_STATUS_FUNC = "mpay24_gateway.core.tasks.check_status:run"
FALLBACK_DELAY_MINUTES = 30

_scheduler: Optional[BackgroundScheduler] = None


@dataclass
class AdhocTask:
    """One deferred unit of background work."""
    name: str
    func: str
    user_id: int
    next_run_time: datetime
    custom_data: Dict[str, Any] = field(default_factory=dict)

    @property
    def identity(self) -> str:
        """Stable id from name, user and payload."""
        data = json.dumps(self.custom_data, sort_keys=True, default=str)
        digest = hashlib.sha1(data.encode("utf-8")).hexdigest()[:16]
        return f"{self.name}:{self.user_id}:{digest}"


class TaskManager(ABC):
    """Queue for adhoc tasks."""

    @abstractmethod
    def reschedule_or_queue(self, task: AdhocTask) -> None:
        """Queue the task, or move an identical queued task to the new run time."""
        pass


class APSchedulerTaskManager(TaskManager):
    """TaskManager backed by the process-wide BackgroundScheduler."""

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self.scheduler = scheduler or get_scheduler()

    def reschedule_or_queue(self, task: AdhocTask) -> None:
        job_id = task.identity

        # Remove existing
        existing = self.scheduler.get_job(job_id)
        if existing:
            self.scheduler.remove_job(job_id)
            logger.info(f"Rescheduling adhoc task {job_id} to {task.next_run_time.isoformat()}")
        else:
            logger.info(f"Queueing adhoc task {job_id} for {task.next_run_time.isoformat()}")

        self.scheduler.add_job(
            func=task.func,
            trigger=DateTrigger(run_date=task.next_run_time),
            id=job_id,
            name=task.name,
            kwargs={"custom_data": task.custom_data},
            replace_existing=True,
        )


def get_scheduler() -> BackgroundScheduler:
    """Get or create the singleton scheduler."""
    global _scheduler

    if _scheduler is None:
        jobstore_url = os.getenv("SCHEDULER_JOBSTORE_URL")
        if jobstore_url:
            from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
            jobstore = SQLAlchemyJobStore(url=jobstore_url)
        else:
            jobstore = MemoryJobStore()
        _scheduler = BackgroundScheduler(
            jobstores={"default": jobstore},
            executors={"default": ThreadPoolExecutor(3)},
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": None},
            timezone=timezone.utc,
        )
        logger.info("APScheduler initialized")

    return _scheduler


def start_scheduler():
    """Start the scheduler."""
    scheduler = get_scheduler()
    if not scheduler.running:
        scheduler.start()
        logger.info("APScheduler started")


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    scheduler = get_scheduler()
    if scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("APScheduler shutdown")


def compute_next_run_time(now: datetime, expiration_minutes: Optional[Any]) -> datetime:
    """
    Run the status check one minute before the cart item expires.

    Falls back to 30 minutes when the expiration time is unset or not above 2.
    """
    try:
        minutes = int(expiration_minutes) if expiration_minutes is not None else None
    except (TypeError, ValueError):
        minutes = None
    if minutes is not None and minutes > 2:
        return now + timedelta(minutes=minutes - 1)
    return now + timedelta(minutes=FALLBACK_DELAY_MINUTES)


def schedule_status_check(
    db: Session,
    task_manager: TaskManager,
    user_id: int,
    item_id: int,
    tid: str,
    component: str,
    payment_area: str,
    client_id: str = "",
    now: Optional[datetime] = None,
) -> AdhocTask:
    """Queue the deferred status check for a pending order and return the task."""
    now = now or datetime.now(timezone.utc)
    expiration = get_config(db, SHOPPING_CART_PLUGIN, "expirationtime")
    task = AdhocTask(
        name=CHECK_STATUS_TASK,
        func=CHECK_STATUS_FUNC,
        user_id=user_id,
        next_run_time=compute_next_run_time(now, expiration),
        custom_data={
            "token": "",
            "itemid": item_id,
            "customer": client_id,
            "component": component,
            "paymentarea": payment_area,
            "tid": tid,
            "ischeckstatus": True,
            "resourcepath": "",
            "userid": user_id,
        },
    )
    task_manager.reschedule_or_queue(task)
    return task
