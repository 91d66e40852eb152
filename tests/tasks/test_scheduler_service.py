"""
Adhoc task scheduling for status checks.
"""

from datetime import datetime, timedelta, timezone

import pytest
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from mpay24_gateway.core.services.config_service import SHOPPING_CART_PLUGIN, set_config
from mpay24_gateway.core.services.scheduler_service import (
    CHECK_STATUS_FUNC,
    AdhocTask,
    APSchedulerTaskManager,
    compute_next_run_time,
    schedule_status_check,
)

NOW = datetime(2022, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_task(run_at=NOW, tid="abc1654041600", user_id=7):
    return AdhocTask(
        name="check_status",
        func=CHECK_STATUS_FUNC,
        user_id=user_id,
        next_run_time=run_at,
        custom_data={"tid": tid, "itemid": 42},
    )


@pytest.fixture
def scheduler():
    # Not started: jobs are only stored, never executed
    return BackgroundScheduler(jobstores={"default": MemoryJobStore()}, timezone=timezone.utc)


class TestComputeNextRunTime:

    def test_one_minute_before_expiration(self):
        assert compute_next_run_time(NOW, 20) == NOW + timedelta(minutes=19)

    def test_numeric_string(self):
        assert compute_next_run_time(NOW, "15") == NOW + timedelta(minutes=14)

    @pytest.mark.parametrize("expiration", [None, 0, 1, 2, "abc", ""])
    def test_fallback_thirty_minutes(self, expiration):
        assert compute_next_run_time(NOW, expiration) == NOW + timedelta(minutes=30)

    def test_three_minutes_is_used(self):
        assert compute_next_run_time(NOW, 3) == NOW + timedelta(minutes=2)


class TestAdhocTaskIdentity:

    def test_same_payload_same_identity(self):
        assert make_task().identity == make_task(run_at=NOW + timedelta(hours=1)).identity

    def test_payload_and_user_change_identity(self):
        assert make_task().identity != make_task(tid="other").identity
        assert make_task().identity != make_task(user_id=8).identity


class TestAPSchedulerTaskManager:

    def test_queues_date_job(self, scheduler):
        task = make_task(run_at=NOW + timedelta(minutes=30))
        APSchedulerTaskManager(scheduler).reschedule_or_queue(task)

        jobs = scheduler.get_jobs()
        assert len(jobs) == 1
        assert jobs[0].id == task.identity
        assert jobs[0].kwargs == {"custom_data": task.custom_data}
        assert jobs[0].trigger.run_date == NOW + timedelta(minutes=30)

    def test_requeue_moves_existing_job(self, scheduler):
        manager = APSchedulerTaskManager(scheduler)
        manager.reschedule_or_queue(make_task(run_at=NOW + timedelta(minutes=30)))
        manager.reschedule_or_queue(make_task(run_at=NOW + timedelta(minutes=45)))

        jobs = scheduler.get_jobs()
        assert len(jobs) == 1
        assert jobs[0].trigger.run_date == NOW + timedelta(minutes=45)

    def test_different_orders_get_separate_jobs(self, scheduler):
        manager = APSchedulerTaskManager(scheduler)
        manager.reschedule_or_queue(make_task(tid="a1"))
        manager.reschedule_or_queue(make_task(tid="b2"))

        assert len(scheduler.get_jobs()) == 2


class TestScheduleStatusCheck:

    def test_payload(self, db_session, task_manager):
        task = schedule_status_check(
            db_session, task_manager, 7, 42, "abc1654041600", "local_shopping_cart", "main",
            client_id="93975", now=NOW,
        )

        assert task_manager.calls == [task]
        assert task.func == CHECK_STATUS_FUNC
        assert task.next_run_time == NOW + timedelta(minutes=30)
        assert task.custom_data == {
            "token": "",
            "itemid": 42,
            "customer": "93975",
            "component": "local_shopping_cart",
            "paymentarea": "main",
            "tid": "abc1654041600",
            "ischeckstatus": True,
            "resourcepath": "",
            "userid": 7,
        }

    def test_reads_cart_expiration(self, db_session, task_manager):
        set_config(db_session, SHOPPING_CART_PLUGIN, "expirationtime", 10)

        task = schedule_status_check(
            db_session, task_manager, 7, 42, "abc1654041600", "local_shopping_cart", "main", now=NOW,
        )

        assert task.next_run_time == NOW + timedelta(minutes=9)
