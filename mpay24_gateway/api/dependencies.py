"""Injectable collaborators, overridden in tests through app.dependency_overrides."""

from mpay24_gateway.core.events import EventBus, get_event_bus
from mpay24_gateway.core.services.scheduler_service import APSchedulerTaskManager, TaskManager
from mpay24_gateway.payments import get_payment_provider


def get_task_manager() -> TaskManager:
    return APSchedulerTaskManager()


def get_provider_factory():
    return get_payment_provider


def get_bus() -> EventBus:
    return get_event_bus()
