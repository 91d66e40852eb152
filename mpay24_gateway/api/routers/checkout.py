"""
Checkout Router - configuration for the client-side mpay24 payment widget.
"""

import logging
import os

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from mpay24_gateway.api.dependencies import get_bus, get_provider_factory, get_task_manager
from mpay24_gateway.api.schemas import ClientConfigResponse
from mpay24_gateway.core.auth import UserInfo, get_current_user
from mpay24_gateway.core.events import EventBus
from mpay24_gateway.core.services.checkout_service import RequestContext, get_config_for_js
from mpay24_gateway.core.services.scheduler_service import TaskManager
from mpay24_gateway.database.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

COMPONENT_PATTERN = r"^[a-z][a-z0-9]*(_[a-z][a-z0-9_]*)?[a-z0-9]$"
AREA_PATTERN = r"^[a-z]([a-z0-9_]*[a-z0-9])?$"


def _root_url(request: Request) -> str:
    return os.getenv("ROOT_URL") or str(request.base_url).rstrip("/")


@router.get("/config-for-js", response_model=ClientConfigResponse)
def config_for_js(
    request: Request,
    component: str = Query(..., max_length=100, pattern=COMPONENT_PATTERN, description="Component"),
    paymentarea: str = Query(..., max_length=100, pattern=AREA_PATTERN, description="Payment area in the component"),
    itemid: int = Query(..., ge=1, description="An identifier for payment area in the component"),
    user: UserInfo = Depends(get_current_user),
    db: Session = Depends(get_db),
    task_manager: TaskManager = Depends(get_task_manager),
    provider_factory=Depends(get_provider_factory),
    bus: EventBus = Depends(get_bus),
):
    """Create or reuse the pending order and return what the mpay24 widget needs."""
    context = RequestContext(
        user_id=user.user_id,
        language=user.language,
        root_url=_root_url(request),
    )
    return get_config_for_js(
        db,
        context,
        component,
        paymentarea,
        itemid,
        task_manager=task_manager,
        provider_factory=provider_factory,
        bus=bus,
    )
