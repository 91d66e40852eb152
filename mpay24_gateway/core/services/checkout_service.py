"""
Checkout Service - everything the client-side mpay24 widget needs to start.

Flow for one (component, payment area, item):
1. gateway configuration, payable and surcharge from the payment helper
2. create or reuse the pending order (committed, so it outlives a failed
   tokenizer call and can be resumed by the next checkout)
3. obtain a credit-card tokenizer from mpay24
4. queue the deferred status check
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from mpay24_gateway.core.events import EventBus
from mpay24_gateway.core.services.order_service import format_amount, reconcile_order
from mpay24_gateway.core.services.scheduler_service import TaskManager, schedule_status_check
from mpay24_gateway.payments import PaymentProvider, get_payment_provider
from mpay24_gateway.payments.helper import PaymentHelper

logger = logging.getLogger(__name__)

CREDIT_CARD = "CC"

ProviderFactory = Callable[[str, str, Optional[str]], PaymentProvider]


@dataclass
class RequestContext:
    """Who is checking out, and where the client lives."""
    user_id: int
    language: str = "en"
    root_url: str = ""


def issue_client_token(
    client_id: str,
    secret: str,
    environment: Optional[str],
    provider_factory: ProviderFactory = get_payment_provider,
) -> Tuple[str, str]:
    """
    Obtain a credit-card tokenizer for the client.

    Returns:
        (tokenizer location, URL-encoded token)

    Raises:
        ProcessorError: mpay24 failed; not retried
    """
    provider = provider_factory(client_id, secret, environment)
    token = provider.create_client_token(CREDIT_CARD)
    return token.location, token.token


def get_config_for_js(
    db: Session,
    context: RequestContext,
    component: str,
    payment_area: str,
    item_id: int,
    task_manager: TaskManager,
    provider_factory: ProviderFactory = get_payment_provider,
    helper: Optional[PaymentHelper] = None,
    bus: Optional[EventBus] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Prepare a checkout and return the client configuration."""
    helper = helper or PaymentHelper(db)

    payable = helper.get_payable(component, payment_area, item_id)
    config = helper.get_account_gateway_configuration(payable.get_account_id())
    surcharge = helper.get_gateway_surcharge()

    amount = format_amount(payable.get_amount())
    tid, is_new = reconcile_order(db, item_id, context.user_id, amount, bus=bus)

    location, token = issue_client_token(
        config["clientid"],
        config["secret"],
        config["environment"],
        provider_factory=provider_factory,
    )

    schedule_status_check(
        db,
        task_manager,
        user_id=context.user_id,
        item_id=item_id,
        tid=tid,
        component=component,
        payment_area=payment_area,
        client_id=config["clientid"],
        now=now,
    )

    logger.info(
        f"Checkout {component}/{payment_area}/{item_id} for user {context.user_id}: "
        f"tid={tid} ({'new' if is_new else 'reused'})"
    )

    return {
        "clientid": config["clientid"],
        "brandname": config["brandname"],
        "cost": helper.get_rounded_cost(payable.get_amount(), payable.get_currency(), surcharge),
        "currency": payable.get_currency(),
        "rooturl": context.root_url,
        "environment": config["environment"],
        "language": context.language,
        "token": token,
        "tokenizerlocation": location,
        "tid": tid,
    }
