"""
Gateway Router - configuration form of the mpay24 gateway.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from mpay24_gateway.api.schemas import (
    GatewayAccountResponse,
    GatewayConfiguration,
    GatewayFormResponse,
    GatewayValidationResponse,
)
from mpay24_gateway.core.auth import UserInfo, get_current_admin
from mpay24_gateway.core.services.config_service import get_account_gateway_config
from mpay24_gateway.core.services.gateway_service import (
    get_configuration_fields,
    get_supported_currencies,
    save_gateway_configuration,
    validate_gateway_form,
)
from mpay24_gateway.database.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/gateway/form", response_model=GatewayFormResponse)
def gateway_form():
    """Fields of the configuration form and the currencies mpay24 accepts."""
    return {
        "gateway": "mpay24",
        "fields": get_configuration_fields(),
        "supported_currencies": get_supported_currencies(),
    }


@router.post("/gateway/validate", response_model=GatewayValidationResponse)
def validate_gateway(payload: GatewayConfiguration):
    errors = validate_gateway_form(payload.model_dump())
    return {"valid": not errors, "errors": errors}


@router.get("/accounts/{account_id}/gateway", response_model=GatewayAccountResponse)
def get_account_gateway(
    account_id: int = Path(..., ge=1),
    admin: UserInfo = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    config = get_account_gateway_config(db, account_id)
    if not config:
        raise HTTPException(status_code=404, detail="Gateway not configured for this account")
    return {
        "account_id": account_id,
        "brandname": config.get("brandname", ""),
        "clientid": config.get("clientid", ""),
        "environment": config.get("environment", "live"),
        "enabled": bool(config.get("enabled")),
    }


@router.put("/accounts/{account_id}/gateway", response_model=GatewayAccountResponse)
def put_account_gateway(
    payload: GatewayConfiguration,
    account_id: int = Path(..., ge=1),
    admin: UserInfo = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Store the configuration; an invalid form is rejected with 422."""
    data = payload.model_dump()
    errors = save_gateway_configuration(db, account_id, data, updated_by=f"user:{admin.user_id}")
    if errors:
        raise HTTPException(status_code=422, detail={"errors": errors})
    return {
        "account_id": account_id,
        "brandname": data["brandname"],
        "clientid": data["clientid"],
        "environment": data["environment"],
        "enabled": data["enabled"],
    }
