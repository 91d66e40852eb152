from mpay24_gateway.api.schemas.gateway import (
    ClientConfigResponse,
    GatewayAccountResponse,
    GatewayConfiguration,
    GatewayFormField,
    GatewayFormResponse,
    GatewayValidationResponse,
)
