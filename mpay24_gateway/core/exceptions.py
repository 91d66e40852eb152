from fastapi import Request
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger("mpay24_gateway")


class PaymentGatewayError(Exception):
    """Base class for gateway errors that reach the API layer."""

    status_code = 500
    error = "Payment Gateway Error"


class GatewayConfigurationError(PaymentGatewayError):
    """Gateway account missing, disabled or incomplete."""

    status_code = 400
    error = "Gateway Configuration Error"


class PayableNotFoundError(PaymentGatewayError):
    """No component service provider knows the requested item."""

    status_code = 404
    error = "Payable Not Found"


class ProcessorError(PaymentGatewayError):
    """mpay24 rejected a request or could not be reached."""

    status_code = 502
    error = "Payment Processor Error"

    def __init__(self, message: str, return_code: str = ""):
        super().__init__(message)
        self.return_code = return_code


async def payment_gateway_error_handler(request: Request, exc: PaymentGatewayError):
    if exc.status_code >= 500:
        logger.error(f"{exc.error} on {request.url.path}: {exc}")
    else:
        logger.warning(f"{exc.error} on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error,
            "message": str(exc),
        },
    )


async def not_found_handler(request: Request, exc):
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "message": f"Endpoint '{request.url.path}' not found",
            "path": request.url.path,
        },
    )


async def internal_error_handler(request: Request, exc):
    logger.exception(f"Internal error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": "Internal server error. Check the logs.",
        },
    )
