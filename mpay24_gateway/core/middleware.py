import logging
import time
import uuid
from fastapi import Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def request_logger(request: Request, call_next):
    """Log each request with a request id; the id is echoed back to the caller."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id
    start = time.perf_counter()
    logger.info(f"[{request_id}] {request.method} {request.url.path}")

    response = await call_next(request)

    elapsed = time.perf_counter() - start
    logger.info(f"[{request_id}] {response.status_code} in {elapsed * 1000:.1f}ms")

    response.headers[REQUEST_ID_HEADER] = request_id
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    return response
