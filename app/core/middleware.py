# app/core/middleware.py
"""Custom middleware for request handling"""
import uuid
import time
import logging
from starlette.requests import Request

logger = logging.getLogger(__name__)

# Polled constantly by load balancers, not worth a log line
QUIET_PATHS = ("/health",)


async def correlation_id_middleware(request: Request, call_next):
    """Add correlation ID to all requests for tracing"""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """Log method, path, status and duration of every API request"""
    if request.url.path.startswith(QUIET_PATHS):
        return await call_next(request)

    start_time = time.time()
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    response = await call_next(request)

    duration_ms = round((time.time() - start_time) * 1000, 2)
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)",
        extra={
            "correlation_id": correlation_id,
            "client": request.client.host if request.client else "unknown",
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
    )

    return response
