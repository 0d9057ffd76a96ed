"""Monitoring and observability middleware"""
import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

from filevault.utils.logger import logger


# ===== Prometheus Metrics =====

# Request metrics
http_requests_total = Counter(
    "filevault_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "filevault_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

# Error metrics
http_errors_total = Counter(
    "filevault_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "status"]
)

# Session metrics
authentication_failures_total = Counter(
    "filevault_authentication_failures_total",
    "Total authentication failures",
    ["reason"]  # InvalidCredentials, InvalidToken, TokenExpired, TokenRevoked, ...
)

tokens_issued_total = Counter(
    "filevault_tokens_issued_total",
    "Total token pairs issued",
    ["flow"]  # signup, signin
)

# File metrics
file_operations_total = Counter(
    "filevault_file_operations_total",
    "Total file operations",
    ["operation", "outcome"]  # store/update/delete/download, success/error
)


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for monitoring and metrics collection"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics"""
        start_time = time.time()

        method = request.method
        endpoint = request.url.path

        # Add request ID for tracing
        request_id = request.headers.get("x-request-id", f"req_{int(time.time() * 1000)}")
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            http_errors_total.labels(method=method, endpoint=endpoint, status=500).inc()
            logger.error(
                f"Request failed: {method} {endpoint}",
                extra={
                    "request_id": request_id,
                    "method": method,
                    "path": endpoint,
                    "duration": duration,
                    "error": str(e)
                },
                exc_info=True
            )
            raise

        status = response.status_code
        duration = time.time() - start_time
        # Use the route template so /file/123 and /file/456 share a label
        route = request.scope.get("route")
        endpoint = getattr(route, "path", endpoint)

        http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

        # Log slow requests
        if duration > 1.0:
            logger.warning(
                f"Slow request detected: {method} {endpoint}",
                extra={"request_id": request_id, "method": method, "path": endpoint, "duration": duration}
            )

        if status >= 400:
            http_errors_total.labels(method=method, endpoint=endpoint, status=status).inc()

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


def record_auth_failure(reason: str):
    """Record authentication failure"""
    authentication_failures_total.labels(reason=reason).inc()


def record_token_issued(flow: str):
    """Record a newly issued token pair"""
    tokens_issued_total.labels(flow=flow).inc()


def record_file_operation(operation: str, outcome: str):
    """Record a file operation outcome"""
    file_operations_total.labels(operation=operation, outcome=outcome).inc()
