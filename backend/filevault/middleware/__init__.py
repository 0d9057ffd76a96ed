"""Middleware modules for production-ready features"""
from filevault.middleware.monitoring import (
    MonitoringMiddleware,
    record_auth_failure,
    record_file_operation,
    record_token_issued,
)
from filevault.middleware.rate_limit import AUTH_RATE_LIMIT, limiter

__all__ = [
    "MonitoringMiddleware",
    "record_auth_failure",
    "record_file_operation",
    "record_token_issued",
    "AUTH_RATE_LIMIT",
    "limiter",
]
