"""
Middleware components for request processing.

This package contains:
- Request context (request ID bound into the logging context)
- Conditional caching (ETag / If-None-Match for listing endpoints)
"""

from app.middleware.conditional_cache import ConditionalCache, conditional_cache
from app.middleware.request_context import RequestContextMiddleware

__all__ = [
    "RequestContextMiddleware",
    "ConditionalCache",
    "conditional_cache",
]
