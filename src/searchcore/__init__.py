# src/searchcore/__init__.py
"""
searchcore
==========
An asyncio client for Meilisearch-compatible document-search services.

Core features:
--------------
✓ Typed index, document, search, settings and API key operations
✓ Task Poller: cancellable, deadline-bounded waits on asynchronous tasks
✓ Tenant tokens: locally signed HS256 credentials embedding search rules
✓ httpx transport with circuit breaker and retry for idempotent reads

Import Guide:
-------------
Client:
    from searchcore import SearchClient, ClientConfig

Models:
    from searchcore.models import Task, TaskStatus, SearchRequest, KeyCreate

Errors:
    from searchcore.errors import TaskTimeoutError, ApiError, TenantTokenError
"""

from __future__ import annotations

__version__ = "0.4.0"
__author__ = "searchcore contributors"

from .config import ClientConfig, RetryConfig
from .client import SearchClient, TaskPoller, TenantTokenGenerator, generate_tenant_token

__all__ = [
    "__version__",
    "__author__",
    "ClientConfig",
    "RetryConfig",
    "SearchClient",
    "TaskPoller",
    "TenantTokenGenerator",
    "generate_tenant_token",
]
