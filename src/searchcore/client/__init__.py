#!/usr/bin/env python3
"""
searchcore clients

HTTP transport with circuit breaker and retry, the search service client,
index handles, the task poller and the tenant token generator.
"""

from .base_client import BaseServiceClient, CircuitBreaker, CircuitState, retry_with_backoff
from .index import Index
from .search_client import SearchClient
from .task_poller import TaskPoller
from .tenant_token import TenantTokenGenerator, decode_tenant_token, generate_tenant_token

__all__ = [
    "BaseServiceClient",
    "CircuitBreaker",
    "CircuitState",
    "retry_with_backoff",
    "Index",
    "SearchClient",
    "TaskPoller",
    "TenantTokenGenerator",
    "decode_tenant_token",
    "generate_tenant_token",
]
