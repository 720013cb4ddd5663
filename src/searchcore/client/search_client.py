#!/usr/bin/env python3
"""
Search Service Client for searchcore

Entry point of the library. A ``SearchClient`` owns one HTTP transport and
exposes:
- instance operations (health, version, stats, dumps)
- index management and ``Index`` handles for documents, search and settings
- API key management
- task inspection and ``wait_for_task`` (via ``TaskPoller``)
- local tenant token generation (via ``TenantTokenGenerator``)

Usage::

    async with SearchClient(ClientConfig(host="http://localhost:7700", api_key="masterKey")) as client:
        info = await client.index("books").add_documents([{"id": 1, "title": "Dune"}])
        task = await client.wait_for_task(info)
        if task.status is not TaskStatus.SUCCEEDED:
            ...
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import httpx  # pyright: ignore[reportMissingImports]

from searchcore.config import ClientConfig
from searchcore.errors import SearchClientError
from searchcore.models import (
    Health,
    IndexesQuery,
    IndexesResults,
    Key,
    KeyCreate,
    KeysQuery,
    KeysResults,
    KeyUpdate,
    Stats,
    Task,
    TaskInfo,
    TasksQuery,
    TasksResults,
    Version,
)

from .base_client import BaseServiceClient, CircuitBreaker
from .index import Index
from .task_poller import TaskPoller, TaskRef
from .tenant_token import ExpiresAt, TenantTokenGenerator

logger = logging.getLogger(__name__)


class SearchClient:
    """
    Client for a Meilisearch-compatible search service.

    Args:
        config: connection settings; defaults to ``ClientConfig.from_env()``
        circuit_breaker: optional breaker shared with other clients
        transport: optional ``httpx`` transport (tests use ``httpx.MockTransport``)
    """

    def __init__(self,
                 config: Optional[ClientConfig] = None,
                 *,
                 circuit_breaker: Optional[CircuitBreaker] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or ClientConfig.from_env()
        self.transport = BaseServiceClient(
            self.config,
            service_name="search",
            circuit_breaker=circuit_breaker,
            transport=transport,
        )
        self.tasks = TaskPoller(
            self.transport,
            interval=self.config.task_interval,
            timeout=self.config.task_timeout,
        )
        self.tokens = TenantTokenGenerator(self.config)

    async def close(self):
        await self.transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # ------------------------------------------------------------------
    # Instance
    # ------------------------------------------------------------------

    async def version(self) -> Version:
        return Version.model_validate(await self.transport.get("/version"))

    async def health(self) -> Health:
        return Health.model_validate(await self.transport.get("/health", retry=False))

    async def is_healthy(self) -> bool:
        """
        Check if the search service is available.

        Returns:
            True if service is healthy, False otherwise
        """
        try:
            health = await self.health()
        except SearchClientError as e:
            logger.warning("Health check failed for %s: %s", self.config.host, e)
            return False
        return health.is_available

    async def get_stats(self) -> Stats:
        return Stats.model_validate(await self.transport.get("/stats"))

    async def create_dump(self) -> TaskInfo:
        return TaskInfo.model_validate(await self.transport.post("/dumps"))

    # ------------------------------------------------------------------
    # Indexes
    # ------------------------------------------------------------------

    def index(self, uid: str) -> Index:
        """Local handle; no request is made."""
        return Index(self, uid)

    async def create_index(self, uid: str, primary_key: Optional[str] = None) -> TaskInfo:
        body: Dict[str, Any] = {"uid": uid}
        if primary_key:
            body["primaryKey"] = primary_key
        return TaskInfo.model_validate(await self.transport.post("/indexes", json=body))

    async def get_index(self, uid: str) -> Index:
        index = Index(self, uid)
        await index.fetch_info()
        return index

    async def get_indexes(self, query: Optional[IndexesQuery] = None) -> IndexesResults:
        params = query.to_params() if query else None
        return IndexesResults.model_validate(await self.transport.get("/indexes", params=params))

    async def delete_index(self, uid: str) -> TaskInfo:
        return await Index(self, uid).delete()

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    async def get_keys(self, query: Optional[KeysQuery] = None) -> KeysResults:
        params = query.to_params() if query else None
        return KeysResults.model_validate(await self.transport.get("/keys", params=params))

    async def get_key(self, key_or_uid: str) -> Key:
        return Key.model_validate(await self.transport.get(f"/keys/{quote(key_or_uid, safe='')}"))

    async def create_key(self, key: KeyCreate) -> Key:
        return Key.model_validate(await self.transport.post("/keys", json=key.to_body()))

    async def update_key(self, key_or_uid: str, update: KeyUpdate) -> Key:
        body = await self.transport.patch(f"/keys/{quote(key_or_uid, safe='')}", json=update.to_body())
        return Key.model_validate(body)

    async def delete_key(self, key_or_uid: str) -> bool:
        """Returns True on success; a missing key raises ``ApiError`` (404)."""
        await self.transport.delete(f"/keys/{quote(key_or_uid, safe='')}")
        return True

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def get_task(self, uid: int) -> Task:
        return await self.tasks.fetch_task(uid)

    async def get_tasks(self, query: Optional[TasksQuery] = None) -> TasksResults:
        params = query.to_params() if query else None
        return TasksResults.model_validate(await self.transport.get("/tasks", params=params))

    async def wait_for_task(self,
                            task: TaskRef,
                            *,
                            interval: Optional[float] = None,
                            timeout: Optional[float] = None,
                            cancel_event: Optional[asyncio.Event] = None) -> Task:
        """See ``TaskPoller.wait_for_task``."""
        return await self.tasks.wait_for_task(
            task, interval=interval, timeout=timeout, cancel_event=cancel_event
        )

    # ------------------------------------------------------------------
    # Tenant tokens
    # ------------------------------------------------------------------

    def generate_tenant_token(self,
                              api_key_uid: str,
                              search_rules: Optional[Mapping[str, Any]],
                              *,
                              api_key: Optional[str] = None,
                              expires_at: Optional[ExpiresAt] = None) -> str:
        """
        Sign a tenant token locally.

        ``api_key`` defaults to the client's configured key. The result can be
        used as the API key of another client::

            token = client.generate_tenant_token(uid, {"*": {}})
            async with SearchClient(client.config.with_api_key(token)) as tenant:
                await tenant.index("books").search("dune")
        """
        return self.tokens.generate(
            api_key_uid, search_rules, api_key=api_key, expires_at=expires_at
        )

    def get_metrics(self) -> dict:
        return self.transport.get_metrics()
