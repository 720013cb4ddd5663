"""
Index handle.

Thin wrappers over ``/indexes/{uid}/...``. Every mutating call returns the
``TaskInfo`` the service enqueued; use ``wait_for_task`` to observe completion.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Union
from urllib.parse import quote

from searchcore.models import (
    DocumentsResults,
    IndexInfo,
    IndexStats,
    SearchRequest,
    SearchResponse,
    Settings,
    Task,
    TaskInfo,
    TasksQuery,
    TasksResults,
)

if TYPE_CHECKING:
    from .search_client import SearchClient

logger = logging.getLogger(__name__)

DocumentId = Union[str, int]


class Index:
    def __init__(self, client: "SearchClient", uid: str, primary_key: Optional[str] = None):
        self.client = client
        self.uid = uid
        self.primary_key = primary_key
        self._path = f"/indexes/{quote(uid, safe='')}"

    def __repr__(self) -> str:
        return f"Index(uid={self.uid!r}, primary_key={self.primary_key!r})"

    # ------------------------------------------------------------------
    # Index metadata
    # ------------------------------------------------------------------

    async def fetch_info(self) -> IndexInfo:
        info = IndexInfo.model_validate(await self.client.transport.get(self._path))
        self.primary_key = info.primary_key
        return info

    async def update(self, primary_key: str) -> TaskInfo:
        body = await self.client.transport.patch(self._path, json={"primaryKey": primary_key})
        return TaskInfo.model_validate(body)

    async def delete(self) -> TaskInfo:
        return TaskInfo.model_validate(await self.client.transport.delete(self._path))

    async def get_stats(self) -> IndexStats:
        return IndexStats.model_validate(await self.client.transport.get(f"{self._path}/stats"))

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _documents_params(self, primary_key: Optional[str]) -> Optional[Dict[str, Any]]:
        return {"primaryKey": primary_key} if primary_key else None

    async def add_documents(self, documents: Sequence[Dict[str, Any]],
                            primary_key: Optional[str] = None) -> TaskInfo:
        """Add or replace documents (``POST``)."""
        body = await self.client.transport.post(
            f"{self._path}/documents", json=list(documents), params=self._documents_params(primary_key)
        )
        logger.debug("Enqueued %d documents for %s", len(documents), self.uid)
        return TaskInfo.model_validate(body)

    async def update_documents(self, documents: Sequence[Dict[str, Any]],
                               primary_key: Optional[str] = None) -> TaskInfo:
        """Add or partially update documents (``PUT``)."""
        body = await self.client.transport.put(
            f"{self._path}/documents", json=list(documents), params=self._documents_params(primary_key)
        )
        return TaskInfo.model_validate(body)

    async def get_document(self, document_id: DocumentId,
                           fields: Optional[List[str]] = None) -> Dict[str, Any]:
        params = {"fields": ",".join(fields)} if fields else None
        return await self.client.transport.get(
            f"{self._path}/documents/{quote(str(document_id), safe='')}", params=params
        )

    async def get_documents(self, limit: Optional[int] = None, offset: Optional[int] = None,
                            fields: Optional[List[str]] = None) -> DocumentsResults:
        params: Dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset
        if fields:
            params["fields"] = ",".join(fields)
        body = await self.client.transport.get(f"{self._path}/documents", params=params or None)
        return DocumentsResults.model_validate(body)

    async def delete_document(self, document_id: DocumentId) -> TaskInfo:
        body = await self.client.transport.delete(
            f"{self._path}/documents/{quote(str(document_id), safe='')}"
        )
        return TaskInfo.model_validate(body)

    async def delete_documents(self, document_ids: Sequence[DocumentId]) -> TaskInfo:
        body = await self.client.transport.post(
            f"{self._path}/documents/delete-batch", json=list(document_ids)
        )
        return TaskInfo.model_validate(body)

    async def delete_all_documents(self) -> TaskInfo:
        return TaskInfo.model_validate(await self.client.transport.delete(f"{self._path}/documents"))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, query: str = "", request: Optional[SearchRequest] = None) -> SearchResponse:
        request = request or SearchRequest()
        # read-only, but sent as POST and therefore never retried
        body = await self.client.transport.post(f"{self._path}/search", json=request.to_body(query))
        return SearchResponse.model_validate(body)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def get_settings(self) -> Settings:
        return Settings.model_validate(await self.client.transport.get(f"{self._path}/settings"))

    async def update_settings(self, settings: Settings) -> TaskInfo:
        body = await self.client.transport.patch(f"{self._path}/settings", json=settings.to_body())
        return TaskInfo.model_validate(body)

    async def reset_settings(self) -> TaskInfo:
        return TaskInfo.model_validate(await self.client.transport.delete(f"{self._path}/settings"))

    async def update_filterable_attributes(self, attributes: Sequence[str]) -> TaskInfo:
        body = await self.client.transport.put(
            f"{self._path}/settings/filterable-attributes", json=list(attributes)
        )
        return TaskInfo.model_validate(body)

    async def update_sortable_attributes(self, attributes: Sequence[str]) -> TaskInfo:
        body = await self.client.transport.put(
            f"{self._path}/settings/sortable-attributes", json=list(attributes)
        )
        return TaskInfo.model_validate(body)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def get_tasks(self, query: Optional[TasksQuery] = None) -> TasksResults:
        """Tasks of this index only; any ``index_uids`` in ``query`` is replaced."""
        query = (query or TasksQuery()).model_copy(update={"index_uids": [self.uid]})
        return await self.client.get_tasks(query)

    async def wait_for_task(self, task: Union[int, TaskInfo, Task], *,
                            interval: Optional[float] = None,
                            timeout: Optional[float] = None,
                            cancel_event: Optional[asyncio.Event] = None) -> Task:
        return await self.client.wait_for_task(
            task, interval=interval, timeout=timeout, cancel_event=cancel_event
        )
