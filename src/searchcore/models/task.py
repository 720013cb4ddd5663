"""
Task models.

A task is a server-tracked unit of asynchronous work. Mutating calls return a
``TaskInfo`` immediately; the full ``Task`` is observed by polling
``GET /tasks/{uid}``.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .base import RequestModel, ResponseModel, parse_timestamp


class TaskStatus(str, enum.Enum):
    ENQUEUED = "enqueued"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {TaskStatus.SUCCEEDED, TaskStatus.FAILED, TaskStatus.CANCELED}
)


class TaskType(str, enum.Enum):
    """Known task types. ``Task.type`` stays a plain string so new server
    types still parse."""

    INDEX_CREATION = "indexCreation"
    INDEX_UPDATE = "indexUpdate"
    INDEX_DELETION = "indexDeletion"
    DOCUMENT_ADDITION_OR_UPDATE = "documentAdditionOrUpdate"
    DOCUMENT_DELETION = "documentDeletion"
    SETTINGS_UPDATE = "settingsUpdate"
    DUMP_CREATION = "dumpCreation"


class TaskError(ResponseModel):
    message: str = ""
    code: Optional[str] = None
    type: Optional[str] = None
    link: Optional[str] = None


class TaskDetails(ResponseModel):
    """Operation-specific counters; populated once processing begins."""

    received_documents: Optional[int] = None
    indexed_documents: Optional[int] = None
    deleted_documents: Optional[int] = None
    provided_ids: Optional[int] = None
    primary_key: Optional[str] = None
    dump_uid: Optional[str] = None


class Task(ResponseModel):
    uid: int
    index_uid: Optional[str] = None
    status: TaskStatus
    type: str
    details: Optional[TaskDetails] = None
    error: Optional[TaskError] = None
    duration: Optional[str] = None
    enqueued_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @field_validator("enqueued_at", "started_at", "finished_at", mode="before")
    @classmethod
    def normalize_timestamps(cls, value):
        return parse_timestamp(value)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class TaskInfo(ResponseModel):
    """Descriptor returned by every mutating call."""

    task_uid: int
    index_uid: Optional[str] = None
    status: TaskStatus = TaskStatus.ENQUEUED
    type: str = ""
    enqueued_at: Optional[datetime] = None

    @field_validator("enqueued_at", mode="before")
    @classmethod
    def normalize_timestamps(cls, value):
        return parse_timestamp(value)


class TasksQuery(RequestModel):
    limit: Optional[int] = None
    from_: Optional[int] = Field(default=None, alias="from")
    index_uids: List[str] = Field(default_factory=list)
    statuses: List[TaskStatus] = Field(default_factory=list)
    types: List[str] = Field(default_factory=list)

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self.limit is not None:
            params["limit"] = self.limit
        if self.from_ is not None:
            params["from"] = self.from_
        if self.index_uids:
            params["indexUids"] = ",".join(self.index_uids)
        if self.statuses:
            params["statuses"] = ",".join(s.value for s in self.statuses)
        if self.types:
            params["types"] = ",".join(self.types)
        return params


class TasksResults(ResponseModel):
    results: List[Task] = Field(default_factory=list)
    limit: int = 20
    from_: Optional[int] = Field(default=None, alias="from")
    next: Optional[int] = None
