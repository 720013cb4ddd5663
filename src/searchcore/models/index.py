"""Index, settings and stats models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .base import RequestModel, ResponseModel, parse_timestamp


class IndexInfo(ResponseModel):
    uid: str
    primary_key: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def normalize_timestamps(cls, value):
        return parse_timestamp(value)


class IndexesQuery(RequestModel):
    limit: Optional[int] = None
    offset: Optional[int] = None

    def to_params(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class IndexesResults(ResponseModel):
    results: List[IndexInfo] = Field(default_factory=list)
    offset: int = 0
    limit: int = 20
    total: int = 0


class Settings(RequestModel):
    """
    Index settings. Used both for ``PATCH /indexes/{uid}/settings`` bodies and
    for parsing ``GET`` responses, so unknown keys are tolerated.
    """

    model_config = RequestModel.model_config | {"extra": "allow"}

    ranking_rules: Optional[List[str]] = None
    distinct_attribute: Optional[str] = None
    searchable_attributes: Optional[List[str]] = None
    displayed_attributes: Optional[List[str]] = None
    stop_words: Optional[List[str]] = None
    synonyms: Optional[Dict[str, List[str]]] = None
    filterable_attributes: Optional[List[str]] = None
    sortable_attributes: Optional[List[str]] = None


class IndexStats(ResponseModel):
    number_of_documents: int = 0
    is_indexing: bool = False
    field_distribution: Dict[str, int] = Field(default_factory=dict)


class Stats(ResponseModel):
    database_size: int = 0
    last_update: Optional[datetime] = None
    indexes: Dict[str, IndexStats] = Field(default_factory=dict)

    @field_validator("last_update", mode="before")
    @classmethod
    def normalize_timestamps(cls, value):
        return parse_timestamp(value)


class DocumentsResults(ResponseModel):
    results: List[Dict[str, Any]] = Field(default_factory=list)
    offset: int = 0
    limit: int = 20
    total: int = 0
