"""API key models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .base import RequestModel, ResponseModel, format_timestamp, parse_timestamp


class Key(ResponseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    key: str = ""
    uid: str = ""
    actions: List[str] = Field(default_factory=list)
    indexes: List[str] = Field(default_factory=list)
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("expires_at", "created_at", "updated_at", mode="before")
    @classmethod
    def normalize_timestamps(cls, value):
        return parse_timestamp(value)


class KeyCreate(RequestModel):
    """Body of ``POST /keys``. ``expiresAt`` is always sent, as null when unset."""

    actions: List[str]
    indexes: List[str]
    name: Optional[str] = None
    description: Optional[str] = None
    uid: Optional[str] = None
    expires_at: Optional[datetime] = None

    def to_body(self) -> Dict[str, Any]:
        body = self.model_dump(by_alias=True, exclude_none=True, exclude={"expires_at"})
        body["expiresAt"] = format_timestamp(self.expires_at)
        return body


class KeyUpdate(RequestModel):
    """Body of ``PATCH /keys/{key}``; only name and description are mutable."""

    name: Optional[str] = None
    description: Optional[str] = None


class KeysQuery(RequestModel):
    limit: Optional[int] = None
    offset: Optional[int] = None

    def to_params(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class KeysResults(ResponseModel):
    results: List[Key] = Field(default_factory=list)
    offset: int = 0
    limit: int = 20
    total: int = 0
