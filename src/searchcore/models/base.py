"""
Shared pydantic base classes for wire models.

The search service speaks camelCase JSON; models use snake_case attributes
with camelCase aliases.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# The service emits RFC 3339 timestamps with nanosecond precision; datetime
# only holds microseconds.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(value: Any) -> Any:
    """Trim sub-microsecond digits so pydantic can parse the timestamp."""
    if isinstance(value, str):
        return _FRACTION_RE.sub(r"\1", value)
    return value


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime the way the service expects in request bodies."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ResponseModel(BaseModel):
    """Model parsed from a service response. Unknown fields are kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class RequestModel(BaseModel):
    """Model serialized into a request body or query string."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
