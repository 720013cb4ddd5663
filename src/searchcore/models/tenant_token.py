"""
Search rules embedded in tenant tokens.

A rule is one of three shapes:

* ``NoRestriction``       -> ``{}``; the index is searchable as the key allows
* ``FilterRestriction``   -> ``{"filter": <expr>}``; a filter is forced on every search
* ``ExtendedRestriction`` -> any other key/value object the server understands

Plain dicts (and ``None``) are coerced with ``coerce_search_rule`` so callers
can pass ``{"*": {}}`` or ``{"books": {"filter": "year > 2000"}}`` directly.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field


class NoRestriction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"

    def to_payload(self) -> Dict[str, Any]:
        return {}


class FilterRestriction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["filter"] = "filter"
    filter: Union[str, List[Any]]

    def to_payload(self) -> Dict[str, Any]:
        return {"filter": self.filter}


class ExtendedRestriction(BaseModel):
    """Server-defined restriction keys, passed through verbatim."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["extended"] = "extended"
    values: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return dict(self.values)


SearchRule = Union[NoRestriction, FilterRestriction, ExtendedRestriction]


def coerce_search_rule(value: Any) -> SearchRule:
    if isinstance(value, (NoRestriction, FilterRestriction, ExtendedRestriction)):
        return value
    if value is None:
        return NoRestriction()
    if not isinstance(value, Mapping):
        raise TypeError(
            f"Search rule must be a mapping or a SearchRule, got {type(value).__name__}"
        )
    if not value:
        return NoRestriction()
    if set(value) == {"filter"}:
        return FilterRestriction(filter=value["filter"])
    return ExtendedRestriction(values=dict(value))


def search_rules_payload(rules: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Coerce every rule and render the JSON object that goes into the token."""
    if not isinstance(rules, Mapping):
        raise TypeError(f"Search rules must be a mapping, got {type(rules).__name__}")
    return {pattern: coerce_search_rule(rule).to_payload() for pattern, rule in rules.items()}
