"""Search request/response models."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import Field

from .base import RequestModel, ResponseModel

MatchingStrategy = Literal["last", "all"]


class SearchRequest(RequestModel):
    """
    Parameters for ``POST /indexes/{uid}/search``.

    ``query`` is passed separately to ``Index.search``. With
    ``placeholder_search=True`` the query is left out of the body so the
    service returns every document matching the other parameters.
    """

    offset: Optional[int] = None
    limit: Optional[int] = None
    attributes_to_retrieve: Optional[List[str]] = None
    attributes_to_crop: Optional[List[str]] = None
    crop_length: Optional[int] = None
    crop_marker: Optional[str] = None
    attributes_to_highlight: Optional[List[str]] = None
    highlight_pre_tag: Optional[str] = None
    highlight_post_tag: Optional[str] = None
    show_matches_position: Optional[bool] = None
    filter: Optional[Union[str, List[Any]]] = None
    facets: Optional[List[str]] = None
    sort: Optional[List[str]] = None
    matching_strategy: Optional[MatchingStrategy] = None
    placeholder_search: bool = Field(default=False, exclude=True)

    def to_body(self, query: str = "") -> Dict[str, Any]:
        body = super().to_body()
        if not self.placeholder_search:
            body["q"] = query
        return body


class SearchResponse(ResponseModel):
    hits: List[Dict[str, Any]] = Field(default_factory=list)
    estimated_total_hits: Optional[int] = None
    offset: int = 0
    limit: int = 20
    processing_time_ms: Optional[int] = Field(default=None, alias="processingTimeMs")
    query: str = ""
    facet_distribution: Optional[Dict[str, Dict[str, int]]] = None
