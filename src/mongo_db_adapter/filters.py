"""
Store-agnostic filter description.

``FilterSpec`` is what a service hands to the adapter to describe *which*
documents it wants (``query`` / ``search``), in *what order* (``sort``) and
*which page* of them (``limit`` / ``offset``). Turning it into a MongoDB
query is the job of :class:`~mongo_db_adapter.query_builder.MongoQueryBuilder`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

SortSpec = str | Sequence[str]


@dataclass(frozen=True)
class FilterSpec:
    """
    Immutable filter parameters for a single find or count call.

    Attributes:
        query: Raw MongoDB predicate, passed to the store as is.
        search: Free-text search term. When non-empty, results are ordered by
            text relevance and ``sort`` is ignored.
        search_fields: Fields the caller intends to search. Informational
            only; MongoDB searches every field of the collection's text index.
        sort: ``"name,-age"`` / ``"name -age"`` or ``["name", "-age"]``.
            Prefix with ``-`` for descending.
        limit: Maximum number of results; ``0`` or less means no limit.
        offset: Number of results to skip.
    """

    query: Mapping[str, Any] | None = None
    search: str | None = None
    search_fields: Sequence[str] | None = None
    sort: SortSpec | None = None
    limit: int | None = None
    offset: int | None = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> FilterSpec:
        """Build a spec from a service params mapping, ignoring unrelated keys."""
        search_fields = params.get("search_fields", params.get("searchFields"))
        if isinstance(search_fields, str):
            search_fields = [f for f in search_fields.replace(",", " ").split() if f]
        return cls(
            query=params.get("query"),
            search=params.get("search"),
            search_fields=search_fields,
            sort=params.get("sort"),
            limit=params.get("limit"),
            offset=params.get("offset"),
        )
