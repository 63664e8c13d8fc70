"""Translate a :class:`FilterSpec` into a MongoDB query cursor."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from .cursor import CountCursor, QueryCursor
from .exceptions import MongoQueryError
from .filters import FilterSpec

logger = logging.getLogger("mongo_db_adapter.query")

_SORT_SEPARATOR = re.compile(r"[\s,]+")


def parse_sort(sort: Any) -> list[tuple[str, int]]:
    """Build MongoDB sort tuples.

    Accepts ``"name,-age"``, ``"name -age"`` or ``["name", "-age"]``. A ``-``
    prefix sorts descending, ``+`` or no prefix ascending. Order is priority
    order. Non-string elements of a sequence, such as pymongo-style
    ``("name", -1)`` pairs, are skipped. Values of any other type yield no
    sort.
    """
    if isinstance(sort, str):
        tokens = _SORT_SEPARATOR.split(sort)
    elif isinstance(sort, Sequence):
        tokens = [
            t
            for item in sort
            if isinstance(item, str)
            for t in _SORT_SEPARATOR.split(item)
        ]
    else:
        return []
    result: list[tuple[str, int]] = []
    for token in tokens:
        if token.startswith("-"):
            field, direction = token[1:], -1
        elif token.startswith("+"):
            field, direction = token[1:], 1
        else:
            field, direction = token, 1
        if field:
            result.append((field, direction))
    return result


def _positive_number(value: Any) -> int | None:
    # bool is an int subclass; True must not read as "skip 1"
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    # inf and nan cannot become an int skip or limit
    if not math.isfinite(value):
        return None
    if value > 0:
        return int(value)
    return None


def _as_filter_spec(spec: FilterSpec | Mapping[str, Any]) -> FilterSpec:
    if isinstance(spec, FilterSpec):
        return spec
    if isinstance(spec, Mapping):
        return FilterSpec.from_params(spec)
    raise MongoQueryError(f"Filters must be a FilterSpec or a mapping, got {spec!r}")


class MongoQueryBuilder:
    """Builds find and count cursors against one collection."""

    def __init__(self, collection: Any) -> None:
        self._collection = collection

    def build_match(self, spec: FilterSpec) -> dict[str, Any]:
        """Base predicate of ``spec`` without the text clause."""
        if spec.query is None:
            return {}
        if not isinstance(spec.query, Mapping):
            raise MongoQueryError(f"query must be a mapping, got {spec.query!r}")
        return dict(spec.query)

    def build(self, spec: FilterSpec | Mapping[str, Any] | None = None) -> QueryCursor:
        """Create a find cursor.

        Free-text search takes precedence over ``sort``: when ``spec.search``
        is a non-empty string, results are ordered by text score and any
        requested sort is dropped. Services rely on relevance ordering for
        search results, so this must not be "fixed" into a combined sort.

        ``limit`` and ``offset`` only apply when positive; ``limit=0`` means
        no limit, not an empty page.
        """
        if spec is None:
            return QueryCursor(self._collection)
        spec = _as_filter_spec(spec)
        cursor = QueryCursor(self._collection, self.build_match(spec))

        if isinstance(spec.search, str) and spec.search != "":
            if spec.sort:
                logger.debug("Ignoring sort %r for text search", spec.sort)
            cursor.text_search(spec.search)
        else:
            sort_keys = parse_sort(spec.sort)
            if sort_keys:
                cursor.order_by(sort_keys)

        offset = _positive_number(spec.offset)
        if offset is not None:
            cursor.skip_to(offset)

        limit = _positive_number(spec.limit)
        if limit is not None:
            cursor.limit_to(limit)

        logger.debug("Built query %r", cursor)
        return cursor

    def count(self, spec: FilterSpec | Mapping[str, Any] | None = None) -> CountCursor:
        """Create a count cursor; sort, limit and offset are ignored."""
        if spec is None:
            return CountCursor(self._collection)
        spec = _as_filter_spec(spec)
        cursor = CountCursor(self._collection, self.build_match(spec))
        if isinstance(spec.search, str) and spec.search != "":
            cursor.text_search(spec.search)
        return cursor
