"""Lazily-executed query descriptions over a Motor collection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .exceptions import MongoQueryError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

TEXT_SCORE_FIELD = "_score"
TEXT_SCORE = {"$meta": "textScore"}


class QueryCursor:
    """
    An in-progress ``find()`` that has not been sent to the store yet.

    The builder records predicate, projection, ordering and pagination and
    only touches the collection when :meth:`to_list` is awaited. Once a
    free-text clause is applied, the ordering is owned by text relevance and
    :meth:`order_by` refuses further sort keys.
    """

    def __init__(self, collection: Any, query: dict[str, Any] | None = None) -> None:
        self._collection = collection
        self._filter: dict[str, Any] = dict(query or {})
        self._projection: dict[str, Any] | None = None
        self._sort: list[tuple[str, Any]] = []
        self._skip = 0
        self._limit = 0
        self._text_search = False

    @property
    def filter(self) -> dict[str, Any]:
        return self._filter

    @property
    def projection(self) -> dict[str, Any] | None:
        return self._projection

    @property
    def sort(self) -> list[tuple[str, Any]]:
        return self._sort

    @property
    def skip(self) -> int:
        return self._skip

    @property
    def limit(self) -> int:
        """Result cap; ``0`` means unlimited, as in PyMongo."""
        return self._limit

    @property
    def is_text_search(self) -> bool:
        return self._text_search

    def where(self, clause: dict[str, Any]) -> QueryCursor:
        """Merge ``clause`` into the predicate (top-level keys overwrite)."""
        self._filter.update(clause)
        return self

    def text_search(self, term: str) -> QueryCursor:
        """Add a ``$text`` clause and order by descending relevance score."""
        self._filter["$text"] = {"$search": term}
        self._projection = {TEXT_SCORE_FIELD: dict(TEXT_SCORE)}
        self._sort = [(TEXT_SCORE_FIELD, dict(TEXT_SCORE))]
        self._text_search = True
        return self

    def order_by(self, keys: list[tuple[str, int]]) -> QueryCursor:
        """Append sort keys in priority order."""
        if self._text_search:
            raise MongoQueryError(
                "Cannot apply a sort to a text search; results are ordered by relevance"
            )
        self._sort.extend(keys)
        return self

    def skip_to(self, offset: int) -> QueryCursor:
        self._skip = offset
        return self

    def limit_to(self, limit: int) -> QueryCursor:
        self._limit = limit
        return self

    def to_dict(self) -> dict[str, Any]:
        """Plain description of the query, used for logging and equality checks."""
        return {
            "filter": dict(self._filter),
            "projection": dict(self._projection) if self._projection else None,
            "sort": list(self._sort),
            "skip": self._skip,
            "limit": self._limit,
        }

    def _motor_cursor(self, batch_size: int | None = None) -> Any:
        if self._projection is not None:
            cursor = self._collection.find(self._filter, self._projection)
        else:
            cursor = self._collection.find(self._filter)
        # Cursor modifiers apply in place
        if self._sort:
            cursor.sort(self._sort)
        if self._skip:
            cursor.skip(self._skip)
        if self._limit:
            cursor.limit(self._limit)
        if batch_size:
            cursor.batch_size(batch_size)
        return cursor

    async def to_list(self) -> list[dict[str, Any]]:
        """Execute the query and return every matching document."""
        return [doc async for doc in self._motor_cursor()]

    async def stream(
        self, batch_size: int | None = None
    ) -> AsyncIterator[dict[str, Any]]:
        """Execute the query and yield documents as they arrive."""
        async for doc in self._motor_cursor(batch_size or 100):
            yield doc

    def __repr__(self) -> str:
        return f"QueryCursor({self.to_dict()!r})"


class CountCursor:
    """An unexecuted ``count_documents()``; pagination and order do not apply."""

    def __init__(self, collection: Any, query: dict[str, Any] | None = None) -> None:
        self._collection = collection
        self._filter: dict[str, Any] = dict(query or {})

    @property
    def filter(self) -> dict[str, Any]:
        return self._filter

    def where(self, clause: dict[str, Any]) -> CountCursor:
        self._filter.update(clause)
        return self

    def text_search(self, term: str) -> CountCursor:
        self._filter["$text"] = {"$search": term}
        return self

    async def count(self) -> int:
        """Execute the count."""
        return int(await self._collection.count_documents(self._filter))

    def __repr__(self) -> str:
        return f"CountCursor({self._filter!r})"
