"""Unit tests for FilterSpec."""

from __future__ import annotations

import dataclasses

import pytest

from mongo_db_adapter.filters import FilterSpec


def test_defaults_are_empty() -> None:
    spec = FilterSpec()
    assert spec.query is None
    assert spec.search is None
    assert spec.sort is None
    assert spec.limit is None
    assert spec.offset is None


def test_is_frozen() -> None:
    spec = FilterSpec(limit=10)
    with pytest.raises(dataclasses.FrozenInstanceError):
        spec.limit = 20  # type: ignore[misc]


def test_from_params_reads_known_keys() -> None:
    spec = FilterSpec.from_params(
        {
            "query": {"a": 1},
            "search": "tea",
            "searchFields": "title, body",
            "sort": "-a",
            "limit": 5,
            "offset": 10,
            "populate": ["author"],
        }
    )
    assert spec == FilterSpec(
        query={"a": 1},
        search="tea",
        search_fields=["title", "body"],
        sort="-a",
        limit=5,
        offset=10,
    )


def test_from_params_prefers_snake_case_search_fields() -> None:
    spec = FilterSpec.from_params(
        {"search_fields": ["title"], "searchFields": ["body"]}
    )
    assert spec.search_fields == ["title"]

