"""Tests for document search and name-filter query parameters."""

import pytest
from pydantic import ValidationError

from core.domain.queries import DocumentSearch, NameFilter, Pagination
from core.services.query_builder import (
    build_document_search_params,
    build_name_filter_params,
    build_pagination_params,
    compact_params,
)


class TestCompactParams:

    def test_drops_none_and_empty_string(self):
        params = {"a": None, "b": "", "c": 0, "d": False, "e": "x"}
        assert compact_params(params) == {"c": 0, "d": False, "e": "x"}

    def test_none_mapping(self):
        assert compact_params(None) == {}


class TestDocumentSearchParams:

    def test_defaults_only_pagination_and_ordering(self):
        assert build_document_search_params(DocumentSearch()) == {
            "page": 1,
            "page_size": 25,
            "ordering": "-created",
        }

    def test_all_filters(self):
        search = DocumentSearch(
            query="invoice",
            correspondent_id=3,
            document_type_id=7,
            tag_ids=[1, 2, 5],
            created_after="2024-01-01",
            created_before="2024-12-31",
            ordering="title",
            page=2,
            page_size=50,
        )
        assert build_document_search_params(search) == {
            "page": 2,
            "page_size": 50,
            "ordering": "title",
            "query": "invoice",
            "correspondent__id": 3,
            "document_type__id": 7,
            "tags__id__all": "1,2,5",
            "created__date__gt": "2024-01-01",
            "created__date__lt": "2024-12-31",
        }

    def test_empty_query_omitted(self):
        params = build_document_search_params(DocumentSearch(query=""))
        assert "query" not in params

    def test_empty_tag_list_omitted(self):
        params = build_document_search_params(DocumentSearch(tag_ids=[]))
        assert "tags__id__all" not in params

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"page": 0},
            {"page_size": 0},
            {"page_size": 101},
            {"created_after": "01.02.2024"},
            {"tag_ids": [0]},
            {"correspondent_id": -1},
            {"ordering": "random"},
            {"unknown": 1},
        ],
    )
    def test_bounds_rejected_at_construction(self, kwargs):
        with pytest.raises(ValidationError):
            DocumentSearch(**kwargs)


class TestNameFilterParams:

    def test_with_search(self):
        params = build_name_filter_params(NameFilter(search="inv", page=3, page_size=10))
        assert params == {"page": 3, "page_size": 10, "name__icontains": "inv"}

    def test_without_search(self):
        assert build_name_filter_params(NameFilter()) == {"page": 1, "page_size": 25}

    def test_pagination(self):
        assert build_pagination_params(Pagination(page=4, page_size=100)) == {
            "page": 4,
            "page_size": 100,
        }
