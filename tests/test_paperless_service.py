"""Tests for PaperlessService using an in-memory ResourceClient."""

import pytest

from core.domain.errors import InvalidResponseError, UnreachableError
from core.domain.queries import (
    DocumentSearch,
    DocumentUpdate,
    DocumentUpload,
    NameFilter,
    NewTag,
    Pagination,
)
from core.interfaces.resource_client import SUCCESS_SENTINEL
from core.services.paperless_service import PaperlessService

DOC = {
    "id": 7,
    "title": "Invoice 2024-001",
    "content": "Total: 100 EUR",
    "correspondent": 3,
    "tags": [1, 2],
    "created": "2024-03-01T00:00:00Z",
    "unexpected_new_field": True,
}


class FakeClient:
    """Records calls and answers from a `{(method, path): payload}` table."""

    base_url = "https://paperless.example.com"

    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.calls = []

    async def execute(self, method, path, *, params=None, json_body=None, files=None, form_data=None):
        self.calls.append(
            {
                "method": method,
                "path": path,
                "params": params,
                "json_body": json_body,
                "files": files,
                "form_data": form_data,
            }
        )
        if self.error is not None:
            raise self.error
        return self.responses.get((method, path), dict(SUCCESS_SENTINEL))

    def resolve_url(self, path):
        return f"{self.base_url}{path}"


def _page(*results):
    return {"count": len(results), "next": None, "previous": None, "results": list(results)}


# ===========================================================================
# Documents
# ===========================================================================


class TestDocuments:

    @pytest.mark.asyncio
    async def test_search_documents(self):
        client = FakeClient({("GET", "/api/documents/"): _page(DOC)})
        service = PaperlessService(client)

        page = await service.search_documents(DocumentSearch(query="invoice", tag_ids=[1, 2]))

        assert page.count == 1
        assert page.results[0].title == "Invoice 2024-001"
        assert client.calls[0]["params"]["tags__id__all"] == "1,2"
        assert client.calls[0]["params"]["query"] == "invoice"

    @pytest.mark.asyncio
    async def test_search_with_list_valued_custom_field(self):
        doc = {**DOC, "custom_fields": [{"field": 2, "value": [5, 7]}, {"field": 3, "value": "x"}]}
        client = FakeClient({("GET", "/api/documents/"): _page(doc)})

        page = await PaperlessService(client).search_documents(DocumentSearch())

        fields = page.results[0].custom_fields
        assert fields[0].value == [5, 7]
        assert fields[1].value == "x"

    @pytest.mark.asyncio
    async def test_get_document(self):
        client = FakeClient({("GET", "/api/documents/7/"): DOC})
        doc = await PaperlessService(client).get_document(7)
        assert doc.id == 7
        assert doc.tags == [1, 2]

    @pytest.mark.asyncio
    async def test_update_document_sends_patch(self):
        client = FakeClient({("PATCH", "/api/documents/7/"): {**DOC, "title": "New"}})
        update = DocumentUpdate(document_id=7, title="New", correspondent_id=0, tag_ids=[4])

        doc = await PaperlessService(client).update_document(update)

        assert doc.title == "New"
        assert client.calls[0]["json_body"] == {"title": "New", "correspondent": None, "tags": [4]}

    @pytest.mark.asyncio
    async def test_delete_document(self):
        client = FakeClient()
        await PaperlessService(client).delete_document(7)
        assert client.calls == [
            {
                "method": "DELETE",
                "path": "/api/documents/7/",
                "params": None,
                "json_body": None,
                "files": None,
                "form_data": None,
            }
        ]

    @pytest.mark.asyncio
    async def test_download_url_checks_document_first(self):
        client = FakeClient({("GET", "/api/documents/7/"): DOC})
        service = PaperlessService(client)

        archived = await service.get_download_url(7)
        original = await service.get_download_url(7, original=True)

        assert archived == "https://paperless.example.com/api/documents/7/download/"
        assert original == "https://paperless.example.com/api/documents/7/original/"
        assert [c["path"] for c in client.calls] == ["/api/documents/7/", "/api/documents/7/"]

    @pytest.mark.asyncio
    async def test_suggestions_accept_bare_ids(self):
        payload = {"correspondents": [3], "tags": [{"id": 1, "name": "Bills"}], "dates": ["2024-03-01"]}
        client = FakeClient({("GET", "/api/documents/7/suggestions/"): payload})

        suggestions = await PaperlessService(client).get_suggestions(7)

        assert suggestions.correspondents[0].id == 3
        assert suggestions.tags[0].name == "Bills"
        assert suggestions.dates == ["2024-03-01"]

    @pytest.mark.asyncio
    async def test_upload_returns_task_id(self):
        client = FakeClient({("POST", "/api/documents/post_document/"): "abc-123"})
        upload = DocumentUpload(
            filename="scan.pdf", content=b"%PDF", content_type="application/pdf", tag_ids=[1]
        )

        task_id = await PaperlessService(client).upload_document(upload)

        assert task_id == "abc-123"
        call = client.calls[0]
        assert call["files"] == {"document": ("scan.pdf", b"%PDF", "application/pdf")}
        assert call["form_data"] == {"tags": ["1"]}

    @pytest.mark.asyncio
    async def test_upload_without_task_id(self):
        client = FakeClient({("POST", "/api/documents/post_document/"): {"unexpected": 1}})
        upload = DocumentUpload(filename="a.txt", content=b"x")
        with pytest.raises(InvalidResponseError):
            await PaperlessService(client).upload_document(upload)

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        client = FakeClient({("GET", "/api/documents/7/"): {"title": "no id"}})
        with pytest.raises(InvalidResponseError):
            await PaperlessService(client).get_document(7)

    @pytest.mark.asyncio
    async def test_client_errors_propagate(self):
        client = FakeClient(error=UnreachableError("down"))
        with pytest.raises(UnreachableError):
            await PaperlessService(client).get_statistics()


# ===========================================================================
# Tags / correspondents / document types
# ===========================================================================


class TestEntities:

    @pytest.mark.asyncio
    async def test_list_tags(self):
        tag = {"id": 1, "name": "Bills", "color": "#ff0000", "document_count": 4}
        client = FakeClient({("GET", "/api/tags/"): _page(tag)})

        page = await PaperlessService(client).list_tags(NameFilter(search="bil"))

        assert page.results[0].name == "Bills"
        assert client.calls[0]["params"] == {"page": 1, "page_size": 25, "name__icontains": "bil"}

    @pytest.mark.asyncio
    async def test_create_tag(self):
        client = FakeClient({("POST", "/api/tags/"): {"id": 9, "name": "Tax"}})

        tag = await PaperlessService(client).create_tag(NewTag(name="Tax", color="#00ff00"))

        assert tag.id == 9
        assert client.calls[0]["json_body"] == {"name": "Tax", "is_insensitive": True, "color": "#00ff00"}

    @pytest.mark.asyncio
    async def test_list_correspondents_and_types(self):
        client = FakeClient(
            {
                ("GET", "/api/correspondents/"): _page({"id": 3, "name": "ACME"}),
                ("GET", "/api/document_types/"): _page({"id": 4, "name": "Invoice"}),
            }
        )
        service = PaperlessService(client)

        correspondents = await service.list_correspondents(NameFilter())
        types = await service.list_document_types(NameFilter())

        assert correspondents.results[0].name == "ACME"
        assert types.results[0].name == "Invoice"


# ===========================================================================
# Saved views
# ===========================================================================


class TestSavedViews:

    VIEW = {
        "id": 5,
        "name": "ACME bills",
        "sort_field": "created",
        "sort_reverse": True,
        "filter_rules": [
            {"rule_type": 3, "value": "3"},
            {"rule_type": 99, "value": "x"},
        ],
    }

    @pytest.mark.asyncio
    async def test_list_saved_views_paginated_or_bare(self):
        paginated = FakeClient({("GET", "/api/saved_views/"): _page(self.VIEW)})
        bare = FakeClient({("GET", "/api/saved_views/"): [self.VIEW]})

        assert (await PaperlessService(paginated).list_saved_views())[0].id == 5
        assert (await PaperlessService(bare).list_saved_views())[0].name == "ACME bills"

    @pytest.mark.asyncio
    async def test_execute_saved_view(self):
        client = FakeClient(
            {
                ("GET", "/api/saved_views/5/"): self.VIEW,
                ("GET", "/api/documents/"): _page(DOC),
            }
        )

        result = await PaperlessService(client).execute_saved_view(5, Pagination(page=2, page_size=10))

        assert result.view.name == "ACME bills"
        assert result.documents.results[0].id == 7
        assert [r.rule_type for r in result.untranslated_rules] == [99]
        assert client.calls[1]["params"] == {
            "page": 2,
            "page_size": 10,
            "ordering": "-created",
            "correspondent__id": "3",
        }


class TestMisc:

    @pytest.mark.asyncio
    async def test_statistics(self):
        payload = {
            "documents_total": 1234,
            "documents_inbox": 5,
            "document_file_type_counts": [{"mime_type": "application/pdf", "mime_type_count": 1200}],
        }
        client = FakeClient({("GET", "/api/statistics/"): payload})
        stats = await PaperlessService(client).get_statistics()
        assert stats.documents_total == 1234
        assert stats.document_file_type_counts[0].mime_type == "application/pdf"

    @pytest.mark.asyncio
    async def test_check_connection(self):
        client = FakeClient({("GET", "/api/"): {"documents": "https://x/api/documents/"}})
        assert await PaperlessService(client).check_connection() == {
            "documents": "https://x/api/documents/"
        }
