"""Operaciones sobre Paperless NGX.

Por qué un servicio:
- Reúne todas las operaciones remotas que necesitan las tools.
- Cada método arma sus query params (query builder / compilador de saved
  views), hace UNA llamada por request remota vía `ResourceClient` y valida
  el payload contra los modelos del dominio.
- Render y transporte quedan en adapters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from core.domain.errors import InvalidResponseError
from core.domain.models import (
    Correspondent,
    Document,
    DocumentSuggestions,
    DocumentType,
    FilterRule,
    Page,
    SavedView,
    Statistics,
    Tag,
)
from core.domain.queries import (
    DocumentSearch,
    DocumentUpdate,
    DocumentUpload,
    NameFilter,
    NewCorrespondent,
    NewDocumentType,
    NewTag,
    Pagination,
)
from core.interfaces.resource_client import ResourceClient
from core.services.query_builder import build_document_search_params, build_name_filter_params
from core.services.saved_view_compiler import compile_saved_view, find_untranslated_rules

M = TypeVar("M", bound=BaseModel)

DOCUMENTS_PATH = "/api/documents/"
TAGS_PATH = "/api/tags/"
CORRESPONDENTS_PATH = "/api/correspondents/"
DOCUMENT_TYPES_PATH = "/api/document_types/"
SAVED_VIEWS_PATH = "/api/saved_views/"
STATISTICS_PATH = "/api/statistics/"
UPLOAD_PATH = "/api/documents/post_document/"


def _document_path(document_id: int, suffix: str = "") -> str:
    return f"{DOCUMENTS_PATH}{document_id}/{suffix}"


def _parse(model: type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidResponseError(
            f"Unexpected response shape from Paperless for {model.__name__}.",
            response_body=payload,
        ) from exc


@dataclass
class SavedViewResult:
    """Resultado de ejecutar una saved view."""

    view: SavedView
    documents: Page[Document]
    untranslated_rules: list[FilterRule] = field(default_factory=list)


class PaperlessService:
    def __init__(self, client: ResourceClient) -> None:
        self._client = client

    # -- documents -----------------------------------------------------------

    async def search_documents(self, search: DocumentSearch) -> Page[Document]:
        payload = await self._client.execute(
            "GET", DOCUMENTS_PATH, params=build_document_search_params(search)
        )
        return _parse(Page[Document], payload)

    async def get_document(self, document_id: int) -> Document:
        payload = await self._client.execute("GET", _document_path(document_id))
        return _parse(Document, payload)

    async def update_document(self, update: DocumentUpdate) -> Document:
        payload = await self._client.execute(
            "PATCH", _document_path(update.document_id), json_body=update.to_payload()
        )
        return _parse(Document, payload)

    async def delete_document(self, document_id: int) -> None:
        await self._client.execute("DELETE", _document_path(document_id))

    async def get_download_url(self, document_id: int, *, original: bool = False) -> str:
        """URL de descarga (requiere el token en el header Authorization).

        Primero comprueba que el documento existe para no devolver URLs muertas.
        """

        await self.get_document(document_id)
        suffix = "original/" if original else "download/"
        return self._client.resolve_url(_document_path(document_id, suffix))

    async def get_suggestions(self, document_id: int) -> DocumentSuggestions:
        payload = await self._client.execute("GET", _document_path(document_id, "suggestions/"))
        return _parse(DocumentSuggestions, payload)

    async def upload_document(self, upload: DocumentUpload) -> str:
        """Sube un fichero; Paperless lo consume en background y devuelve un task id."""

        payload = await self._client.execute(
            "POST",
            UPLOAD_PATH,
            files={"document": (upload.filename, upload.content, upload.content_type)},
            form_data=upload.form_data(),
        )
        if isinstance(payload, str):
            return payload
        if isinstance(payload, dict) and isinstance(payload.get("task_id"), str):
            return payload["task_id"]
        raise InvalidResponseError(
            "Paperless did not return a task id for the upload.", response_body=payload
        )

    # -- tags / correspondents / document types --------------------------------

    async def list_tags(self, name_filter: NameFilter) -> Page[Tag]:
        payload = await self._client.execute(
            "GET", TAGS_PATH, params=build_name_filter_params(name_filter)
        )
        return _parse(Page[Tag], payload)

    async def create_tag(self, new_tag: NewTag) -> Tag:
        payload = await self._client.execute("POST", TAGS_PATH, json_body=new_tag.to_payload())
        return _parse(Tag, payload)

    async def list_correspondents(self, name_filter: NameFilter) -> Page[Correspondent]:
        payload = await self._client.execute(
            "GET", CORRESPONDENTS_PATH, params=build_name_filter_params(name_filter)
        )
        return _parse(Page[Correspondent], payload)

    async def create_correspondent(self, new: NewCorrespondent) -> Correspondent:
        payload = await self._client.execute(
            "POST", CORRESPONDENTS_PATH, json_body=new.to_payload()
        )
        return _parse(Correspondent, payload)

    async def list_document_types(self, name_filter: NameFilter) -> Page[DocumentType]:
        payload = await self._client.execute(
            "GET", DOCUMENT_TYPES_PATH, params=build_name_filter_params(name_filter)
        )
        return _parse(Page[DocumentType], payload)

    async def create_document_type(self, new: NewDocumentType) -> DocumentType:
        payload = await self._client.execute(
            "POST", DOCUMENT_TYPES_PATH, json_body=new.to_payload()
        )
        return _parse(DocumentType, payload)

    # -- saved views -------------------------------------------------------------

    async def list_saved_views(self) -> list[SavedView]:
        payload = await self._client.execute("GET", SAVED_VIEWS_PATH)
        # El endpoint puede devolver la lista directamente o paginada.
        if isinstance(payload, dict) and "results" in payload:
            payload = payload["results"]
        try:
            return TypeAdapter(list[SavedView]).validate_python(payload)
        except ValidationError as exc:
            raise InvalidResponseError(
                "Unexpected response shape from Paperless for saved views.",
                response_body=payload,
            ) from exc

    async def get_saved_view(self, view_id: int) -> SavedView:
        payload = await self._client.execute("GET", f"{SAVED_VIEWS_PATH}{view_id}/")
        return _parse(SavedView, payload)

    async def execute_saved_view(
        self, view_id: int, pagination: Pagination | None = None
    ) -> SavedViewResult:
        view = await self.get_saved_view(view_id)
        params = compile_saved_view(view, pagination)
        payload = await self._client.execute("GET", DOCUMENTS_PATH, params=params)
        return SavedViewResult(
            view=view,
            documents=_parse(Page[Document], payload),
            untranslated_rules=find_untranslated_rules(view),
        )

    # -- misc ------------------------------------------------------------------

    async def get_statistics(self) -> Statistics:
        payload = await self._client.execute("GET", STATISTICS_PATH)
        return _parse(Statistics, payload)

    async def check_connection(self) -> Any:
        """GET /api/ (raíz de la API). Útil para diagnósticos."""

        return await self._client.execute("GET", "/api/")
