"""Construcción de query params para los endpoints de búsqueda/listado.

Reglas:
- Valores `None` o `""` NUNCA aparecen como keys (la API trata distinto un
  filtro vacío que un filtro ausente).
- La paginación siempre se emite.
- Los nombres de parámetro usan los sufijos REST de Paperless NGX y deben
  reproducirse exactamente.
"""

from __future__ import annotations

from typing import Any, Mapping

from core.domain.queries import DocumentSearch, NameFilter, Pagination

QueryParams = dict[str, "str | int | float | bool"]

PARAM_PAGE = "page"
PARAM_PAGE_SIZE = "page_size"
PARAM_ORDERING = "ordering"
PARAM_QUERY = "query"
PARAM_TITLE_CONTAINS = "title__icontains"
PARAM_NAME_CONTAINS = "name__icontains"
PARAM_CORRESPONDENT = "correspondent__id"
PARAM_DOCUMENT_TYPE = "document_type__id"
PARAM_TAGS_ALL = "tags__id__all"
PARAM_CREATED_AFTER = "created__date__gt"
PARAM_CREATED_BEFORE = "created__date__lt"


def compact_params(params: Mapping[str, Any] | None) -> QueryParams:
    """Descarta entradas `None`/`""` preservando el resto tal cual."""

    if not params:
        return {}
    return {key: value for key, value in params.items() if value is not None and value != ""}


def build_pagination_params(pagination: Pagination) -> QueryParams:
    return {
        PARAM_PAGE: pagination.page,
        PARAM_PAGE_SIZE: pagination.page_size,
    }


def build_document_search_params(search: DocumentSearch) -> QueryParams:
    """Params para `GET /api/documents/`."""

    params: dict[str, Any] = {
        **build_pagination_params(search),
        PARAM_ORDERING: search.ordering,
        PARAM_QUERY: search.query,
        PARAM_CORRESPONDENT: search.correspondent_id,
        PARAM_DOCUMENT_TYPE: search.document_type_id,
        PARAM_CREATED_AFTER: search.created_after,
        PARAM_CREATED_BEFORE: search.created_before,
    }
    if search.tag_ids:
        # Un único valor separado por comas, no keys repetidas.
        params[PARAM_TAGS_ALL] = ",".join(str(t) for t in search.tag_ids)
    return compact_params(params)


def build_name_filter_params(name_filter: NameFilter) -> QueryParams:
    """Params para listados filtrados por nombre (tags, correspondents, types)."""

    return compact_params(
        {
            **build_pagination_params(name_filter),
            PARAM_NAME_CONTAINS: name_filter.search,
        }
    )
