"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Las respuestas de Paperless NGX se validan al borde: si la forma no encaja,
  la llamada falla entera en vez de devolver datos a medias.

Nota:
- Estos modelos describen *qué* devuelve la API remota, no *cómo* se obtiene.
- `extra="ignore"`: Paperless añade campos entre versiones y no queremos romper.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

T = TypeVar("T")


class _RemoteModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Page(_RemoteModel, Generic[T]):
    """Respuesta paginada estándar de los endpoints de listado."""

    count: int = Field(default=0, ge=0, description="Total de items que cumplen la consulta.")
    next: str | None = Field(default=None, description="URL de la página siguiente.")
    previous: str | None = Field(default=None, description="URL de la página anterior.")
    results: list[T] = Field(default_factory=list)


class DocumentNote(_RemoteModel):
    id: int
    note: str = ""
    created: str | None = None
    document: int | None = None
    user: int | dict | None = None


class CustomFieldValue(_RemoteModel):
    field: int = Field(..., gt=0, description="ID del custom field.")
    value: str | int | float | bool | list[int] | list[str] | None = Field(
        default=None,
        description="Valor (el tipo depende de la definición del campo).",
    )


class Document(_RemoteModel):
    """Documento con su metadata (OCR incluido en `content`)."""

    id: int
    title: str = ""
    content: str = ""
    correspondent: int | None = None
    correspondent_name: str | None = None
    document_type: int | None = None
    document_type_name: str | None = None
    storage_path: int | None = None
    storage_path_name: str | None = None
    tags: list[int] = Field(default_factory=list)
    tag_names: list[str] | None = None
    created: str | None = None
    modified: str | None = None
    added: str | None = None
    archive_serial_number: int | None = None
    original_file_name: str | None = None
    archived_file_name: str | None = None
    owner: int | None = None
    notes: list[DocumentNote] = Field(default_factory=list)
    custom_fields: list[CustomFieldValue] = Field(default_factory=list)


class _MatchingEntity(_RemoteModel):
    id: int
    slug: str = ""
    name: str
    match: str = ""
    matching_algorithm: int = 0
    is_insensitive: bool = True
    document_count: int | None = None
    owner: int | None = None


class Tag(_MatchingEntity):
    color: str = ""
    text_color: str = ""
    is_inbox_tag: bool = False


class Correspondent(_MatchingEntity):
    last_correspondence: str | None = None


class DocumentType(_MatchingEntity):
    pass


class FilterRule(_RemoteModel):
    """Condición opaca (tipo, valor) de una saved view.

    Solo se interpreta; este sistema nunca la construye ni la modifica en remoto.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    rule_type: int
    value: str | None = None


class SavedView(_RemoteModel):
    id: int
    name: str
    show_on_dashboard: bool = False
    show_in_sidebar: bool = False
    sort_field: str | None = None
    sort_reverse: bool = False
    filter_rules: list[FilterRule] = Field(default_factory=list)
    owner: int | None = None


class FileTypeCount(_RemoteModel):
    mime_type: str
    mime_type_count: int = 0


class Statistics(_RemoteModel):
    documents_total: int = 0
    documents_inbox: int | None = None
    inbox_tag: int | None = None
    document_file_type_counts: list[FileTypeCount] = Field(default_factory=list)
    character_count: int | None = None


class SuggestionRef(_RemoteModel):
    id: int
    name: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_bare_id(cls, data: object) -> object:
        # Algunas versiones devuelven solo IDs.
        if isinstance(data, int):
            return {"id": data}
        return data


class DocumentSuggestions(_RemoteModel):
    """Sugerencias del clasificador ML de Paperless para un documento."""

    correspondents: list[SuggestionRef] = Field(default_factory=list)
    tags: list[SuggestionRef] = Field(default_factory=list)
    document_types: list[SuggestionRef] = Field(default_factory=list)
    storage_paths: list[SuggestionRef] = Field(default_factory=list)
    dates: list[str] = Field(default_factory=list)
