"""Inputs tipados de las operaciones (búsquedas, listados, altas, updates).

Por qué modelos separados de `models.py`:
- Estos objetos los construye el caller (tool handler); los de `models.py`
  vienen de la API remota.
- Las cotas (p.ej. `1 <= page_size <= 100`) se validan AQUÍ, al construir el
  input. El query builder asume que ya se cumplen.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from core.domain.models import CustomFieldValue

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100
DEFAULT_ORDERING = "-created"

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

DocumentOrdering = Literal[
    "created", "-created",
    "modified", "-modified",
    "added", "-added",
    "title", "-title",
    "correspondent__name", "-correspondent__name",
    "document_type__name", "-document_type__name",
    "archive_serial_number", "-archive_serial_number",
]

ResponseFormat = Literal["markdown", "json"]


class _Input(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class Pagination(_Input):
    page: int = Field(default=1, ge=1, description="Número de página (empieza en 1).")
    page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        ge=1,
        le=MAX_PAGE_SIZE,
        description=f"Resultados por página (1-{MAX_PAGE_SIZE}).",
    )


class DocumentSearch(Pagination):
    """Búsqueda de documentos: texto libre + filtros relacionales + fechas."""

    query: str | None = Field(default=None, max_length=500)
    correspondent_id: int | None = Field(default=None, gt=0)
    document_type_id: int | None = Field(default=None, gt=0)
    tag_ids: list[int] | None = Field(
        default=None,
        max_length=20,
        description="El documento debe tener TODOS estos tags.",
    )
    created_after: str | None = Field(default=None, pattern=DATE_PATTERN)
    created_before: str | None = Field(default=None, pattern=DATE_PATTERN)
    ordering: DocumentOrdering = DEFAULT_ORDERING

    @model_validator(mode="after")
    def _positive_tags(self) -> "DocumentSearch":
        if self.tag_ids and any(t <= 0 for t in self.tag_ids):
            raise ValueError("tag_ids must be positive integers")
        return self


class NameFilter(Pagination):
    """Listado filtrable por nombre (tags, correspondents, document types)."""

    search: str | None = Field(default=None, max_length=100)


class DocumentUpdate(_Input):
    """Patch parcial de metadata.

    Convención heredada de la API de tools: `0` significa "quitar" en
    correspondent, document type y ASN.
    """

    document_id: int = Field(..., gt=0)
    title: str | None = Field(default=None, min_length=1, max_length=255)
    correspondent_id: int | None = Field(default=None, ge=0)
    document_type_id: int | None = Field(default=None, ge=0)
    tag_ids: list[int] | None = Field(default=None, description="REEMPLAZA todos los tags.")
    archive_serial_number: int | None = Field(default=None, ge=0)
    created: str | None = Field(default=None, pattern=DATE_PATTERN)
    custom_fields: list[CustomFieldValue] | None = None

    @model_validator(mode="after")
    def _at_least_one_field(self) -> "DocumentUpdate":
        if not self.to_payload():
            raise ValueError(
                "At least one field to update must be specified (title, correspondent_id, "
                "document_type_id, tag_ids, archive_serial_number, created, or custom_fields)."
            )
        return self

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {}
        if self.title is not None:
            payload["title"] = self.title
        if self.correspondent_id is not None:
            payload["correspondent"] = self.correspondent_id or None
        if self.document_type_id is not None:
            payload["document_type"] = self.document_type_id or None
        if self.tag_ids is not None:
            payload["tags"] = list(self.tag_ids)
        if self.archive_serial_number is not None:
            payload["archive_serial_number"] = self.archive_serial_number or None
        if self.created is not None:
            payload["created"] = self.created
        if self.custom_fields is not None:
            payload["custom_fields"] = [cf.model_dump() for cf in self.custom_fields]
        return payload


class _NewMatchingEntity(_Input):
    name: str = Field(..., min_length=1, max_length=128)
    match: str | None = Field(default=None, max_length=256)
    matching_algorithm: int | None = Field(
        default=None,
        ge=0,
        le=6,
        description="0=None, 1=Any word, 2=All words, 3=Exact, 4=RegEx, 5=Fuzzy, 6=Auto",
    )
    is_insensitive: bool = True

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"name": self.name, "is_insensitive": self.is_insensitive}
        if self.match:
            payload["match"] = self.match
        if self.matching_algorithm is not None:
            payload["matching_algorithm"] = self.matching_algorithm
        return payload


class NewTag(_NewMatchingEntity):
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        if self.color:
            payload["color"] = self.color
        return payload


class NewCorrespondent(_NewMatchingEntity):
    pass


class NewDocumentType(_NewMatchingEntity):
    pass


class DocumentUpload(_Input):
    """Subida de un fichero (multipart). Paperless lo procesa de forma asíncrona."""

    filename: str = Field(..., min_length=1, max_length=255)
    content: bytes = Field(..., min_length=1, repr=False)
    content_type: str = "application/octet-stream"
    title: str | None = Field(default=None, max_length=255)
    correspondent_id: int | None = Field(default=None, gt=0)
    document_type_id: int | None = Field(default=None, gt=0)
    tag_ids: list[int] | None = None
    created: str | None = Field(default=None, pattern=DATE_PATTERN)

    def form_data(self) -> dict[str, str | list[str]]:
        data: dict[str, str | list[str]] = {}
        if self.title:
            data["title"] = self.title
        if self.correspondent_id is not None:
            data["correspondent"] = str(self.correspondent_id)
        if self.document_type_id is not None:
            data["document_type"] = str(self.document_type_id)
        if self.tag_ids:
            data["tags"] = [str(t) for t in self.tag_ids]
        if self.created:
            data["created"] = self.created
        return data
