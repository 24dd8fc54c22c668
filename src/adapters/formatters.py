"""Render de respuestas para las tools (Markdown vía Jinja2, o JSON).

Por qué está en adapters:
- El formato de salida es un detalle de presentación para el agente.
- El Core solo conoce los modelos de dominio.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Sequence, TypeVar

from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel

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
from core.domain.queries import ResponseFormat

T = TypeVar("T")

MAX_CONTENT_LENGTH = 50_000

MATCHING_ALGORITHM_LABELS: dict[int, str] = {
    0: "None",
    1: "Any word",
    2: "All words",
    3: "Exact match",
    4: "Regular expression",
    5: "Fuzzy match",
    6: "Auto (learned)",
}

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _parse_iso(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_datetime(value: str | None) -> str:
    """ISO 8601 -> `dd.mm.yyyy HH:MM`. Si no parsea, se devuelve tal cual."""

    if not value:
        return "Unknown"
    parsed = _parse_iso(value)
    return parsed.strftime("%d.%m.%Y %H:%M") if parsed else value


def format_date(value: str | None) -> str:
    if not value:
        return "Unknown"
    parsed = _parse_iso(value)
    return parsed.strftime("%d.%m.%Y") if parsed else value


def format_number(value: int | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:,}".replace(",", ".")


def truncate_content(value: str, limit: int = MAX_CONTENT_LENGTH) -> str:
    if len(value) <= limit:
        return value
    return value[:limit] + f"\n\n... [Content truncated. Full length: {len(value)} characters]"


def _tags_label(doc: Document) -> str:
    # Nombres si la API los expandió; si no, IDs.
    if doc.tag_names:
        return ", ".join(doc.tag_names)
    return ", ".join(f"#{t}" for t in doc.tags)


def _short_mime(value: str) -> str:
    return value.replace("application/", "").replace("image/", "")


def _get_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["datetime"] = format_datetime
    env.filters["date"] = format_date
    env.filters["number"] = format_number
    env.filters["truncate_content"] = truncate_content
    env.filters["short_mime"] = _short_mime
    env.filters["tags_label"] = _tags_label
    env.filters["algorithm"] = lambda v: MATCHING_ALGORITHM_LABELS.get(v, "Unknown")
    return env


_ENV = _get_env()


def _render(template: str, **context: Any) -> str:
    return _ENV.get_template(template).render(**context).strip()


def render_document(document: Document, include_content: bool = False) -> str:
    return _render("document.md.j2", doc=document, include_content=include_content)


def render_documents(page: Page[Document], include_content: bool = False) -> str:
    if not page.results:
        return "No documents found matching your criteria."
    return _render("documents.md.j2", page=page, include_content=include_content)


def render_tags(page: Page[Tag]) -> str:
    if not page.results:
        return "No tags found."
    return _render("tags.md.j2", page=page)


def render_correspondents(page: Page[Correspondent]) -> str:
    if not page.results:
        return "No correspondents found."
    return _render("correspondents.md.j2", page=page)


def render_document_types(page: Page[DocumentType]) -> str:
    if not page.results:
        return "No document types found."
    return _render("document_types.md.j2", page=page)


def render_saved_views(views: Sequence[SavedView]) -> str:
    if not views:
        return "No saved views found."
    return _render("saved_views.md.j2", views=views)


def render_untranslated_rules(rules: Sequence[FilterRule]) -> str:
    """Aviso visible cuando una saved view se tradujo solo parcialmente."""

    if not rules:
        return ""
    listed = ", ".join(f"rule_type={r.rule_type} (value={r.value!r})" for r in rules)
    return (
        f"**Warning:** {len(rules)} filter rule(s) of this saved view are not supported "
        f"and were ignored, so results may include more documents than the view: {listed}"
    )


def render_statistics(stats: Statistics) -> str:
    return _render("statistics.md.j2", stats=stats)


def render_suggestions(document_id: int, suggestions: DocumentSuggestions) -> str:
    return _render("suggestions.md.j2", document_id=document_id, s=suggestions)


def to_json(data: Any) -> str:
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    elif isinstance(data, (list, tuple)):
        data = [d.model_dump(mode="json") if isinstance(d, BaseModel) else d for d in data]
    return json.dumps(data, ensure_ascii=False, indent=2)


def format_response(data: T, response_format: ResponseFormat, markdown: Callable[[T], str]) -> str:
    if response_format == "json":
        return to_json(data)
    return markdown(data)
