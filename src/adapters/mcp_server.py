"""Servidor MCP (FastMCP): expone Paperless NGX como tools para un agente.

Cada tool es un wrapper fino sobre `PaperlessService`:
1. Construye el input tipado (las cotas ya las valida FastMCP con los `Field`).
2. Llama al servicio (una instancia nueva por llamada, con config recién leída).
3. Devuelve texto Markdown o JSON; un `PaperlessError` se devuelve como
   "Error: <mensaje>" para que el agente lo pueda leer y actuar.

El transporte (HTTP o stdio) se decide en la CLI; las tools no lo conocen.
"""

import base64
import binascii
import logging
from typing import Annotated, Awaitable, Callable

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field, ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from adapters.formatters import (
    format_response,
    render_correspondents,
    render_document,
    render_document_types,
    render_documents,
    render_saved_views,
    render_statistics,
    render_suggestions,
    render_tags,
    render_untranslated_rules,
)
from adapters.paperless_api import PaperlessApiClient
from core.config import AppSettings
from core.domain.errors import PaperlessError
from core.domain.models import CustomFieldValue
from core.domain.queries import (
    DATE_PATTERN,
    DEFAULT_ORDERING,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    DocumentOrdering,
    DocumentSearch,
    DocumentUpdate,
    DocumentUpload,
    NameFilter,
    NewCorrespondent,
    NewDocumentType,
    NewTag,
    Pagination,
    ResponseFormat,
)
from core.services.paperless_service import PaperlessService

logger = logging.getLogger(__name__)

SERVER_NAME = "paperless-ngx-mcp-server"

ServiceFactory = Callable[[], PaperlessService]

PageNumber = Annotated[int, Field(ge=1, description="Page number for pagination (starts at 1)")]
PageSize = Annotated[
    int,
    Field(
        ge=1,
        le=MAX_PAGE_SIZE,
        description=f"Number of results per page (1-{MAX_PAGE_SIZE}, default {DEFAULT_PAGE_SIZE})",
    ),
]
Format = Annotated[
    ResponseFormat,
    Field(description="Output format: 'markdown' for human-readable text, 'json' for structured data"),
]
DocumentId = Annotated[int, Field(gt=0, description="The unique ID of the document")]
DateStr = Annotated[str | None, Field(pattern=DATE_PATTERN, description="Date in YYYY-MM-DD format")]
NameSearch = Annotated[
    str | None, Field(max_length=100, description="Filter by name (partial match, case-insensitive)")
]
MatchingAlgorithm = Annotated[
    int | None,
    Field(
        ge=0,
        le=6,
        description="Matching algorithm: 0=None, 1=Any word, 2=All words, 3=Exact match, 4=RegEx, 5=Fuzzy, 6=Auto",
    ),
]

_READ_ONLY = ToolAnnotations(
    readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False
)
_WRITE = ToolAnnotations(
    readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=False
)
_IDEMPOTENT_WRITE = ToolAnnotations(
    readOnlyHint=False, destructiveHint=False, idempotentHint=True, openWorldHint=False
)
_DESTRUCTIVE = ToolAnnotations(
    readOnlyHint=False, destructiveHint=True, idempotentHint=True, openWorldHint=False
)


def default_service_factory() -> PaperlessService:
    # Settings se releen en cada llamada: la config puede corregirse sin reiniciar.
    return PaperlessService(PaperlessApiClient(AppSettings()))


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        msg = str(err.get("msg", "invalid value")).removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


async def _guarded(run: Callable[[], Awaitable[str]]) -> str:
    """Convierte errores clasificados en texto legible para el agente."""

    try:
        return await run()
    except PaperlessError as exc:
        logger.info("Tool call failed (%s): %s", exc.category.value, exc.message)
        return f"Error: {exc.message}"
    except ValidationError as exc:
        return f"Error: Invalid parameters: {_validation_message(exc)}"


def health_payload(settings: AppSettings) -> tuple[int, dict[str, str]]:
    """Estado para `/health`: 200 si hay config, 503 si falta algo."""

    if settings.is_configured:
        return 200, {"status": "healthy", "server": SERVER_NAME, "paperless_url": settings.url}
    missing = " or ".join(settings.missing_settings())
    return 503, {"status": "unhealthy", "error": f"Missing required configuration ({missing})"}


class PaperlessTools:
    """Handlers de las tools. Se registran como métodos ligados en FastMCP."""

    def __init__(self, service_factory: ServiceFactory = default_service_factory) -> None:
        self._service_factory = service_factory

    # -- documents -----------------------------------------------------------

    async def search_documents(
        self,
        query: Annotated[
            str | None,
            Field(max_length=500, description="Full-text search query. Searches title, content and metadata."),
        ] = None,
        correspondent_id: Annotated[
            int | None,
            Field(gt=0, description="Filter by correspondent ID. Use paperless_list_correspondents to find IDs."),
        ] = None,
        document_type_id: Annotated[
            int | None,
            Field(gt=0, description="Filter by document type ID. Use paperless_list_document_types to find IDs."),
        ] = None,
        tag_ids: Annotated[
            list[int] | None,
            Field(max_length=20, description="Documents must have ALL of these tag IDs."),
        ] = None,
        created_after: DateStr = None,
        created_before: DateStr = None,
        ordering: DocumentOrdering = DEFAULT_ORDERING,
        page: PageNumber = 1,
        page_size: PageSize = DEFAULT_PAGE_SIZE,
        response_format: Format = "markdown",
    ) -> str:
        """Search for documents in Paperless NGX with flexible filtering options.

        Supports full-text search across document content and title, plus
        filtering by correspondent, document type, tags (all must match) and
        creation date range (YYYY-MM-DD). Results are paginated and sortable
        (default: newest first).

        Examples:
          - "Find invoices from 2024" -> query="invoice", created_after="2024-01-01"
          - "Documents tagged 'important'" -> tag_ids=[5]
        """

        async def run() -> str:
            search = DocumentSearch(
                query=query,
                correspondent_id=correspondent_id,
                document_type_id=document_type_id,
                tag_ids=tag_ids,
                created_after=created_after,
                created_before=created_before,
                ordering=ordering,
                page=page,
                page_size=page_size,
            )
            data = await self._service_factory().search_documents(search)
            return format_response(data, response_format, render_documents)

        return await _guarded(run)

    async def get_document(
        self,
        document_id: DocumentId,
        include_content: Annotated[
            bool, Field(description="Whether to include the full OCR text content")
        ] = True,
        response_format: Format = "markdown",
    ) -> str:
        """Retrieve a single document with all metadata, notes and (optionally) its OCR content."""

        async def run() -> str:
            doc = await self._service_factory().get_document(document_id)
            return format_response(doc, response_format, lambda d: render_document(d, include_content))

        return await _guarded(run)

    async def update_document(
        self,
        document_id: DocumentId,
        title: Annotated[str | None, Field(min_length=1, max_length=255, description="New title")] = None,
        correspondent_id: Annotated[
            int | None, Field(ge=0, description="New correspondent ID. Use 0 to remove the correspondent.")
        ] = None,
        document_type_id: Annotated[
            int | None, Field(ge=0, description="New document type ID. Use 0 to remove the document type.")
        ] = None,
        tag_ids: Annotated[
            list[int] | None, Field(description="New list of tag IDs. This REPLACES all existing tags.")
        ] = None,
        archive_serial_number: Annotated[
            int | None, Field(ge=0, description="New Archive Serial Number (ASN). Use 0 to remove.")
        ] = None,
        created: DateStr = None,
        custom_fields: Annotated[
            list[CustomFieldValue] | None,
            Field(description="Custom field values. Each entry needs 'field' (ID) and 'value'."),
        ] = None,
    ) -> str:
        """Update metadata of an existing document. Only the given fields change.

        Note: tag_ids replaces ALL existing tags. To add a tag, include all
        existing tag IDs plus the new one.
        """

        async def run() -> str:
            update = DocumentUpdate(
                document_id=document_id,
                title=title,
                correspondent_id=correspondent_id,
                document_type_id=document_type_id,
                tag_ids=tag_ids,
                archive_serial_number=archive_serial_number,
                created=created,
                custom_fields=custom_fields,
            )
            doc = await self._service_factory().update_document(update)
            return f"Document #{document_id} updated successfully!\n\n{render_document(doc)}"

        return await _guarded(run)

    async def delete_document(
        self,
        document_id: Annotated[
            int, Field(gt=0, description="The ID of the document to delete. This action is PERMANENT!")
        ],
        confirm: Annotated[
            bool,
            Field(description="Must be set to true to confirm deletion. Prevents accidental deletions."),
        ] = False,
    ) -> str:
        """Permanently delete a document from Paperless NGX. Requires confirm=true."""

        async def run() -> str:
            if not confirm:
                return "Error: Deletion not confirmed. Set confirm=true to permanently delete the document."
            await self._service_factory().delete_document(document_id)
            return f"Document #{document_id} has been permanently deleted."

        return await _guarded(run)

    async def get_document_download_url(
        self,
        document_id: DocumentId,
        original: Annotated[
            bool,
            Field(description="If true, get the original uploaded file; otherwise the archived PDF."),
        ] = False,
    ) -> str:
        """Get the download URL for a document file (archived PDF or original upload)."""

        async def run() -> str:
            url = await self._service_factory().get_download_url(document_id, original=original)
            return "\n".join(
                [
                    "**Download URL:**",
                    url,
                    "",
                    "**Note:** This URL requires authentication. Include your API token in the "
                    "Authorization header: `Authorization: Token YOUR_TOKEN`",
                ]
            )

        return await _guarded(run)

    async def get_suggestions(self, document_id: DocumentId) -> str:
        """Get ML-based suggestions (correspondents, tags, document types, dates) for a document."""

        async def run() -> str:
            suggestions = await self._service_factory().get_suggestions(document_id)
            return render_suggestions(document_id, suggestions)

        return await _guarded(run)

    async def upload_document(
        self,
        filename: Annotated[str, Field(min_length=1, max_length=255, description="File name incl. extension")],
        content_base64: Annotated[str, Field(min_length=1, description="File content, base64 encoded")],
        title: Annotated[str | None, Field(max_length=255, description="Optional document title")] = None,
        correspondent_id: Annotated[int | None, Field(gt=0)] = None,
        document_type_id: Annotated[int | None, Field(gt=0)] = None,
        tag_ids: list[int] | None = None,
        created: DateStr = None,
    ) -> str:
        """Upload a new document. Paperless consumes it in the background and returns a task ID."""

        async def run() -> str:
            try:
                content = base64.b64decode(content_base64, validate=True)
            except (binascii.Error, ValueError):
                return "Error: content_base64 is not valid base64."
            upload = DocumentUpload(
                filename=filename,
                content=content,
                title=title,
                correspondent_id=correspondent_id,
                document_type_id=document_type_id,
                tag_ids=tag_ids,
                created=created,
            )
            task_id = await self._service_factory().upload_document(upload)
            return (
                f"Document '{filename}' uploaded. Processing task ID: {task_id}\n"
                "The document will appear once Paperless has finished consuming it."
            )

        return await _guarded(run)

    # -- tags / correspondents / document types --------------------------------

    async def list_tags(
        self,
        search: NameSearch = None,
        page: PageNumber = 1,
        page_size: PageSize = DEFAULT_PAGE_SIZE,
        response_format: Format = "markdown",
    ) -> str:
        """List tags, optionally filtered by name. Use the IDs to filter document searches."""

        async def run() -> str:
            data = await self._service_factory().list_tags(
                NameFilter(search=search, page=page, page_size=page_size)
            )
            return format_response(data, response_format, render_tags)

        return await _guarded(run)

    async def create_tag(
        self,
        name: Annotated[str, Field(min_length=1, max_length=128, description="Name of the new tag")],
        color: Annotated[
            str | None, Field(pattern=r"^#[0-9a-fA-F]{6}$", description="Hex color code, e.g. '#ff0000'")
        ] = None,
        match: Annotated[str | None, Field(max_length=256, description="Auto-matching pattern")] = None,
        matching_algorithm: MatchingAlgorithm = None,
        is_insensitive: bool = True,
    ) -> str:
        """Create a new tag, optionally with an auto-matching rule."""

        async def run() -> str:
            tag = await self._service_factory().create_tag(
                NewTag(
                    name=name,
                    color=color,
                    match=match,
                    matching_algorithm=matching_algorithm,
                    is_insensitive=is_insensitive,
                )
            )
            return f"Tag '{tag.name}' created successfully (ID: {tag.id})."

        return await _guarded(run)

    async def list_correspondents(
        self,
        search: NameSearch = None,
        page: PageNumber = 1,
        page_size: PageSize = DEFAULT_PAGE_SIZE,
        response_format: Format = "markdown",
    ) -> str:
        """List correspondents (senders), optionally filtered by name."""

        async def run() -> str:
            data = await self._service_factory().list_correspondents(
                NameFilter(search=search, page=page, page_size=page_size)
            )
            return format_response(data, response_format, render_correspondents)

        return await _guarded(run)

    async def create_correspondent(
        self,
        name: Annotated[str, Field(min_length=1, max_length=128, description="Name of the correspondent")],
        match: Annotated[str | None, Field(max_length=256, description="Auto-matching pattern")] = None,
        matching_algorithm: MatchingAlgorithm = None,
        is_insensitive: bool = True,
    ) -> str:
        """Create a new correspondent, optionally with an auto-matching rule."""

        async def run() -> str:
            corr = await self._service_factory().create_correspondent(
                NewCorrespondent(
                    name=name,
                    match=match,
                    matching_algorithm=matching_algorithm,
                    is_insensitive=is_insensitive,
                )
            )
            return f"Correspondent '{corr.name}' created successfully (ID: {corr.id})."

        return await _guarded(run)

    async def list_document_types(
        self,
        search: NameSearch = None,
        page: PageNumber = 1,
        page_size: PageSize = DEFAULT_PAGE_SIZE,
        response_format: Format = "markdown",
    ) -> str:
        """List document types (Invoice, Contract, ...), optionally filtered by name."""

        async def run() -> str:
            data = await self._service_factory().list_document_types(
                NameFilter(search=search, page=page, page_size=page_size)
            )
            return format_response(data, response_format, render_document_types)

        return await _guarded(run)

    async def create_document_type(
        self,
        name: Annotated[str, Field(min_length=1, max_length=128, description="Name of the document type")],
        match: Annotated[str | None, Field(max_length=256, description="Auto-matching pattern")] = None,
        matching_algorithm: MatchingAlgorithm = None,
        is_insensitive: bool = True,
    ) -> str:
        """Create a new document type, optionally with an auto-matching rule."""

        async def run() -> str:
            dtype = await self._service_factory().create_document_type(
                NewDocumentType(
                    name=name,
                    match=match,
                    matching_algorithm=matching_algorithm,
                    is_insensitive=is_insensitive,
                )
            )
            return f"Document type '{dtype.name}' created successfully (ID: {dtype.id})."

        return await _guarded(run)

    # -- saved views -------------------------------------------------------------

    async def list_saved_views(self, response_format: Format = "markdown") -> str:
        """List saved views (stored filters + sort order) with their IDs."""

        async def run() -> str:
            views = await self._service_factory().list_saved_views()
            return format_response(views, response_format, render_saved_views)

        return await _guarded(run)

    async def execute_saved_view(
        self,
        view_id: Annotated[int, Field(gt=0, description="ID of the saved view to execute")],
        page: PageNumber = 1,
        page_size: PageSize = DEFAULT_PAGE_SIZE,
        response_format: Format = "markdown",
    ) -> str:
        """Run the search stored in a saved view and return the matching documents.

        Only common filter rules are translated (title, correspondent, document
        type, tags, created after/before). Unsupported rules are reported in a
        warning and ignored.
        """

        async def run() -> str:
            result = await self._service_factory().execute_saved_view(
                view_id, Pagination(page=page, page_size=page_size)
            )
            warning = render_untranslated_rules(result.untranslated_rules)
            if response_format == "json":
                return format_response(result.documents, "json", render_documents)
            parts = [f"## Results for Saved View: {result.view.name}"]
            if warning:
                parts.append(warning)
            parts.append(render_documents(result.documents))
            return "\n\n".join(parts)

        return await _guarded(run)

    # -- misc ------------------------------------------------------------------

    async def get_statistics(self, response_format: Format = "markdown") -> str:
        """Get instance statistics: document totals, inbox count, characters, file types."""

        async def run() -> str:
            stats = await self._service_factory().get_statistics()
            return format_response(stats, response_format, render_statistics)

        return await _guarded(run)


def register_tools(server: FastMCP, tools: PaperlessTools) -> None:
    registry = [
        ("paperless_search_documents", tools.search_documents, _READ_ONLY),
        ("paperless_get_document", tools.get_document, _READ_ONLY),
        ("paperless_update_document", tools.update_document, _IDEMPOTENT_WRITE),
        ("paperless_delete_document", tools.delete_document, _DESTRUCTIVE),
        ("paperless_get_document_download_url", tools.get_document_download_url, _READ_ONLY),
        ("paperless_get_suggestions", tools.get_suggestions, _READ_ONLY),
        ("paperless_upload_document", tools.upload_document, _WRITE),
        ("paperless_list_tags", tools.list_tags, _READ_ONLY),
        ("paperless_create_tag", tools.create_tag, _WRITE),
        ("paperless_list_correspondents", tools.list_correspondents, _READ_ONLY),
        ("paperless_create_correspondent", tools.create_correspondent, _WRITE),
        ("paperless_list_document_types", tools.list_document_types, _READ_ONLY),
        ("paperless_create_document_type", tools.create_document_type, _WRITE),
        ("paperless_list_saved_views", tools.list_saved_views, _READ_ONLY),
        ("paperless_execute_saved_view", tools.execute_saved_view, _READ_ONLY),
        ("paperless_get_statistics", tools.get_statistics, _READ_ONLY),
    ]
    for name, handler, annotations in registry:
        server.tool(handler, name=name, annotations=annotations)


def create_server(
    service_factory: ServiceFactory = default_service_factory,
    settings_factory: Callable[[], AppSettings] = AppSettings,
) -> FastMCP:
    server = FastMCP(SERVER_NAME)
    register_tools(server, PaperlessTools(service_factory))

    @server.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        status, payload = health_payload(settings_factory())
        return JSONResponse(payload, status_code=status)

    return server
