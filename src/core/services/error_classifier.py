"""Clasificación de respuestas HTTP de error.

Responsabilidad:
- Extraer un mensaje legible de un cuerpo de error con forma arbitraria
  (Paperless/DRF devuelve `detail`, `error`, `non_field_errors` o errores por campo).
- Mapear el status HTTP a una categoría estable y a un mensaje accionable.

Todo es puro y determinista: no hay I/O ni estado.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping, Sequence

from core.domain.errors import (
    ClientHTTPError,
    ErrorCategory,
    HTTPStatusError,
    ServerHTTPError,
)

UNKNOWN_ERROR = "Unknown error"

DetailMatcher = Callable[[Mapping[str, Any]], "str | None"]

_RESERVED_KEYS = frozenset({"detail", "error", "non_field_errors"})


def _match_detail(body: Mapping[str, Any]) -> str | None:
    value = body.get("detail")
    if isinstance(value, str) and value:
        return value
    return None


def _match_error(body: Mapping[str, Any]) -> str | None:
    value = body.get("error")
    if isinstance(value, str) and value:
        return value
    return None


def _match_non_field_errors(body: Mapping[str, Any]) -> str | None:
    value = body.get("non_field_errors")
    if isinstance(value, list) and value:
        return ", ".join(str(v) for v in value)
    return None


def _match_field_errors(body: Mapping[str, Any]) -> str | None:
    parts: list[str] = []
    for key, value in body.items():
        if key in _RESERVED_KEYS:
            continue
        if isinstance(value, list):
            parts.append(f"{key}: {', '.join(str(v) for v in value)}")
        elif isinstance(value, str):
            parts.append(f"{key}: {value}")
    return "; ".join(parts) or None


# Orden = prioridad. La primera coincidencia gana.
DEFAULT_MATCHERS: tuple[DetailMatcher, ...] = (
    _match_detail,
    _match_error,
    _match_non_field_errors,
    _match_field_errors,
)


def extract_error_detail(body: Any, matchers: Sequence[DetailMatcher] = DEFAULT_MATCHERS) -> str:
    """Mejor esfuerzo para obtener un mensaje humano desde `body`.

    - Cuerpo vacío/ausente -> "Unknown error".
    - String: se intenta parsear como JSON; si no es JSON se devuelve tal cual.
    - Dict: se aplican los matchers en orden.
    - Cualquier otra cosa: serialización JSON cruda.
    """

    if body is None or body == "" or body == b"":
        return UNKNOWN_ERROR

    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")

    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            return body
        if isinstance(body, str):
            return body or UNKNOWN_ERROR

    if isinstance(body, Mapping):
        for matcher in matchers:
            found = matcher(body)
            if found:
                return found

    if not body:
        return UNKNOWN_ERROR
    try:
        return json.dumps(body, ensure_ascii=False, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return str(body)


_SERVER_ERROR_STATUSES = frozenset({500, 502, 503, 504})

_STATUS_CATEGORIES: Mapping[int, ErrorCategory] = {
    400: ErrorCategory.BAD_REQUEST,
    401: ErrorCategory.AUTHENTICATION,
    403: ErrorCategory.PERMISSION_DENIED,
    404: ErrorCategory.NOT_FOUND,
    409: ErrorCategory.CONFLICT,
    413: ErrorCategory.PAYLOAD_TOO_LARGE,
    429: ErrorCategory.RATE_LIMITED,
}

NOT_FOUND_MESSAGE = "Resource not found. Please verify the ID exists in Paperless NGX."
AUTHENTICATION_MESSAGE = (
    "Authentication failed. Your PAPERLESS_TOKEN may be invalid or expired. "
    "Please verify the token in your Paperless NGX settings."
)


def categorize_status(status: int) -> ErrorCategory:
    if status in _STATUS_CATEGORIES:
        return _STATUS_CATEGORIES[status]
    if status in _SERVER_ERROR_STATUSES:
        return ErrorCategory.SERVER_ERROR
    return ErrorCategory.HTTP_ERROR


def classify(status: int, body: Any) -> str:
    """Mensaje accionable para un status + cuerpo de error.

    Para 401 no se incluye el detalle remoto (no filtramos info del servidor
    en fallos de credenciales). Para 404 el mensaje es fijo.
    """

    category = categorize_status(status)

    if category is ErrorCategory.AUTHENTICATION:
        return AUTHENTICATION_MESSAGE
    if category is ErrorCategory.NOT_FOUND:
        return NOT_FOUND_MESSAGE
    if category is ErrorCategory.PAYLOAD_TOO_LARGE:
        return "File too large. Please reduce the file size and try again."
    if category is ErrorCategory.RATE_LIMITED:
        return "Rate limit exceeded. Please wait a moment before making more requests."
    if category is ErrorCategory.SERVER_ERROR:
        return (
            f"Paperless server error (HTTP {status}). The server may be unavailable or "
            "overloaded. Please try again later."
        )

    detail = extract_error_detail(body)
    if category is ErrorCategory.BAD_REQUEST:
        return f"Bad request: {detail}. Please check your input parameters."
    if category is ErrorCategory.PERMISSION_DENIED:
        return (
            f"Permission denied: {detail}. Your API token may lack the required "
            "permissions for this operation."
        )
    if category is ErrorCategory.CONFLICT:
        return f"Conflict: {detail}. The resource may have been modified by another user."
    return f"HTTP {status} error: {detail}"


def build_http_error(status: int, body: Any) -> HTTPStatusError:
    """Construye la excepción clasificada (4xx -> cliente, 5xx -> servidor)."""

    message = classify(status, body)
    category = categorize_status(status)
    if 400 <= status < 500:
        error_cls: type[HTTPStatusError] = ClientHTTPError
    elif 500 <= status < 600:
        error_cls = ServerHTTPError
    else:
        error_cls = HTTPStatusError
    return error_cls(message, status_code=status, response_body=body, category=category)
