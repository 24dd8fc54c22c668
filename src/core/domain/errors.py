"""Taxonomía de errores de la capa de acceso a la API.

Por qué una jerarquía de excepciones:
- Cada fallo de una llamada produce exactamente UN error clasificado que se
  propaga al caller (nunca se reintenta ni se convierte en resultado vacío).
- `category` es estable y apta para decisiones programáticas (p.ej. si el
  caller quiere reintentar un 429); `message` es siempre apto para el usuario.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categorías estables de fallo."""

    CONFIGURATION = "configuration"
    BAD_REQUEST = "bad_request"
    AUTHENTICATION = "authentication"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    HTTP_ERROR = "http_error"
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    TRANSPORT = "transport"
    INVALID_RESPONSE = "invalid_response"


class PaperlessError(Exception):
    """Error clasificado: mensaje accionable + status HTTP opcional + cuerpo crudo."""

    default_category = ErrorCategory.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: Any = None,
        category: ErrorCategory | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.category = category or self.default_category

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(category={self.category.value!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


class ConfigurationError(PaperlessError):
    """Faltan settings obligatorios; se detecta antes de cualquier I/O."""

    default_category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, *, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])


class HTTPStatusError(PaperlessError):
    """Respuesta no-2xx ya clasificada por `error_classifier`."""

    default_category = ErrorCategory.HTTP_ERROR


class ClientHTTPError(HTTPStatusError):
    """4xx: problema de input o de permisos del caller."""


class ServerHTTPError(HTTPStatusError):
    """5xx: inestabilidad remota. Se sugiere reintentar más tarde (no lo hacemos aquí)."""

    default_category = ErrorCategory.SERVER_ERROR


class RequestTimeoutError(PaperlessError):
    default_category = ErrorCategory.TIMEOUT


class UnreachableError(PaperlessError):
    default_category = ErrorCategory.UNREACHABLE


class TransportFailureError(PaperlessError):
    default_category = ErrorCategory.TRANSPORT


class InvalidResponseError(PaperlessError):
    """Respuesta 2xx que no es JSON o no tiene la forma esperada."""

    default_category = ErrorCategory.INVALID_RESPONSE
