"""Ejecutor de requests contra la API REST de Paperless NGX.

Responsabilidad:
- Config Guard antes de cada llamada (`ensure_configured`).
- Construir URL + query string (sin valores vacíos), headers y cuerpo.
- Acotar la llamada completa por timeout.
- Devolver el JSON decodificado, el sentinel de éxito (204/vacío), o lanzar
  un `PaperlessError` ya clasificado. Nunca devuelve resultados a medias.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping

import httpx

from adapters.http_client import build_async_client, build_headers
from core.config import AppSettings, ConnectionConfig, ensure_configured
from core.domain.errors import (
    InvalidResponseError,
    RequestTimeoutError,
    TransportFailureError,
    UnreachableError,
)
from core.interfaces.resource_client import SUCCESS_SENTINEL, FileTuple
from core.services.error_classifier import build_http_error
from core.services.query_builder import compact_params

logger = logging.getLogger(__name__)


def _read_error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


class PaperlessApiClient:
    """Implementación httpx de `core.interfaces.resource_client.ResourceClient`."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def connection(self) -> ConnectionConfig:
        return ensure_configured(self._settings)

    def resolve_url(self, path: str) -> str:
        _check_path(path)
        return f"{self.connection().base_url}{path}"

    async def execute(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        files: Mapping[str, FileTuple] | None = None,
        form_data: Mapping[str, Any] | None = None,
    ) -> Any:
        connection = ensure_configured(self._settings)
        _check_path(path)

        method = method.upper()
        multipart = files is not None
        request_kwargs: dict[str, Any] = {
            "params": compact_params(params),
            "headers": build_headers(connection, json_body=not multipart and json_body is not None),
        }
        if multipart:
            request_kwargs["files"] = dict(files or {})
            if form_data:
                request_kwargs["data"] = dict(form_data)
        elif json_body is not None:
            request_kwargs["content"] = json.dumps(json_body).encode("utf-8")

        logger.debug("%s %s params=%s", method, path, request_kwargs["params"])

        timeout = connection.timeout_seconds
        try:
            async with build_async_client(connection, transport=self._transport) as client:
                response = await asyncio.wait_for(
                    client.request(method, path, **request_kwargs),
                    timeout=timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("%s %s timed out after %ss", method, path, timeout)
            raise RequestTimeoutError(
                f"Request timed out after {timeout:g} seconds. "
                "The Paperless server may be slow or unreachable."
            ) from exc
        except httpx.ConnectError as exc:
            logger.warning("%s %s: connection failed: %s", method, path, exc)
            raise UnreachableError(
                f"Could not connect to Paperless at {connection.base_url}. "
                "Please verify the URL is correct and the server is running."
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("%s %s: transport failure: %s", method, path, exc)
            raise TransportFailureError(f"Request failed: {str(exc) or type(exc).__name__}") from exc

        logger.debug("%s %s -> HTTP %s", method, path, response.status_code)
        return _decode_response(response)


def _check_path(path: str) -> None:
    if not path.startswith("/"):
        raise ValueError(f"API path must start with '/': {path!r}")


def _decode_response(response: httpx.Response) -> Any:
    if not response.is_success:
        raise build_http_error(response.status_code, _read_error_body(response))

    if response.status_code == 204 or not response.content:
        return dict(SUCCESS_SENTINEL)

    try:
        return response.json()
    except ValueError as exc:
        raise InvalidResponseError(
            "Paperless returned a response that is not valid JSON.",
            status_code=response.status_code,
            response_body=response.text,
        ) from exc

