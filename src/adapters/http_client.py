"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y autenticación para todas las llamadas.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import ConnectionConfig


def build_headers(connection: ConnectionConfig, *, json_body: bool = False) -> dict[str, str]:
    """Headers de una llamada a la API.

    Sin `Content-Type` salvo para cuerpos JSON: en multipart lo fija httpx
    (con el boundary correcto).
    """

    headers = {
        "Authorization": connection.authorization,
        "Accept": "application/json",
    }
    if json_body:
        headers["Content-Type"] = "application/json"
    return headers


def build_async_client(
    connection: ConnectionConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Un cliente por llamada: no hay pool compartido que sincronizar.
    - Centraliza el timeout para que todas las operaciones se comporten igual.
    """

    return httpx.AsyncClient(
        base_url=connection.base_url,
        timeout=httpx.Timeout(connection.timeout_seconds),
        follow_redirects=True,
        transport=transport,
    )
