"""Contrato del ejecutor de requests contra la API remota.

Por qué Protocol:
- Los servicios del Core dependen de esta abstracción, no de httpx.
- En tests se sustituye por un fake sin red.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

# Devuelto ante 204 / cuerpo vacío en lugar de intentar decodificar JSON.
SUCCESS_SENTINEL: Mapping[str, str] = {"status": "success"}

# (filename, content, content_type) como espera httpx para multipart.
FileTuple = tuple[str, bytes, str]


@runtime_checkable
class ResourceClient(Protocol):
    """Ejecuta UNA llamada autenticada y acotada por timeout.

    Reglas de diseño:
    - Devuelve el payload decodificado o lanza un `PaperlessError` clasificado.
    - Sin reintentos: la política de retry es del caller.
    """

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
        ...

    def resolve_url(self, path: str) -> str:
        """URL absoluta para `path` (valida config)."""

        ...
