"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/MCP) lean config de forma consistente.
- El "Config Guard" vive junto a la config: construir `ConnectionConfig`
  ES la verificación de que URL y token existen.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.errors import ConfigurationError


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias).

    Objetivo: permitir ejecutar el servidor desde un cliente MCP sin editar
    un `.env` dentro del proyecto.
    """

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "paperless-mcp"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "paperless-mcp"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "paperless-mcp"
    return Path.home() / ".config" / "paperless-mcp"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# paperless-mcp user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


_URL_HELP = (
    "PAPERLESS_URL environment variable is not set. "
    "Please configure it with your Paperless NGX server URL (e.g., https://paperless.example.com)"
)
_TOKEN_HELP = (
    "PAPERLESS_TOKEN environment variable is not set. "
    "Please configure it with an API token from your Paperless NGX server. "
    "You can create one in Settings → API Tokens."
)


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.

    Nota: URL y token vacíos NO son un error aquí. El proceso arranca igual
    (para poder inspeccionar /health o `doctor`) y cada llamada de datos
    falla en `ensure_configured` hasta que se corrija.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAPERLESS_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    url: str = Field(
        default="",
        description="Base URL del servidor Paperless NGX (sin barra final).",
    )
    token: str = Field(
        default="",
        description="API token de Paperless NGX (Settings → API Tokens).",
    )
    auth_scheme: str = Field(
        default="Token",
        min_length=1,
        description="Esquema del header Authorization.",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout total por request (segundos).",
    )

    transport: Literal["http", "stdio"] = Field(
        default="http",
        validation_alias=AliasChoices("PAPERLESS_MCP_TRANSPORT", "TRANSPORT", "transport"),
        description="Transporte MCP: 'http' (remoto) o 'stdio' (subproceso local).",
    )
    host: str = Field(
        default="0.0.0.0",
        validation_alias=AliasChoices("PAPERLESS_MCP_HOST", "HOST", "host"),
    )
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PAPERLESS_MCP_PORT", "PORT", "port"),
    )
    log_level: str = Field(
        default="INFO",
        description="Nivel de logging (DEBUG, INFO, WARNING...).",
    )

    @field_validator("url", "token", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("url")
    @classmethod
    def _drop_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("transport", mode="before")
    @classmethod
    def _lower_transport(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def missing_settings(self) -> list[str]:
        """Nombres de las variables obligatorias que faltan (orden estable)."""

        missing: list[str] = []
        if not self.url:
            missing.append("PAPERLESS_URL")
        if not self.token:
            missing.append("PAPERLESS_TOKEN")
        return missing

    @property
    def is_configured(self) -> bool:
        return not self.missing_settings()


class ConnectionConfig(BaseModel):
    """Valor inmutable con todo lo necesario para hablar con la API remota.

    Se construye con `ensure_configured` y se pasa al ejecutor de requests;
    nunca se lee del entorno desde el adaptador HTTP.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1, repr=False)
    auth_scheme: str = Field(default="Token", min_length=1)
    timeout_seconds: float = Field(default=30.0, gt=0)

    @property
    def authorization(self) -> str:
        return f"{self.auth_scheme} {self.token}"


def ensure_configured(settings: AppSettings) -> ConnectionConfig:
    """Config Guard: valida URL + token y devuelve un `ConnectionConfig`.

    Se invoca antes de CADA llamada saliente (es barato) para que un proceso
    de larga vida detecte config corregida sin reiniciar.
    """

    missing = settings.missing_settings()
    if missing:
        helps = {"PAPERLESS_URL": _URL_HELP, "PAPERLESS_TOKEN": _TOKEN_HELP}
        message = " ".join(helps[name] for name in missing)
        raise ConfigurationError(message, missing=missing)

    return ConnectionConfig(
        base_url=settings.url,
        token=settings.token,
        auth_scheme=settings.auth_scheme,
        timeout_seconds=settings.request_timeout_seconds,
    )
