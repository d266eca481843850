"""Configuración del harness.

Por qué aquí:
- Centraliza imagen, puertos, timeouts y política de reintentos
  (pydantic-settings) para que adaptadores y CLI lean lo mismo.
- Todo se puede pasar por código; las variables `TWISP_*` solo sobreescriben
  defaults en CI.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_IMAGE = "public.ecr.aws/twisp/local:latest"


class HarnessSettings(BaseSettings):
    """Configuración central del harness.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin lógica en los adaptadores.
    """

    model_config = SettingsConfigDict(
        env_prefix="TWISP_",
        extra="ignore",
        case_sensitive=False,
    )

    image: str = Field(
        default=DEFAULT_IMAGE,
        min_length=1,
        description="Imagen de referencia del ledger local.",
    )
    exposed_ports: list[int] = Field(
        default_factory=lambda: [3000, 8080, 8081],
        min_length=1,
        description="Puertos TCP del contenedor a publicar.",
    )
    health_path: str = Field(
        default="/healthcheck",
        pattern=r"^/",
        description="Path del endpoint de salud.",
    )
    health_port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Puerto del contenedor que sirve healthcheck y GraphQL.",
    )
    api_path: str = Field(
        default="/financial/v1/graphql",
        pattern=r"^/",
        description="Path del endpoint GraphQL.",
    )

    startup_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Tiempo máximo hasta que el healthcheck responde (segundos).",
    )
    health_poll_interval_seconds: float = Field(
        default=0.5,
        gt=0,
        description="Pausa entre sondeos del healthcheck (segundos).",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request GraphQL (segundos).",
    )

    max_retries: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Intentos máximos ante fallos de conexión transitorios.",
    )
    retry_base_delay_seconds: float = Field(
        default=0.2,
        ge=0,
        description="Espera base del backoff exponencial (segundos).",
    )

    log_prefix: str = Field(
        default="[twisp]",
        description="Prefijo de las líneas de log reenviadas desde el contenedor.",
    )
    keep_alive: bool = Field(
        default=False,
        description="No terminar el contenedor en cleanup (depuración local).",
    )
