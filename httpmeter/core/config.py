"""Configuration for httpmeter.

Values are read from the environment (or a ``.env`` file).  Nothing here is
required: an empty environment yields a working in-process setup with no
exporters attached.
"""

import json
from typing import Annotated, Any, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from httpmeter.core.buckets import (
    DEFAULT_DURATION_BUCKETS,
    DEFAULT_SIZE_BUCKETS,
    validate_boundaries,
)
from httpmeter.core.exceptions import MetricsConfigError


class Settings(BaseSettings):
    """Settings for the HTTP metrics layer.

    Attributes:
        SERVICE_NAME: Service identifier, used as the Pushgateway job name and
            as logging context.
        LOG_LEVEL: Root log level.
        LOG_FORMAT: ``json`` for structured output, ``text`` for local runs.
        METRICS_DURATION_BUCKETS: Request-duration bucket boundaries (seconds).
        METRICS_REQUEST_SIZE_BUCKETS: Request-body bucket boundaries (bytes).
        METRICS_RESPONSE_SIZE_BUCKETS: Response-body bucket boundaries (bytes).
        METRICS_SKIP_PATHS: Exact request paths that are never measured.
        METRICS_SKIP_PREFIXES: Path prefixes that are never measured.
        METRICS_TLS: Whether the server terminates TLS itself.
        METRICS_SERVER_ADDRESS: Fixed ``server_address`` label value.
        METRICS_SERVER_ENABLED: Start the sidecar ``/metrics`` server.
        METRICS_HOST: Sidecar bind address.
        METRICS_PORT: Sidecar port.
        METRICS_PUSHGATEWAY_URL: Pushgateway address; enables push export.
        METRICS_PUSH_INTERVAL: Seconds between pushes.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    SERVICE_NAME: str = "httpmeter"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "text"

    METRICS_DURATION_BUCKETS: Annotated[tuple[float, ...], NoDecode] = DEFAULT_DURATION_BUCKETS
    METRICS_REQUEST_SIZE_BUCKETS: Annotated[tuple[float, ...], NoDecode] = DEFAULT_SIZE_BUCKETS
    METRICS_RESPONSE_SIZE_BUCKETS: Annotated[tuple[float, ...], NoDecode] = DEFAULT_SIZE_BUCKETS

    METRICS_SKIP_PATHS: Annotated[list[str], NoDecode] = []
    METRICS_SKIP_PREFIXES: Annotated[list[str], NoDecode] = []

    METRICS_TLS: bool = False
    METRICS_SERVER_ADDRESS: Optional[str] = None

    METRICS_SERVER_ENABLED: bool = False
    METRICS_HOST: str = "0.0.0.0"
    METRICS_PORT: int = 9090

    METRICS_PUSHGATEWAY_URL: Optional[str] = None
    METRICS_PUSH_INTERVAL: float = 15.0

    @field_validator(
        "METRICS_DURATION_BUCKETS",
        "METRICS_REQUEST_SIZE_BUCKETS",
        "METRICS_RESPONSE_SIZE_BUCKETS",
        "METRICS_SKIP_PATHS",
        "METRICS_SKIP_PREFIXES",
        mode="before",
    )
    @classmethod
    def _split_env_list(cls, value: Any) -> Any:
        """Accept ``/health,/ready`` as well as the JSON form ``["/health"]``."""
        if not isinstance(value, str):
            return value
        value = value.strip()
        if value.startswith("["):
            return json.loads(value)
        return [item.strip() for item in value.split(",") if item.strip()]

    @field_validator(
        "METRICS_DURATION_BUCKETS",
        "METRICS_REQUEST_SIZE_BUCKETS",
        "METRICS_RESPONSE_SIZE_BUCKETS",
    )
    @classmethod
    def _check_buckets(cls, value: tuple[float, ...], info) -> tuple[float, ...]:
        try:
            return validate_boundaries(info.field_name, value)
        except MetricsConfigError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("METRICS_PUSH_INTERVAL")
    @classmethod
    def _check_push_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("METRICS_PUSH_INTERVAL must be positive")
        return value

    @field_validator("METRICS_PORT")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if not 0 <= value <= 65535:
            raise ValueError("METRICS_PORT must be between 0 and 65535")
        return value


settings = Settings()
