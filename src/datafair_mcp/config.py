# Data Fair MCP Server
# File: config.py
# Version: v1

"""Configuration loading for the Data Fair MCP Server."""

from __future__ import annotations

from dataclasses import dataclass
import os
from urllib.parse import urlparse

TRANSPORTS = ("stdio", "http")

# "sse" is accepted for compatibility with older deployments; the HTTP app
# always serves both the SSE and the stateless endpoints.
_TRANSPORT_ALIASES = {"sse": "http", "streamable-http": "http"}


class ConfigError(RuntimeError):
    """Raised when the configuration cannot be used to start a server."""


def _parse_bool_env(name: str, default: bool = False) -> bool:
    """Parse a boolean-like environment variable.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _parse_int_env(
    name: str,
    default: int,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Parse an int environment variable with clamping and safe fallback."""
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        value = int(default)
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            value = int(default)

    if min_value is not None and value < min_value:
        value = min_value
    if max_value is not None and value > max_value:
        value = max_value

    return value


def normalize_transport(value: str | None) -> str:
    """Map a user supplied transport name onto one of TRANSPORTS."""
    name = (value or "stdio").strip().lower()
    return _TRANSPORT_ALIASES.get(name, name)


@dataclass
class DataFairConfig:
    """Configuration values required to talk to a Data Fair instance.

    ``url`` is the site URL of the Data Fair deployment (for example
    ``https://koumoul.com``); the API and the embedded table views are
    derived from it.
    """

    url: str | None
    transport: str = "stdio"

    # Outbound HTTP
    http_timeout: int = 30
    verify_tls: bool = True

    # HTTP transport binding
    host: str = "127.0.0.1"
    port: int = 8000

    log_level: str = "INFO"

    @property
    def api_url(self) -> str:
        """Root of the Data Fair REST API (``/data-fair/api/v1``)."""
        return f"{self.require_url()}/data-fair/api/v1"

    def dataset_page_url(self, dataset_id: str) -> str:
        """Human-facing page of a dataset, used when upstream has no ``page``."""
        return f"{self.require_url()}/data-fair/datasets/{dataset_id}"

    def table_view_url(self, dataset_id: str) -> str:
        """Embedded table view of a dataset, used for filtered-view links."""
        return f"{self.require_url()}/data-fair/next-ui/embed/dataset/{dataset_id}/table"

    def require_url(self) -> str:
        if not self.url:
            raise ConfigError(
                "DATAFAIR_URL is not set. "
                "Please configure the Data Fair site URL before starting the server."
            )
        return self.url

    def validate(self) -> None:
        """Fail fast on unusable configuration.

        Called by the entry point before any transport starts.
        """
        url = self.require_url()
        parsed = urlparse(url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ConfigError(
                f"DATAFAIR_URL must be an absolute http(s) URL, got '{url}'."
            )
        if self.transport not in TRANSPORTS:
            raise ConfigError(
                f"Unknown transport '{self.transport}', "
                f"expected one of: {', '.join(TRANSPORTS)}."
            )

    @classmethod
    def from_env(cls) -> "DataFairConfig":
        """Create configuration from environment variables."""
        raw_url = (os.getenv("DATAFAIR_URL") or "").strip()
        url = raw_url.rstrip("/") or None

        transport = normalize_transport(os.getenv("DATAFAIR_MCP_TRANSPORT"))

        http_timeout = _parse_int_env(
            "DATAFAIR_HTTP_TIMEOUT", default=30, min_value=1, max_value=600
        )
        verify_tls = _parse_bool_env("DATAFAIR_VERIFY_TLS", default=True)

        host = (os.getenv("DATAFAIR_MCP_HOST") or "127.0.0.1").strip()
        port = _parse_int_env(
            "DATAFAIR_MCP_PORT", default=8000, min_value=1, max_value=65535
        )

        log_level = (os.getenv("DATAFAIR_MCP_LOG_LEVEL") or "INFO").strip().upper()

        return cls(
            url=url,
            transport=transport,
            http_timeout=http_timeout,
            verify_tls=verify_tls,
            host=host,
            port=port,
            log_level=log_level,
        )
