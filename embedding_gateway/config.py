"""Application configuration using pydantic-settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from embedding_gateway.core.catalog import DEFAULT_CATALOG, ModelDescriptor

COPILOT_EMBEDDINGS_URL = "https://api.individual.githubcopilot.com/embeddings"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"


class ServerSettings(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER__", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "info"


def _default_copilot_headers() -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Editor-Version": "vscode/1.95.0",
        "Editor-Plugin-Version": "copilot-chat/0.22.4",
        "Copilot-Integration-Id": "vscode-chat",
        "User-Agent": "GitHubCopilotChat/0.22.4",
        "Openai-Intent": "conversation-panel",
    }


class UpstreamSettings(BaseSettings):
    """Settings for the remote embeddings API."""

    model_config = SettingsConfigDict(env_prefix="UPSTREAM__", extra="ignore")

    url: str = Field(
        default=COPILOT_EMBEDDINGS_URL,
        description="Embeddings endpoint every request is forwarded to",
    )
    connect_timeout: float = Field(default=120.0, description="Connect timeout in seconds")
    read_timeout: float = Field(default=120.0, description="Read timeout in seconds")
    headers: dict[str, str] = Field(
        default_factory=_default_copilot_headers,
        description="Baseline headers sent with every outbound request",
    )

    def baseline_headers(self) -> dict[str, str]:
        """Return a fresh copy of the baseline header set."""
        return dict(self.headers)


class GatewaySettings(BaseSettings):
    """Request handling policy."""

    model_config = SettingsConfigDict(env_prefix="GATEWAY__", extra="ignore")

    path: str = Field(default="/v1/embeddings", description="Inbound endpoint path")
    max_concurrency: int = Field(
        default=10, ge=1, description="Max requests talking to the upstream at once"
    )
    max_queue: int = Field(
        default=0,
        ge=0,
        description="Requests allowed to wait for a worker. 0 = unbounded queue.",
    )
    default_model: str = DEFAULT_EMBEDDING_MODEL
    strict_model: bool = Field(
        default=False,
        description="Reject unknown embedding models instead of falling back",
    )


class Settings(BaseSettings):
    """Root application settings. Loads from environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Sub-configs
    server: ServerSettings = Field(default_factory=ServerSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)

    # Model catalog (configured via JSON or env)
    catalog: list[ModelDescriptor] = Field(
        default_factory=lambda: list(DEFAULT_CATALOG),
        description="Models known to the gateway and their capability types",
    )

    # Application
    debug: bool = False


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
