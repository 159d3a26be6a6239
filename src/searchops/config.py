from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ErrorPolicy = Literal["strict", "lenient"]

MAX_BATCH_SIZE = 10000


class AppConfig(BaseModel):
    """Application-specific configuration values."""

    name: str = "searchops"
    log_level: str = "INFO"
    # Transport settings for FastMCP: "stdio" (default), "http", or "sse"
    transport: Literal["stdio", "http", "sse"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000


class ClusterConfig(BaseModel):
    """Search cluster endpoints and connection values."""

    hosts: List[str] = Field(default_factory=lambda: ["http://localhost:9200"])
    # Seconds a host stays out of rotation after a transport failure
    cooldown_seconds: float = 60.0
    timeout: float = 30.0
    verify_ssl: bool = True
    username: Optional[str] = None
    password: Optional[str] = None
    api_key: Optional[str] = None


class OpsConfig(BaseModel):
    """Defaults applied by the operations layer."""

    # "_doc" selects typeless endpoints; anything else uses {index}/{type}/...
    doc_type: str = "_doc"
    batch_size: int = 1000
    scroll_ttl: int = 60
    # "strict" raises on error responses, "lenient" logs them and yields None
    error_policy: ErrorPolicy = "strict"


class Settings(BaseSettings):
    """Top-level settings loaded from environment variables and .env only."""

    model_config = SettingsConfigDict(
        env_prefix="SEARCHOPS_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    cluster: ClusterConfig = ClusterConfig()
    ops: OpsConfig = OpsConfig()


def clamp_batch_size(value: Optional[int], default: int = 1000) -> int:
    """Clamp a requested batch size to [1, MAX_BATCH_SIZE]; falsy means default."""
    size = int(value or default)
    return max(1, min(size, MAX_BATCH_SIZE))


def load_settings() -> Settings:
    """Load settings from environment variables and .env only."""
    return Settings()  # type: ignore[call-arg]
