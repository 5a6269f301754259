"""Configuration management using Pydantic Settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    storage_backend: str = "memory"  # memory|file
    storage_path: str = str(Path.home() / ".localgraph" / "storage")
    storage_backup_retention_days: int = 30

    # Adapter registry (backend -> import path)
    storage_adapters: dict[str, str] = Field(
        default_factory=lambda: {
            "memory": "localgraph.infrastructure.storage.in_memory_store:InMemoryStorageAdapter",
            "file": "localgraph.infrastructure.storage.file_store:LocalFileStorageAdapter",
        }
    )
    storage_adapter_path: str = ""

    # Graph snapshot slot
    graph_item_kind: str = "memory"
    graph_document_type: str = "graph"

    # Search defaults
    graph_default_max_depth: int = 5
    graph_default_traverse_depth: int = 2

    # Observability
    log_level: str = "INFO"
    log_json: bool = False
    enable_tracing: bool = False


settings = Settings()
