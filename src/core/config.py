"""
Catalog-Search-Service - Application Configuration

Patterns Applied:
- Pydantic Settings with SettingsConfigDict
- Environment variable prefix CATALOG_SEARCH_ for Catalog-Search-Service
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables with the
    CATALOG_SEARCH_ prefix.
    Example: CATALOG_SEARCH_PORT=8090, CATALOG_SEARCH_MATCH_DISTANCE=200

    Mapping fields accept JSON:
    CATALOG_SEARCH_FIELD_WEIGHTS='{"title": 0.7, "author": 0.3}'
    """

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8090

    # Application metadata
    service_name: str = "catalog-search-service"
    version: str = "0.1.0"
    environment: str = "development"

    # Logging configuration
    log_level: str = "INFO"
    log_json: bool = True

    # Tracing configuration
    tracing_enabled: bool = True
    tracing_console_export: bool = False

    # Search defaults (HTTP contract)
    search_default_limit: int = 10
    search_max_limit: int = 50
    search_default_threshold: float = 0.3
    suggest_default_limit: int = 5
    suggest_threshold: float = 1.0

    # Matcher tuning
    match_location: int = 0
    match_distance: int = 100
    min_match_char_length: int = 2
    max_pattern_length: int = 64
    run_bonus: float = 0.25

    # Searchable fields and their relative weights
    field_weights: dict[str, float] = Field(
        default_factory=lambda: {"title": 0.5, "author": 0.3, "genre": 0.2}
    )

    # Engine behaviour
    max_workers: int = 1
    prefilter_enabled: bool = True
    refresh_on_query: bool = False

    # Catalog collaborator
    seed_catalog: bool = True

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get application settings instance.

    Returns:
        Settings instance with values from environment
    """
    return Settings()
