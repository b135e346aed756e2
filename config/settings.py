"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # CATALOG STORE
    # ===================
    catalog_table: str = Field(
        default="prise_list_etm",
        description="Table holding the price-list catalog"
    )
    catalog_key: str = Field(
        default="id",
        description="Natural key column used for upsert conflicts"
    )
    catalog_fetch_limit: int = Field(
        default=10000,
        ge=1,
        le=100000,
        description="Maximum catalog rows loaded for in-memory matching"
    )

    # ===================
    # IMPORT
    # ===================
    import_batch_size: int = Field(
        default=1000,
        ge=1,
        le=10000,
        description="Rows per upsert batch"
    )
    import_batch_delay_ms: int = Field(
        default=100,
        ge=0,
        le=10000,
        description="Pause between batches to go easy on the store"
    )
    import_max_messages: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Maximum error/warning messages returned to the caller"
    )

    # ===================
    # EDITING
    # ===================
    history_limit: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Undo snapshots kept per editing session"
    )

    # ===================
    # MATCHING
    # ===================
    match_top_k: int = Field(
        default=3,
        ge=1,
        le=50,
        description="Suggestions returned per query"
    )
    match_top_k_manufacturer: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Suggestions returned when a candidate shares the manufacturer"
    )
    match_min_score: int = Field(
        default=20,
        ge=0,
        le=100,
        description="Minimum score for a suggestion"
    )
    match_min_score_manufacturer: int = Field(
        default=15,
        ge=0,
        le=100,
        description="Minimum score when a candidate shares the manufacturer"
    )
    match_min_word_length: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Shortest word taking part in keyword matching"
    )
    match_similarity_threshold: float = Field(
        default=0.3,
        ge=0,
        le=1,
        description="Minimum trigram similarity for the similarity tier"
    )
    match_similarity_scorer: str = Field(
        default="trigram",
        pattern="^(trigram|token_sort)$",
        description="Similarity measure used by the similarity tier"
    )
    match_manufacturer_exact_bonus: int = Field(
        default=30,
        description="Score bonus when manufacturers are equal"
    )
    match_manufacturer_partial_bonus: int = Field(
        default=15,
        description="Score bonus when one manufacturer contains the other"
    )
    match_manufacturer_mismatch_penalty: int = Field(
        default=20,
        description="Score penalty when both manufacturers differ"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Origins allowed by CORS"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def import_batch_delay_seconds(self) -> float:
        return self.import_batch_delay_ms / 1000


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
