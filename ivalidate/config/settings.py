"""Application settings using Pydantic."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    data_dir: Path = Path("data")
    storage_read_attempts: int = 3
    storage_read_delay_seconds: float = 0.1
    cache_ttl_seconds: int = 3600

    # Generative-text provider retries (overload only)
    provider_max_attempts: int = 3
    provider_backoff_seconds: float = 2.0
    provider_backoff_max_seconds: float = 30.0

    # Discussion source (Reddit)
    discussion_base_url: str = "https://www.reddit.com"
    discussion_user_agent: str = "iValidate/1.0 (Research Tool)"
    discussion_request_delay_seconds: float = 1.5
    discussion_search_timeout_seconds: float = 8.0
    discussion_comment_timeout_seconds: float = 5.0
    discussion_results_per_query: int = 10
    discussion_max_posts: int = 100
    discussion_max_queries: int = 6
    discussion_comment_threshold: int = 5
    discussion_comment_fetch_limit: int = 50
    discussion_cache_ttl_seconds: int = 0  # 0 disables caching of search results

    # Content analysis
    content_analysis_max_posts: int = 30

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
