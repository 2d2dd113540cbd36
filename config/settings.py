"""Application settings loaded from environment variables and .env files.

Uses pydantic-settings for type-safe configuration. All environment variables
are prefixed with PHOTO_FEED_ to avoid collisions.
"""

from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables and .env files."""

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_base_url: str = "https://api.unsplash.com"
    access_key: str = ""
    api_version: str = "v1"

    # Networking
    request_timeout_sec: float = 30.0
    cache_policy: str = "reload_ignoring_cache"

    # Feed
    feed_page_size: int = 20
    prefetch_threshold: int = 5

    # Search
    search_debounce_sec: float = 0.5
    search_probe_page_size: int = 1
    recent_queries_limit: int = 50

    model_config = {"env_prefix": "PHOTO_FEED_", "env_file": ".env"}
