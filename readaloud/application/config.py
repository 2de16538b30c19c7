"""Application configuration using Pydantic Settings."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "readaloud"
    app_version: str = "0.1.0"
    debug: bool = False

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"

    # Storage: "local" or "dynamodb"
    storage_backend: str = "local"
    aws_region: str = "us-west-2"
    storage_table_name: str = "ReadAloudStorage"

    # Remote synthesis and next-page services
    synthesis_url: str = "http://localhost:8080/synthesize"
    next_page_url: str = "http://localhost:8080/next-page"
    synthesis_timeout_seconds: Optional[float] = None  # None waits indefinitely

    # Browser bridge and continuation
    browser_request_timeout_seconds: float = 10.0
    pending_navigation_timeout_seconds: float = 60.0  # 0 disables expiry

    # Reading
    max_chunk_chars: int = 1500
    history_max_items: int = 10
    restricted_url_prefixes: list[str] = [
        "chrome://",
        "chrome-extension://",
        "edge://",
        "about:",
        "https://chrome.google.com/webstore",
    ]


# Create a singleton instance
settings = Settings()
