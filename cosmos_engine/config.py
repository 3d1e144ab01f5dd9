from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Aggregation & ranking
    MAX_RESULTS: int = 100
    PROVIDER_TIMEOUT_SECONDS: float = 10.0
    DEFAULT_SOURCES: list[str] = Field(default_factory=lambda: ["all"])

    # Model repository / local index
    OBJAVERSE_INDEX_PATH: str = ""
    LOCAL_INDEX_PATH: str = ""

    # Code host
    GITHUB_API_ENABLED: bool = False
    GITHUB_TOKEN: str = ""
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_REQUESTS_PER_MIN: int = 10

    # Web search
    WIKIPEDIA_SEARCH_ENABLED: bool = True
    WIKIPEDIA_API_URL: str = "https://en.wikipedia.org/w/rest.php/v1/search/page"

    HTTP_TIMEOUT_SECONDS: float = 8.0

    # Redis search cache ("" disables it)
    REDIS_URL: str = ""
    SEARCH_CACHE_TTL: int = 3600

    # Layout
    LAYOUT_BASE_RADIUS: float = 50.0
    LAYOUT_RADIUS_JITTER: float = 30.0
    CURVE_SEGMENTS: int = 20
    TIME_STEP: float = 0.01
    FRAME_INTERVAL_SECONDS: float = 1 / 30

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")


def get_settings() -> Settings:
    return Settings()
