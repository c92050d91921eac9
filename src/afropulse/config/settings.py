"""Application settings loaded from environment variables / .env.

Hey future me - every setting has a sane default so the app boots without ANY
env vars (catalog just reports "not configured" and the pipeline degrades).
Nested groups use a double underscore:

    AFROPULSE_CATALOG__CLIENT_ID=...
    AFROPULSE_AGGREGATION__MAX_RESULTS=20
    AFROPULSE_SOCIAL__FEED_URLS='["https://feeds.example/social"]'
"""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from afropulse.domain.dtos import SourceType
from afropulse.domain.value_objects.genre import TOP_ARTISTS


class CatalogSettings(BaseModel):
    """Streaming catalog (Spotify Web API) settings."""

    client_id: str = ""
    client_secret: str = ""
    token_url: str = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint
    api_base_url: str = "https://api.spotify.com/v1"
    market: str = "NG"
    search_limit: int = Field(default=50, ge=1, le=50)
    searches_per_minute: int = Field(default=20, ge=1)
    search_queries: list[str] = Field(
        default_factory=lambda: [
            "genre:afrobeats",
            "burna boy OR davido OR wizkid OR rema",
            "tems OR ayra starr OR tyla OR asake",
            "afrobeats OR afrobeat",
            "kizz daniel OR fireboy OR joeboy OR omah lay",
            "olamide OR zlatan OR naira marley OR bella shmurda",
        ]
    )
    playlist_ids: list[str] = Field(
        default_factory=lambda: [
            "37i9dQZF1DX7Jl5KP2eZaS",  # Afro Hits
            "37i9dQZF1DWYkaDif7Ztbp",  # Afrobeats Hits
        ]
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


class MentionFeedSettings(BaseModel):
    """A group of mention feeds (social platforms or web press)."""

    enabled: bool = True
    feed_urls: list[str] = Field(default_factory=list)


class AggregationSettings(BaseModel):
    """Knobs of the merge/score/rank pipeline."""

    max_results: int = Field(default=20, ge=1)
    adapter_timeout_seconds: float = Field(default=15.0, gt=0)
    pad_with_fallback: bool = True
    register_aliases: bool = False
    source_priority: list[SourceType] = Field(
        default_factory=lambda: [SourceType.CATALOG, SourceType.WEB, SourceType.SOCIAL]
    )
    top_artists: list[str] = Field(default_factory=lambda: list(TOP_ARTISTS))

    @field_validator("source_priority")
    @classmethod
    def _catalog_first(cls, value: list[SourceType]) -> list[SourceType]:
        # Catalog seeds identity - it has to be merged first
        if not value or value[0] is not SourceType.CATALOG:
            raise ValueError("source_priority must start with 'catalog'")
        if len(set(value)) != len(value):
            raise ValueError("source_priority must not contain duplicates")
        return value


class StorageSettings(BaseModel):
    """Local JSON storage."""

    data_dir: Path = Path("data")
    selected_releases_file: str = "selected-releases.json"

    @property
    def selected_releases_path(self) -> Path:
        return self.data_dir / self.selected_releases_file


class HttpSettings(BaseModel):
    """Shared HTTP client pool settings."""

    timeout: float = Field(default=30.0, gt=0)
    max_connections: int = Field(default=50, ge=1)
    max_keepalive: int = Field(default=20, ge=0)


class ObservabilitySettings(BaseModel):
    """Logging settings."""

    log_level: str = "INFO"
    json_logs: bool = False


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_prefix="AFROPULSE_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "afropulse"
    api_host: str = "127.0.0.1"
    api_port: int = Field(default=8000, ge=1, le=65535)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    social: MentionFeedSettings = Field(default_factory=MentionFeedSettings)
    web: MentionFeedSettings = Field(default_factory=MentionFeedSettings)
    aggregation: AggregationSettings = Field(default_factory=AggregationSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton. Call get_settings.cache_clear() in tests."""
    return Settings()
