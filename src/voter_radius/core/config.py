"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
A single ``Settings`` value is built at process start and passed down explicitly.
"""

import re
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from voter_radius.lib.fetcher.strategies import canonical_strategy_name


def _split_codes(raw: str) -> list[str]:
    return [c.strip().upper() for c in raw.split(",") if c.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Local store: geocoded addresses, geocode cache, cached voters
    database_url: str = Field(
        description="Async connection string for the spatial/cache store (PostgreSQL+PostGIS)",
    )
    database_schema: str | None = Field(
        default=None,
        description="PostgreSQL schema for isolated environments (e.g., pr_42)",
    )

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not re.match(r"^[a-z_][a-z0-9_]{0,62}$", v):
            msg = "Invalid database_schema: must match ^[a-z_][a-z0-9_]{0,62}$"
            raise ValueError(msg)
        return v

    # Remote registry store (read-only)
    registry_database_url: str = Field(
        description="Async connection string for the remote voter registry store",
    )

    # Result cache
    cache_ttl_days: int = Field(
        default=30,
        description="Days a cached voter row stays fresh",
        gt=0,
    )
    cache_insert_batch_size: int = Field(
        default=200,
        description="Rows per INSERT statement when refreshing the cache",
        gt=0,
    )

    # Batch fetching
    fetch_chunk_size: int = Field(
        default=200,
        description="Location ids per registry query",
        gt=0,
    )
    fetch_strategy: str = Field(
        default="registry",
        description="Join strategy: registry, address, derived or diagnostic",
    )
    fetch_max_concurrency: int = Field(
        default=4,
        description="Maximum registry chunk queries in flight per request",
        gt=0,
    )

    @field_validator("fetch_strategy")
    @classmethod
    def validate_fetch_strategy(cls, v: str) -> str:
        return canonical_strategy_name(v)

    # Candidate lookup
    candidate_prefilter: Literal["envelope", "latlon"] = Field(
        default="envelope",
        description="Bounding-box prefilter: PostGIS envelope containment or plain lat/lon ranges",
    )

    # Geocoding
    geocoder_timeout: float = Field(
        default=10.0,
        description="Census geocoder request timeout in seconds",
        gt=0,
    )

    # Allow-lists
    allowed_counties: str = Field(
        default="ALA,BRE,BRO,VOL,DAD",
        description="Comma-separated county codes accepted by searches",
    )
    allowed_parties: str = Field(
        default="ALL,DEM,REP,NPA",
        description="Comma-separated party codes accepted by searches (ALL disables the filter)",
    )

    @property
    def allowed_county_list(self) -> list[str]:
        """Parse allowed counties into an upper-case list."""
        return _split_codes(self.allowed_counties)

    @property
    def allowed_party_list(self) -> list[str]:
        """Parse allowed parties into an upper-case list."""
        return _split_codes(self.allowed_parties)

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version prefix",
    )


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()  # type: ignore[call-arg]
