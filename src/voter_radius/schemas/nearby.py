"""Pydantic v2 schemas for nearby-voter search and cache warming."""

from datetime import date

from pydantic import BaseModel, Field

from voter_radius.lib.routing import OrderMode


class SearchRequest(BaseModel):
    """A radius search around a free-text address.

    Values are checked by the retrieval service against the configured
    allow-lists, so out-of-range input surfaces as a search validation error.
    """

    address: str = Field(default="", description="Free-text street address")
    radius: float = Field(default=0.0, description="Search radius in miles (must be > 0)")
    county: str = Field(default="", description="County code, e.g. VOL")
    party: str = Field(default="ALL", description="Party code, or ALL")
    order: OrderMode = Field(default=OrderMode.STREET, description="street or route")


class VoterRecordResponse(BaseModel):
    """One voter at a nearby address."""

    model_config = {"from_attributes": True}

    county: str
    address_id: int
    voter_id: int
    voter_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email_address: str | None = None
    phone_number: str | None = None
    birth_date: date | None = None
    party: str | None = None
    voter_address: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class SearchResult(BaseModel):
    """Ordered voters near the resolved origin."""

    latitude: float
    longitude: float
    radius: float
    county: str
    party: str
    order: OrderMode
    candidates: int = Field(description="Addresses within the radius")
    cache_hits: int = Field(description="Rows served from the result cache")
    fetched: int = Field(description="Rows fetched from the registry")
    records: list[VoterRecordResponse] = Field(default_factory=list)


class WarmSummary(BaseModel):
    """Outcome of a cache warm run."""

    county: str
    party: str
    strategy: str
    requested: int = Field(description="Distinct address ids requested")
    skipped_fresh: int = Field(default=0, description="Ids skipped because the cache is fresh")
    fetched_ids: int = Field(default=0, description="Ids sent to the registry")
    chunks: int = 0
    rows: int = Field(default=0, description="Registry rows fetched")
    written: int = Field(default=0, description="Rows written to the cache")
    dry_run: bool = False
    elapsed_ms: float = 0.0
