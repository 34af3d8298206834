"""Data types shared by the retrieval pipeline.

Dataclasses for coordinates, nearby-address candidates and denormalized
voter rows (the same shape whether read from the registry or the cache).
"""

from dataclasses import dataclass
from datetime import date

# Party filter value that disables party filtering
ALL_PARTIES = "ALL"


def matches_all_parties(party: str) -> bool:
    return party.strip().upper() == ALL_PARTIES


@dataclass(frozen=True)
class Coordinates:
    """A WGS84 point."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not (-90 <= self.latitude <= 90):
            msg = f"latitude must be between -90 and 90, got {self.latitude}"
            raise ValueError(msg)
        if not (-180 <= self.longitude <= 180):
            msg = f"longitude must be between -180 and 180, got {self.longitude}"
            raise ValueError(msg)


@dataclass(frozen=True)
class Candidate:
    """A geocoded address found near the search origin."""

    address_id: int
    latitude: float
    longitude: float
    full_address: str | None = None


@dataclass
class VoterRecord:
    """A voter at a geocoded address, denormalized for display.

    ``latitude``/``longitude`` are attached from the candidate set after
    the cache and registry results are merged.
    """

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

    @property
    def key(self) -> tuple[str, int, int]:
        """Cache identity: (county, address_id, voter_id)."""
        return (self.county, self.address_id, self.voter_id)
