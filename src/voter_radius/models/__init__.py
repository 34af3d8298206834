"""ORM model registry — import all models so their tables register on the metadata."""

from voter_radius.models.base import Base, RegistryBase, SpatialBase
from voter_radius.models.cached_voter import CachedVoter
from voter_radius.models.geocode_cache import GeocodeCacheEntry
from voter_radius.models.geocoded_address import GeocodedAddress
from voter_radius.models.registry import Demographics, MasterVoterAddress, VoterMaster

__all__ = [
    "Base",
    "CachedVoter",
    "Demographics",
    "GeocodeCacheEntry",
    "GeocodedAddress",
    "MasterVoterAddress",
    "RegistryBase",
    "SpatialBase",
    "VoterMaster",
]
