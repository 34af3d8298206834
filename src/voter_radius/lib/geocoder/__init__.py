"""Geocoder library — Census address geocoding behind a persistent cache.

Public API:
    - BaseGeocoder: Abstract provider interface
    - GeocodingResult: First-match result dataclass
    - GeocodingProviderError: Provider transport/service failure
    - CensusGeocoder: US Census Bureau provider
    - GeocodeCache: Exact-address coordinate cache (get/put)
    - GeocodeResolver: Cache-then-provider resolution
    - get_geocoder: Provider factory
"""

from typing import Any

from voter_radius.lib.geocoder.base import BaseGeocoder, GeocodingProviderError, GeocodingResult
from voter_radius.lib.geocoder.cache import GeocodeCache
from voter_radius.lib.geocoder.census import CensusGeocoder
from voter_radius.lib.geocoder.resolver import GeocodeResolver

_PROVIDERS: dict[str, type[BaseGeocoder]] = {
    "census": CensusGeocoder,
}


def get_geocoder(provider: str = "census", **kwargs: Any) -> BaseGeocoder:
    """Get a geocoder instance by provider name.

    Args:
        provider: Provider name (e.g., "census").
        **kwargs: Forwarded to the provider constructor (e.g., ``timeout=2.0``).

    Raises:
        ValueError: If the provider is not registered.
    """
    cls = _PROVIDERS.get(provider)
    if cls is None:
        msg = f"Unknown geocoder provider: {provider!r}. Available: {list(_PROVIDERS.keys())}"
        raise ValueError(msg)
    return cls(**kwargs)


__all__ = [
    "BaseGeocoder",
    "CensusGeocoder",
    "GeocodeCache",
    "GeocodeResolver",
    "GeocodingProviderError",
    "GeocodingResult",
    "get_geocoder",
]
