"""Address → coordinate resolution with a persistent cache in front of the provider."""

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from voter_radius.lib.errors import GeocodeFailure
from voter_radius.lib.geocoder.base import BaseGeocoder, GeocodingProviderError
from voter_radius.lib.geocoder.cache import GeocodeCache
from voter_radius.lib.types import Coordinates


class GeocodeResolver:
    """Resolve free-text addresses, consulting the geocode cache first.

    On a cache miss the provider is called exactly once.  The first match is
    accepted and cached; no match (or a provider error) raises
    ``GeocodeFailure`` and caches nothing, so a later retry may succeed.
    Cache read/write failures are logged and bypassed.

    Args:
        geocoder: Provider used on cache misses.
        cache: Persistent geocode cache.
    """

    def __init__(self, geocoder: BaseGeocoder, cache: GeocodeCache) -> None:
        self._geocoder = geocoder
        self._cache = cache

    async def resolve(self, address: str) -> Coordinates:
        """Resolve ``address`` to coordinates.

        Args:
            address: Address text; used verbatim as the cache key.

        Returns:
            Coordinates of the cached or first provider match.

        Raises:
            GeocodeFailure: If the provider has no match or fails.
        """
        try:
            cached = await self._cache.get(address)
        except SQLAlchemyError as e:
            logger.warning(f"Geocode cache read failed, calling provider: {e}")
            cached = None
        if cached is not None:
            logger.debug("Geocode cache hit")
            return cached

        try:
            result = await self._geocoder.geocode(address)
        except GeocodingProviderError as e:
            raise GeocodeFailure(f"Geocoding failed: {e.message}") from e

        if result is None:
            raise GeocodeFailure("Geocoding failed: address not recognized by the geocoding provider.")

        coordinates = result.coordinates
        try:
            await self._cache.put(address, coordinates)
        except SQLAlchemyError as e:
            logger.warning(f"Geocode cache write failed: {e}")
        return coordinates
