"""US Census Bureau geocoder provider.

Uses the Census Geocoding API (https://geocoding.geo.census.gov/geocoder/)
for one-line address to coordinate resolution.
"""

import httpx
from loguru import logger

from voter_radius.lib.geocoder.base import BaseGeocoder, GeocodingProviderError, GeocodingResult

CENSUS_API_URL = "https://geocoding.geo.census.gov/geocoder/locations/onelineaddress"
CENSUS_BENCHMARK = "Public_AR_Current"
DEFAULT_TIMEOUT = 10.0


class CensusGeocoder(BaseGeocoder):
    """US Census Bureau geocoder provider.

    Args:
        timeout: Request timeout in seconds; a timeout is a provider error.
        client: Optional shared ``httpx.AsyncClient``.  When omitted a
            short-lived client is opened per request.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, client: httpx.AsyncClient | None = None) -> None:
        self._timeout = timeout
        self._client = client

    @property
    def provider_name(self) -> str:
        return "census"

    async def geocode(self, address: str) -> GeocodingResult | None:
        """Geocode an address using the Census Bureau API.

        Args:
            address: Free-text one-line address.

        Returns:
            GeocodingResult for the first match, or None if the provider found no match.

        Raises:
            GeocodingProviderError: On transport or service errors (timeout, HTTP error, connection).
        """
        params = {
            "address": address,
            "benchmark": CENSUS_BENCHMARK,
            "format": "json",
        }

        try:
            if self._client is not None:
                response = await self._client.get(CENSUS_API_URL, params=params, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(CENSUS_API_URL, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("Census geocoder timeout for address (redacted)")
            raise GeocodingProviderError("census", "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Census geocoder HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "census", f"Provider returned HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Census geocoder transport error: {type(e).__name__}")
            raise GeocodingProviderError("census", "Connection to geocoding provider failed") from e
        except ValueError as e:
            logger.warning("Census geocoder returned a non-JSON body")
            raise GeocodingProviderError("census", "Provider returned an unreadable response") from e

        return self._parse_response(data)

    def _parse_response(self, data: dict) -> GeocodingResult | None:
        """Parse a Census API response, accepting the first address match.

        Args:
            data: Raw JSON response from Census API.

        Returns:
            GeocodingResult or None if no match found.
        """
        try:
            matches = (data.get("result") or {}).get("addressMatches") or []
            if not matches:
                return None

            first = matches[0]
            coords = first.get("coordinates") or {}
            lon = coords.get("x")
            lat = coords.get("y")
            if lat is None or lon is None:
                return None

            return GeocodingResult(
                latitude=float(lat),
                longitude=float(lon),
                matched_address=first.get("matchedAddress"),
                raw_response=data,
            )
        except (AttributeError, ValueError, TypeError) as e:
            logger.warning(f"Failed to parse Census geocoder response: {e}")
            raise GeocodingProviderError("census", f"Failed to parse response: {e}") from e
