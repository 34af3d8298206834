"""Abstract geocoder interface and provider result/error types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from voter_radius.lib.types import Coordinates


@dataclass
class GeocodingResult:
    """First match returned by a geocoding provider."""

    latitude: float
    longitude: float
    matched_address: str | None = None
    raw_response: dict | None = None

    def __post_init__(self) -> None:
        # Reuse the range checks of Coordinates
        Coordinates(self.latitude, self.longitude)

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)


class GeocodingProviderError(Exception):
    """The provider could not answer: timeout, HTTP error, dropped connection or unreadable body.

    A well-formed response without a match is not an error; ``geocode``
    returns None for it.

    Args:
        provider_name: Provider that failed.
        message: Description safe to show to users.
        status_code: HTTP status, when the provider returned one.
    """

    def __init__(self, provider_name: str, message: str, status_code: int | None = None) -> None:
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider_name}: {message}")


class BaseGeocoder(ABC):
    """Abstract geocoder interface."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name identifying this geocoder provider."""

    @abstractmethod
    async def geocode(self, address: str) -> GeocodingResult | None:
        """Geocode a single address with one provider request.

        Args:
            address: Free-text address.

        Returns:
            GeocodingResult for the first match, or None if the provider
            responded without any match.

        Raises:
            GeocodingProviderError: On transport or service errors.
        """
