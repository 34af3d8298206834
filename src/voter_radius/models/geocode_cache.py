"""GeocodeCacheEntry model — caches provider coordinates per exact address text."""

from datetime import datetime

from sqlalchemy import DateTime, Double, String, func
from sqlalchemy.orm import Mapped, mapped_column

from voter_radius.models.base import Base


class GeocodeCacheEntry(Base):
    """Cached geocoding result keyed by the address exactly as entered.

    Rows are immutable once written; failed lookups are never stored.
    """

    __tablename__ = "geocode_cache"

    address: Mapped[str] = mapped_column(String(500), primary_key=True)
    latitude: Mapped[float] = mapped_column(Double, nullable=False)
    longitude: Mapped[float] = mapped_column(Double, nullable=False)
    cached_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
