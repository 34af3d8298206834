"""GeocodedAddress model — the spatial store's table of geocoded voter addresses."""

from geoalchemy2 import Geometry
from sqlalchemy import Double, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from voter_radius.models.base import SpatialBase


class GeocodedAddress(SpatialBase):
    """A registry address with its coordinates.

    ``location`` duplicates ``lon``/``lat`` as a POINT so containment tests
    can use the spatial index.
    """

    __tablename__ = "geocoded_addresses"

    address_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    lat: Mapped[float] = mapped_column(Double, nullable=False, index=True)
    lon: Mapped[float] = mapped_column(Double, nullable=False, index=True)
    full_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    county: Mapped[str | None] = mapped_column(String(3), nullable=True)
    location: Mapped[object] = mapped_column(
        Geometry(geometry_type="POINT", srid=4326, spatial_index=True),
        nullable=False,
    )
