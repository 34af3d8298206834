"""Two-phase candidate lookup against the geocoded-address table.

Phase one selects rows whose point lies inside the radius's bounding box,
either with PostGIS envelope containment (uses the spatial index) or with
plain lat/lon range predicates.  Phase two keeps only rows whose exact
great-circle distance is within the radius, dropping the box's corners.
"""

import math
from typing import Literal

from loguru import logger
from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from voter_radius.lib.errors import StoreError
from voter_radius.lib.locator.geometry import BoundingBox, bounding_box, haversine_miles
from voter_radius.lib.types import Candidate
from voter_radius.models.geocoded_address import GeocodedAddress

PrefilterMode = Literal["envelope", "latlon"]

WGS84_SRID = 4326


def prefilter_statement(box: BoundingBox, mode: PrefilterMode = "envelope") -> Select:
    """Select geocoded addresses inside ``box``.

    Only scalar columns are selected so the geometry column is never decoded.
    """
    query = select(
        GeocodedAddress.address_id,
        GeocodedAddress.lat,
        GeocodedAddress.lon,
        GeocodedAddress.full_address,
    )
    if mode == "envelope":
        envelope = func.ST_MakeEnvelope(box.lon_min, box.lat_min, box.lon_max, box.lat_max, WGS84_SRID)
        query = query.where(func.ST_Contains(envelope, GeocodedAddress.location))
    else:
        query = query.where(
            GeocodedAddress.lat.between(box.lat_min, box.lat_max),
            GeocodedAddress.lon.between(box.lon_min, box.lon_max),
        )
    return query.order_by(GeocodedAddress.address_id)


class CandidateLocator:
    """Find geocoded addresses within a radius of a point.

    Args:
        session_factory: Session factory for the spatial store.
        prefilter: ``envelope`` (PostGIS) or ``latlon`` (portable range predicates).
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        prefilter: PrefilterMode = "envelope",
    ) -> None:
        self._session_factory = session_factory
        self._prefilter = prefilter

    async def _prefilter_rows(self, box: BoundingBox) -> list:
        try:
            async with self._session_factory() as session:
                result = await session.execute(prefilter_statement(box, self._prefilter))
                return list(result.all())
        except SQLAlchemyError as e:
            logger.error(f"Candidate query failed: {e}")
            raise StoreError("local", "Candidate address query failed") from e

    async def ids_in_box(self, box: BoundingBox) -> list[int]:
        """Return address ids inside ``box`` (no distance refinement)."""
        rows = await self._prefilter_rows(box)
        return list(dict.fromkeys(row.address_id for row in rows))

    async def locate(self, latitude: float, longitude: float, radius_miles: float) -> list[Candidate]:
        """Return addresses within ``radius_miles`` of the origin.

        Args:
            latitude: Origin latitude.
            longitude: Origin longitude.
            radius_miles: Search radius, must be positive.

        Returns:
            Candidates ordered by address id, deduplicated by id.

        Raises:
            ValueError: If the radius is not a positive finite number.
            StoreError: If the spatial store query fails.
        """
        if not (math.isfinite(radius_miles) and radius_miles > 0):
            msg = f"radius_miles must be positive and finite, got {radius_miles}"
            raise ValueError(msg)

        box = bounding_box(latitude, longitude, radius_miles)
        rows = await self._prefilter_rows(box)

        candidates: dict[int, Candidate] = {}
        for row in rows:
            if row.address_id in candidates:
                continue
            if haversine_miles(latitude, longitude, row.lat, row.lon) <= radius_miles:
                candidates[row.address_id] = Candidate(
                    address_id=row.address_id,
                    latitude=row.lat,
                    longitude=row.lon,
                    full_address=row.full_address,
                )

        logger.debug(f"Candidate lookup: prefilter={len(rows)} within_radius={len(candidates)}")
        return list(candidates.values())
