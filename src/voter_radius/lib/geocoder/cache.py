"""Persistent geocode cache backed by the local store.

Keys are the address text exactly as entered (no normalization).  Entries
are write-once: ``put`` is an insert-or-ignore, so two writers racing on the
same address both succeed and the first row wins.
"""

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from voter_radius.lib.types import Coordinates
from voter_radius.models.geocode_cache import GeocodeCacheEntry


def _insert_ignore(dialect_name: str, values: dict):
    """Build an INSERT that silently skips an existing primary key."""
    table = GeocodeCacheEntry.__table__
    if dialect_name == "postgresql":
        return pg_insert(table).values(**values).on_conflict_do_nothing(index_elements=["address"])
    if dialect_name == "sqlite":
        return sqlite_insert(table).values(**values).on_conflict_do_nothing(index_elements=["address"])
    # MySQL / MariaDB
    return table.insert().values(**values).prefix_with("IGNORE")


class GeocodeCache:
    """Get/put access to the ``geocode_cache`` table.

    Args:
        session_factory: Session factory for the local store.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, address: str) -> Coordinates | None:
        """Return cached coordinates for ``address``, or None on a miss."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(GeocodeCacheEntry.latitude, GeocodeCacheEntry.longitude).where(
                    GeocodeCacheEntry.address == address
                )
            )
            row = result.first()
        if row is None:
            return None
        return Coordinates(latitude=row.latitude, longitude=row.longitude)

    async def put(self, address: str, coordinates: Coordinates) -> None:
        """Store coordinates for ``address`` unless an entry already exists."""
        async with self._session_factory() as session:
            stmt = _insert_ignore(
                session.get_bind().dialect.name,
                {
                    "address": address,
                    "latitude": coordinates.latitude,
                    "longitude": coordinates.longitude,
                    "cached_at": datetime.now(UTC),
                },
            )
            await session.execute(stmt)
            await session.commit()
